"""
Интерфейсы (порты) для контекста ресурсов.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Callable, Iterator, List, Optional, Protocol

if TYPE_CHECKING:
    from ..shared_kernel import DomainEvent, EntityId
    from .domain import (
        Facility,
        MaintenanceRequest,
        ParkingSlot,
        ParkingWaitlist,
        Room,
    )


class IRoomRepository(Protocol):
    """Интерфейс репозитория номеров."""

    def get(self, room_no: int) -> Room: ...
    def list_available(self) -> List[Room]: ...
    def __iter__(self) -> Iterator[Room]: ...
    def __len__(self) -> int: ...


class IParkingRepository(Protocol):
    """Интерфейс репозитория парковочных мест."""

    def get(self, slot_no: int) -> ParkingSlot: ...
    def first_available(self) -> Optional[ParkingSlot]: ...
    def find_by_guest(self, guest_id: EntityId) -> Optional[ParkingSlot]: ...
    def __iter__(self) -> Iterator[ParkingSlot]: ...
    def __len__(self) -> int: ...


class IFacilityRepository(Protocol):
    """Интерфейс репозитория объектов инфраструктуры."""

    def get(self, facility_id: int) -> Facility: ...
    def neighbours(self, facility_id: int) -> List[Facility]: ...
    def __iter__(self) -> Iterator[Facility]: ...
    def __len__(self) -> int: ...


class IMaintenanceRepository(Protocol):
    """Интерфейс репозитория заявок на ремонт."""

    def next_id(self) -> int: ...
    def add(self, request: MaintenanceRequest) -> None: ...
    def discard(self, request_id: int) -> None: ...
    def get(self, request_id: int) -> MaintenanceRequest: ...
    def list_open(self) -> List[MaintenanceRequest]: ...
    def __iter__(self) -> Iterator[MaintenanceRequest]: ...
    def __len__(self) -> int: ...


class IResourceUnitOfWork(Protocol):
    """Интерфейс Unit of Work, необходимый реестру ресурсов."""

    @property
    def rooms(self) -> IRoomRepository: ...
    @property
    def parking(self) -> IParkingRepository: ...
    @property
    def facilities(self) -> IFacilityRepository: ...
    @property
    def maintenance(self) -> IMaintenanceRepository: ...
    @property
    def waitlist(self) -> ParkingWaitlist: ...
    @property
    def guests(self) -> Any: ...
    @property
    def bookings(self) -> Any: ...

    def today(self) -> date: ...
    def track(self, entity: Any) -> None: ...
    def record_undo(self, action: Callable[[], None]) -> None: ...
    def collect_event(self, event: DomainEvent) -> None: ...
    def __enter__(self) -> IResourceUnitOfWork: ...
    def __exit__(self, exc_type, exc_val, exc_tb) -> bool: ...
