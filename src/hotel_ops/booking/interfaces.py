"""
Интерфейсы (порты) для контекста бронирования.
"""

from __future__ import annotations

import random
from datetime import date
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Iterator, List, Optional, Protocol

if TYPE_CHECKING:
    from ..config import Settings
    from ..resources.interfaces import IFacilityRepository, IRoomRepository
    from ..shared_kernel import DomainEvent, EntityId
    from .domain import Booking, BookingStatus, Guest, StatusChange


class IGuestRepository(Protocol):
    """Интерфейс репозитория гостей."""

    def add(self, guest: Guest) -> None: ...
    def discard(self, guest_id: EntityId) -> None: ...
    def get(self, guest_id: EntityId) -> Guest: ...
    def __contains__(self, guest_id: object) -> bool: ...
    def __iter__(self) -> Iterator[Guest]: ...
    def __len__(self) -> int: ...


class IBookingIndex(Protocol):
    """Интерфейс упорядоченного по дате заезда индекса бронирований."""

    def new_id(self, rng: random.Random, length: int = 6) -> EntityId: ...
    def insert(self, booking: Booking) -> None: ...
    def discard(self, booking_id: EntityId) -> None: ...
    def find_by_id(self, booking_id: EntityId) -> Booking: ...
    def list_by_guest(self, guest_id: EntityId) -> Iterable[Booking]: ...
    def due_for_advance(self, today: date) -> List[Booking]: ...
    def advance_statuses(self, today: date) -> List[StatusChange]: ...
    def find_active_by_room(self, room_no: int) -> Optional[Booking]: ...
    def find_open_for_guest(self, guest_id: EntityId) -> Optional[Booking]: ...
    def count_by_status(self) -> Dict[BookingStatus, int]: ...
    def __contains__(self, booking_id: object) -> bool: ...
    def __iter__(self) -> Iterator[Booking]: ...
    def __len__(self) -> int: ...


class IBookingUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста бронирования."""

    @property
    def guests(self) -> IGuestRepository: ...
    @property
    def bookings(self) -> IBookingIndex: ...
    @property
    def rooms(self) -> IRoomRepository: ...
    @property
    def facilities(self) -> IFacilityRepository: ...
    @property
    def settings(self) -> Settings: ...
    @property
    def rng(self) -> random.Random: ...

    def today(self) -> date: ...
    def track(self, entity: Any) -> None: ...
    def record_undo(self, action: Callable[[], None]) -> None: ...
    def collect_event(self, event: DomainEvent) -> None: ...
    def __enter__(self) -> IBookingUnitOfWork: ...
    def __exit__(self, exc_type, exc_val, exc_tb) -> bool: ...
