"""
Интерфейсы (порты) для контекста биллинга.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Callable, Iterator, List, Protocol

if TYPE_CHECKING:
    from ..booking.interfaces import IBookingIndex, IGuestRepository
    from ..config import Settings
    from ..resources.interfaces import IRoomRepository
    from ..shared_kernel import DomainEvent
    from .domain import Bill, RevenueLedger, ServiceOrder


class IBillRepository(Protocol):
    """Интерфейс репозитория счетов."""

    def next_id(self) -> int: ...
    def add(self, bill: Bill) -> None: ...
    def discard(self, bill_id: int) -> None: ...
    def get(self, bill_id: int) -> Bill: ...
    def __iter__(self) -> Iterator[Bill]: ...
    def __len__(self) -> int: ...


class IServiceOrderRepository(Protocol):
    """Интерфейс репозитория заказов обслуживания в номер."""

    def next_id(self) -> int: ...
    def add(self, order: ServiceOrder) -> None: ...
    def discard(self, order_id: int) -> None: ...
    def get(self, order_id: int) -> ServiceOrder: ...
    def list_for_room(self, room_no: int) -> List[ServiceOrder]: ...
    def __iter__(self) -> Iterator[ServiceOrder]: ...
    def __len__(self) -> int: ...


class IBillingUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста биллинга."""

    @property
    def bills(self) -> IBillRepository: ...
    @property
    def service_orders(self) -> IServiceOrderRepository: ...
    @property
    def revenue(self) -> RevenueLedger: ...
    @property
    def guests(self) -> IGuestRepository: ...
    @property
    def bookings(self) -> IBookingIndex: ...
    @property
    def rooms(self) -> IRoomRepository: ...
    @property
    def settings(self) -> Settings: ...

    def today(self) -> date: ...
    def now(self) -> datetime: ...
    def track(self, entity: Any) -> None: ...
    def record_undo(self, action: Callable[[], None]) -> None: ...
    def collect_event(self, event: DomainEvent) -> None: ...
    def __enter__(self) -> IBillingUnitOfWork: ...
    def __exit__(self, exc_type, exc_val, exc_tb) -> bool: ...
