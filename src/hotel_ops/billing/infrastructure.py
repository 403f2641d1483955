"""
Инфраструктурный слой контекста биллинга.

Репозитории счетов и заказов в памяти с последовательными идентификаторами.
"""

from typing import Dict, Generic, Iterator, List, Optional, TypeVar

from ..shared_kernel import CapacityError, DomainException
from . import interfaces as ports
from .domain import Bill, BillNotFound, ServiceOrder, ServiceOrderNotFound

T = TypeVar("T", Bill, ServiceOrder)


class SequentialRepository(Generic[T]):
    """Базовый репозиторий с идентификаторами 1, 2, 3... и ограничением вместимости."""

    entity_name = "записей"
    not_found = DomainException

    def __init__(self, capacity: Optional[int] = None):
        self._items: Dict[int, T] = {}
        self._capacity = capacity
        self._last_id = 0

    def next_id(self) -> int:
        if self._capacity is not None and len(self._items) >= self._capacity:
            raise CapacityError(
                f"Достигнуто максимальное число {self.entity_name} ({self._capacity})"
            )
        return self._last_id + 1

    def add(self, item: T) -> None:
        self.next_id()
        self._items[item.id] = item
        self._last_id = max(self._last_id, item.id)

    def discard(self, item_id: int) -> None:
        self._items.pop(item_id, None)
        self._last_id = max(self._items, default=0)

    def get(self, item_id: int) -> T:
        if item_id not in self._items:
            raise self.not_found(item_id)
        return self._items[item_id]

    def __iter__(self) -> Iterator[T]:
        return iter(self._items[key] for key in sorted(self._items))

    def __len__(self) -> int:
        return len(self._items)


class InMemoryBillRepository(SequentialRepository[Bill], ports.IBillRepository):
    """Реализация репозитория счетов в памяти."""

    entity_name = "счетов"
    not_found = BillNotFound


class InMemoryServiceOrderRepository(
    SequentialRepository[ServiceOrder], ports.IServiceOrderRepository
):
    """Реализация репозитория заказов обслуживания в памяти."""

    entity_name = "заказов"
    not_found = ServiceOrderNotFound

    def list_for_room(self, room_no: int) -> List[ServiceOrder]:
        return [order for order in self if order.room_no == room_no]
