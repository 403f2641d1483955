"""
Единица работы движка.

Хранит все репозитории и общее состояние отеля, сериализует изменения
через повторно входимую блокировку и обеспечивает принцип "все или ничего":
при ошибке восстанавливаются снимки измененных сущностей, выполняются
действия отката и отбрасываются накопленные события.
"""

import copy
import random
import threading
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel

from .billing.domain import RevenueLedger
from .billing.infrastructure import InMemoryBillRepository, InMemoryServiceOrderRepository
from .booking.infrastructure import BookingIndex, InMemoryGuestRepository
from .config import Settings, get_settings
from .resources.domain import ParkingWaitlist
from .resources.infrastructure import (
    InMemoryFacilityRepository,
    InMemoryMaintenanceRepository,
    InMemoryParkingRepository,
    InMemoryRoomRepository,
    build_facilities,
    build_rooms,
)
from .shared_kernel import DomainEvent, IEventBus, ILogger, InMemoryEventBus, Money, StandardLogger


class HotelUnitOfWork:
    """Единица работы: контекст движка с репозиториями и учетом транзакции."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        logger: Optional[ILogger] = None,
        event_bus: Optional[IEventBus] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._settings = settings or get_settings()
        self._logger = logger or StandardLogger(__name__)
        self._event_bus = event_bus or InMemoryEventBus(self._logger)
        self._clock = clock or datetime.now
        self._rng = random.Random(self._settings.RANDOM_SEED)

        self._lock = threading.RLock()
        self._depth = 0
        self._snapshots: Dict[int, Tuple[BaseModel, Dict[str, Any]]] = {}
        self._undo: List[Callable[[], None]] = []
        self._events: List[DomainEvent] = []

        settings = self._settings
        self._rooms = InMemoryRoomRepository(
            build_rooms(settings.ROOM_COUNT, self._rng, settings.CURRENCY)
        )
        self._parking = InMemoryParkingRepository(settings.PARKING_SLOTS)
        self._facilities = InMemoryFacilityRepository(
            build_facilities(settings.FACILITY_POINTS_OVERRIDES, settings.CURRENCY)
        )
        self._maintenance = InMemoryMaintenanceRepository(settings.MAX_MAINTENANCE_REQUESTS)
        self._waitlist = ParkingWaitlist()
        self._guests = InMemoryGuestRepository(settings.MAX_GUESTS)
        self._bookings = BookingIndex(settings.MAX_BOOKINGS)
        self._bills = InMemoryBillRepository(settings.MAX_BILLS)
        self._service_orders = InMemoryServiceOrderRepository(settings.MAX_SERVICE_ORDERS)
        self._revenue = RevenueLedger(total=Money.zero(settings.CURRENCY))

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def event_bus(self) -> IEventBus:
        return self._event_bus

    @property
    def rng(self) -> random.Random:
        return self._rng

    @property
    def rooms(self) -> InMemoryRoomRepository:
        return self._rooms

    @property
    def parking(self) -> InMemoryParkingRepository:
        return self._parking

    @property
    def facilities(self) -> InMemoryFacilityRepository:
        return self._facilities

    @property
    def maintenance(self) -> InMemoryMaintenanceRepository:
        return self._maintenance

    @property
    def waitlist(self) -> ParkingWaitlist:
        return self._waitlist

    @property
    def guests(self) -> InMemoryGuestRepository:
        return self._guests

    @property
    def bookings(self) -> BookingIndex:
        return self._bookings

    @property
    def bills(self) -> InMemoryBillRepository:
        return self._bills

    @property
    def service_orders(self) -> InMemoryServiceOrderRepository:
        return self._service_orders

    @property
    def revenue(self) -> RevenueLedger:
        return self._revenue

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self._clock().date()

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def track(self, entity: BaseModel) -> None:
        """Запоминает состояние сущности до первого изменения в транзакции."""
        self._ensure_transaction()
        key = id(entity)
        if key not in self._snapshots:
            self._snapshots[key] = (entity, copy.deepcopy(entity.__dict__))

    def record_undo(self, action: Callable[[], None]) -> None:
        """Регистрирует действие, отменяющее изменение коллекции."""
        self._ensure_transaction()
        self._undo.append(action)

    def collect_event(self, event: DomainEvent) -> None:
        """Откладывает публикацию события до фиксации."""
        self._ensure_transaction()
        self._events.append(event)

    def _ensure_transaction(self) -> None:
        if self._depth == 0:
            raise RuntimeError("Операция возможна только внутри транзакции (with uow:)")

    def commit(self) -> None:
        """Фиксирует изменения и публикует накопленные события."""
        events = self._events
        self._reset()
        self._logger.debug("HotelUnitOfWork committed", events=len(events))
        for event in events:
            self._event_bus.publish(event)

    def rollback(self) -> None:
        """Восстанавливает снимки, выполняет действия отката в обратном порядке."""
        for entity, state in self._snapshots.values():
            entity.__dict__.update(state)
        for action in reversed(self._undo):
            action()
        restored = len(self._snapshots)
        undone = len(self._undo)
        self._reset()
        self._logger.warning(
            "HotelUnitOfWork rolled back", restored=restored, undone=undone
        )

    def _reset(self) -> None:
        self._snapshots = {}
        self._undo = []
        self._events = []

    def __enter__(self) -> "HotelUnitOfWork":
        self._lock.acquire()
        self._depth += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        try:
            self._depth -= 1
            # Фиксирует или откатывает только внешний блок with
            if self._depth == 0:
                if exc_type is None:
                    self.commit()
                else:
                    self.rollback()
        finally:
            self._lock.release()
        return False  # Пробрасываем исключение дальше, если оно было
