from datetime import datetime
from typing import Callable, Optional

from .billing.application import BillingApplicationService, ServiceOrderApplicationService
from .booking.application import BookingApplicationService
from .commands import CommandTable
from .config import Settings, configure_logging, get_settings
from .engine import HotelEngine
from .loyalty import LoyaltyLedger, PricingPolicy
from .resources.application import ResourceRegistry
from .shared_kernel import ActivityLog, DomainEvent, InMemoryEventBus, StandardLogger
from .unit_of_work import HotelUnitOfWork


def bootstrap_app(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], datetime]] = None,
    setup_logging: bool = False,
) -> HotelEngine:
    """Создает и настраивает все компоненты движка."""
    settings = settings or get_settings()
    if setup_logging:
        configure_logging(settings)

    # 1. Создаем Unit of Work со всеми репозиториями
    logger = StandardLogger("hotel_ops")
    event_bus = InMemoryEventBus(logger)
    uow = HotelUnitOfWork(settings=settings, logger=logger, event_bus=event_bus, clock=clock)

    # 2. Создаем сервисы, передавая им общие политики
    pricing = PricingPolicy.from_settings(settings)
    ledger = LoyaltyLedger()
    registry = ResourceRegistry(uow)
    bookings = BookingApplicationService(uow, pricing=pricing, ledger=ledger)
    billing = BillingApplicationService(uow, pricing=pricing, ledger=ledger)
    services = ServiceOrderApplicationService(uow, ledger=ledger)

    # 3. Подписываем журнал действий на все доменные события
    activity_log = ActivityLog(capacity=settings.MAX_ACTIVITY_RECORDS)
    event_bus.subscribe(DomainEvent, activity_log)

    return HotelEngine(
        uow=uow,
        registry=registry,
        bookings=bookings,
        billing=billing,
        services=services,
        activity_log=activity_log,
    )


def build_command_table(engine: HotelEngine) -> CommandTable:
    """Таблица команд для внешнего слоя (меню, API)."""
    return CommandTable(engine)
