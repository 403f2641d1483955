"""
Доменная модель контекста биллинга.

Содержит счета, заказы обслуживания в номер, агрегатор начислений
и учет выручки.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..shared_kernel import (
    DomainEvent,
    EntityId,
    Money,
    NotFoundError,
    StateConflictError,
    ValidationError,
)

if TYPE_CHECKING:
    from ..booking.domain import Booking


class BillStatus(str, Enum):
    """Статусы счета."""

    UNPAID = "Unpaid"
    PAID = "Paid"


class PaymentMethod(str, Enum):
    """Способы оплаты."""

    CASH = "Cash"
    CARD = "Card"


class ServiceStatus(str, Enum):
    """Статусы заказа обслуживания в номер."""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


# Меню обслуживания в номер
SERVICE_MENU: Dict[str, Decimal] = {
    "Breakfast Set": Decimal("15.00"),
    "Lunch Set": Decimal("20.00"),
    "Dinner Set": Decimal("25.00"),
    "Snack Pack": Decimal("10.00"),
    "Beverage": Decimal("5.00"),
}


# Исключения контекста


class BillNotFound(NotFoundError):
    def __init__(self, bill_id: int):
        super().__init__(f"Счет {bill_id} не найден")
        self.bill_id = bill_id


class BillAlreadyPaid(StateConflictError):
    def __init__(self, bill_id: int):
        super().__init__(f"Счет {bill_id} уже оплачен")
        self.bill_id = bill_id


class ServiceOrderNotFound(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Заказ {order_id} не найден")
        self.order_id = order_id


class UnknownMenuItem(ValidationError):
    def __init__(self, item: str):
        super().__init__(
            f"Позиции {item!r} нет в меню; доступны: {', '.join(SERVICE_MENU)}"
        )
        self.item = item


def menu_price(item: str, currency: str = "USD") -> Tuple[str, Money]:
    """Находит позицию меню без учета регистра; возвращает (название, цена)."""
    for name, price in SERVICE_MENU.items():
        if name.lower() == item.strip().lower():
            return name, Money(amount=price, currency=currency)
    raise UnknownMenuItem(item)


# Сущности


class ServiceOrder(BaseModel):
    """Заказ обслуживания в номер."""

    id: int
    room_no: int
    item: str
    charge: Money
    status: ServiceStatus = ServiceStatus.PENDING
    ordered_at: datetime

    def is_completed(self) -> bool:
        return self.status == ServiceStatus.COMPLETED

    def change_status(self, status: ServiceStatus) -> None:
        """Pending → In Progress → Completed; назад и повторно завершить нельзя."""
        order = list(ServiceStatus)
        if order.index(status) <= order.index(self.status):
            raise StateConflictError(
                f"Заказ {self.id}: переход {self.status.value} → {status.value} невозможен"
            )
        self.status = status


class ChargeBreakdown(BaseModel):
    """Разбивка начислений по счету."""

    model_config = ConfigDict(frozen=True)

    room: Money
    service: Money
    facility: Money

    @property
    def subtotal(self) -> Money:
        return self.room + self.service + self.facility


class Bill(BaseModel):
    """Счет гостя по одному бронированию."""

    id: int = Field(..., ge=1)
    guest_id: EntityId
    booking_id: EntityId
    room_charges: Money
    service_charges: Money
    facility_charges: Money
    taxes: Money
    total: Money
    status: BillStatus = BillStatus.UNPAID
    issue_date: date
    payment_method: Optional[PaymentMethod] = None
    paid_on: Optional[date] = None

    @property
    def subtotal(self) -> Money:
        return self.room_charges + self.service_charges + self.facility_charges

    def is_paid(self) -> bool:
        return self.status == BillStatus.PAID

    def mark_paid(self, method: PaymentMethod, paid_on: date) -> None:
        if self.is_paid():
            raise BillAlreadyPaid(self.id)
        self.status = BillStatus.PAID
        self.payment_method = method
        self.paid_on = paid_on


class RevenueLedger(BaseModel):
    """Накопленная выручка по оплаченным счетам."""

    total: Money = Field(default_factory=Money.zero)
    payments: int = 0

    def record(self, amount: Money) -> None:
        self.total = self.total + amount
        self.payments += 1


# Доменные сервисы


class BillingAggregator:
    """Собирает счет по бронированию и выполненным заказам обслуживания."""

    def __init__(self, tax_rate: Decimal = Decimal("0.10"), currency: str = "USD"):
        self._tax_rate = tax_rate
        self._currency = currency

    def breakdown(
        self, booking: Booking, service_orders: Iterable[ServiceOrder]
    ) -> ChargeBreakdown:
        """
        Начисления за номер или объект берутся из суммы бронирования;
        в услуги попадают только выполненные заказы для номера бронирования.
        """
        zero = Money.zero(self._currency)
        service = zero
        if booking.room_no is not None:
            for order in service_orders:
                if order.room_no == booking.room_no and order.is_completed():
                    service = service + order.charge
        return ChargeBreakdown(
            room=booking.total if booking.is_room_booking else zero,
            service=service,
            facility=booking.total if booking.is_facility_booking else zero,
        )

    def build_bill(
        self,
        bill_id: int,
        booking: Booking,
        service_orders: Iterable[ServiceOrder],
        issue_date: date,
    ) -> Bill:
        charges = self.breakdown(booking, service_orders)
        subtotal = charges.subtotal
        taxes = subtotal.percent(self._tax_rate)
        return Bill(
            id=bill_id,
            guest_id=booking.guest_id,
            booking_id=booking.id,
            room_charges=charges.room,
            service_charges=charges.service,
            facility_charges=charges.facility,
            taxes=taxes,
            total=subtotal + taxes,
            issue_date=issue_date,
        )


# События


class ServiceOrderPlaced(DomainEvent):
    order_id: int
    room_no: int
    item: str
    charge: Money


class ServiceOrderStatusChanged(DomainEvent):
    order_id: int
    room_no: int
    status: ServiceStatus


class BillGenerated(DomainEvent):
    bill_id: int
    guest_id: EntityId
    booking_id: EntityId
    total: Money


class BillPaid(DomainEvent):
    bill_id: int
    guest_id: EntityId
    method: PaymentMethod
    total: Money
    points_earned: int
