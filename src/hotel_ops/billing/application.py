"""
Прикладной слой контекста биллинга.

Формирование и оплата счетов, заказы обслуживания в номер.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..booking.domain import BookingGuestMismatch
from ..loyalty import LoyaltyLedger, PricingPolicy
from ..shared_kernel import EntityId, ILogger, StandardLogger, StateConflictError
from . import interfaces as ports
from .domain import (
    Bill,
    BillAlreadyPaid,
    BillGenerated,
    BillingAggregator,
    BillPaid,
    PaymentMethod,
    ServiceOrder,
    ServiceOrderPlaced,
    ServiceOrderStatusChanged,
    ServiceStatus,
    menu_price,
)

# DTO для входящих данных


class GenerateBillRequest(BaseModel):
    """Запрос на формирование счета по бронированию."""

    guest_id: EntityId = Field(..., min_length=1)
    booking_id: EntityId = Field(..., min_length=1)


class PayBillRequest(BaseModel):
    """Запрос на оплату счета; отсутствие способа оплаты означает отмену платежа."""

    bill_id: int
    method: Optional[PaymentMethod] = None


class ServiceOrderRequest(BaseModel):
    """Запрос на обслуживание в номер."""

    room_no: int
    item: str = Field(..., min_length=1)


# Сервисы приложения


class BillingApplicationService:
    """Сервис приложения для работы со счетами."""

    def __init__(
        self,
        uow: ports.IBillingUnitOfWork,
        aggregator: Optional[BillingAggregator] = None,
        pricing: Optional[PricingPolicy] = None,
        ledger: Optional[LoyaltyLedger] = None,
        logger: Optional[ILogger] = None,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        settings = uow.settings
        self._aggregator = aggregator or BillingAggregator(
            tax_rate=settings.TAX_RATE, currency=settings.CURRENCY
        )
        self._pricing = pricing or PricingPolicy.from_settings(settings)
        self._ledger = ledger or LoyaltyLedger()
        self._logger = logger or StandardLogger(__name__)

    def generate_bill(self, request: GenerateBillRequest) -> Bill:
        """Формирует неоплаченный счет по бронированию гостя."""
        try:
            with self._uow:
                guest = self._uow.guests.get(request.guest_id)
                booking = self._uow.bookings.find_by_id(request.booking_id)
                if booking.guest_id != guest.id:
                    raise BookingGuestMismatch(booking.id, guest.id)

                orders: List[ServiceOrder] = []
                if booking.room_no is not None:
                    orders = self._uow.service_orders.list_for_room(booking.room_no)

                bills = self._uow.bills
                bill = self._aggregator.build_bill(
                    bills.next_id(), booking, orders, self._uow.today()
                )
                bills.add(bill)
                self._uow.record_undo(lambda: bills.discard(bill.id))
                self._uow.collect_event(
                    BillGenerated(
                        bill_id=bill.id,
                        guest_id=bill.guest_id,
                        booking_id=bill.booking_id,
                        total=bill.total,
                    )
                )
        except Exception as e:
            self._logger.error(
                "Bill generation failed",
                guest_id=request.guest_id,
                booking_id=request.booking_id,
                error=str(e),
            )
            raise
        self._logger.info(
            "Bill generated",
            bill_id=bill.id,
            booking_id=bill.booking_id,
            total=str(bill.total),
        )
        return bill

    def pay_bill(self, request: PayBillRequest) -> Bill:
        """
        Оплачивает счет: статус Paid, начисление баллов и учет выручки.

        Без способа оплаты платеж считается отмененным и счет остается неоплаченным.
        """
        try:
            with self._uow:
                bill = self._uow.bills.get(request.bill_id)
                if bill.is_paid():
                    raise BillAlreadyPaid(bill.id)
                if request.method is None:
                    self._logger.info("Payment cancelled", bill_id=bill.id)
                    return bill

                self._uow.track(bill)
                bill.mark_paid(request.method, self._uow.today())

                guest = self._uow.guests.get(bill.guest_id)
                points = self._pricing.points_for(bill.total)
                self._uow.track(guest)
                self._ledger.credit(guest, points)

                self._uow.track(self._uow.revenue)
                self._uow.revenue.record(bill.total)

                self._uow.collect_event(
                    BillPaid(
                        bill_id=bill.id,
                        guest_id=bill.guest_id,
                        method=request.method,
                        total=bill.total,
                        points_earned=points,
                    )
                )
        except Exception as e:
            self._logger.error(
                "Bill payment failed", bill_id=request.bill_id, error=str(e)
            )
            raise
        self._logger.info(
            "Bill paid",
            bill_id=bill.id,
            method=request.method.value,
            points_earned=points,
        )
        return bill

    def get_bill(self, bill_id: int) -> Bill:
        return self._uow.bills.get(bill_id)

    def list_bills(self) -> List[Bill]:
        return list(self._uow.bills)


class ServiceOrderApplicationService:
    """Сервис приложения для заказов обслуживания в номер."""

    def __init__(
        self,
        uow: ports.IBillingUnitOfWork,
        ledger: Optional[LoyaltyLedger] = None,
        logger: Optional[ILogger] = None,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._ledger = ledger or LoyaltyLedger()
        self._logger = logger or StandardLogger(__name__)

    def order_service(self, request: ServiceOrderRequest) -> ServiceOrder:
        """Принимает заказ для номера с активным бронированием."""
        try:
            with self._uow:
                room = self._uow.rooms.get(request.room_no)
                if self._uow.bookings.find_active_by_room(room.number) is None:
                    raise StateConflictError(
                        f"В номере {room.number} нет активного бронирования"
                    )
                item, charge = menu_price(request.item, self._uow.settings.CURRENCY)
                orders = self._uow.service_orders
                order = ServiceOrder(
                    id=orders.next_id(),
                    room_no=room.number,
                    item=item,
                    charge=charge,
                    ordered_at=self._uow.now(),
                )
                orders.add(order)
                self._uow.record_undo(lambda: orders.discard(order.id))
                self._uow.collect_event(
                    ServiceOrderPlaced(
                        order_id=order.id,
                        room_no=order.room_no,
                        item=order.item,
                        charge=order.charge,
                    )
                )
        except Exception as e:
            self._logger.error(
                "Service order failed",
                room_no=request.room_no,
                item=request.item,
                error=str(e),
            )
            raise
        self._logger.info(
            "Service ordered", order_id=order.id, room_no=order.room_no, item=order.item
        )
        return order

    def update_service_status(self, order_id: int, status: ServiceStatus) -> ServiceOrder:
        """
        Продвигает заказ. Выполненный заказ приносит балл гостю первого
        активного бронирования этого номера.
        """
        try:
            with self._uow:
                order = self._uow.service_orders.get(order_id)
                self._uow.track(order)
                order.change_status(status)
                if order.is_completed():
                    self._credit_completion(order)
                self._uow.collect_event(
                    ServiceOrderStatusChanged(
                        order_id=order.id, room_no=order.room_no, status=order.status
                    )
                )
        except Exception as e:
            self._logger.error(
                "Service status update failed",
                order_id=order_id,
                status=getattr(status, "value", status),
                error=str(e),
            )
            raise
        self._logger.info(
            "Service status updated", order_id=order.id, status=order.status.value
        )
        return order

    def _credit_completion(self, order: ServiceOrder) -> None:
        booking = self._uow.bookings.find_active_by_room(order.room_no)
        if booking is None:
            return
        guest = self._uow.guests.get(booking.guest_id)
        self._uow.track(guest)
        self._ledger.credit(guest, self._uow.settings.SERVICE_COMPLETION_POINTS)

    def list_orders(self, room_no: Optional[int] = None) -> List[ServiceOrder]:
        if room_no is None:
            return list(self._uow.service_orders)
        return self._uow.service_orders.list_for_room(room_no)
