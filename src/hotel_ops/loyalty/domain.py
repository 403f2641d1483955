"""
Доменная модель контекста лояльности.

Политика цен чистая: она только считает суммы, скидки и баллы.
Изменяет баланс гостя только журнал баллов.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ..shared_kernel import EntityId, Money, StateConflictError, ValidationError

if TYPE_CHECKING:
    from ..booking.domain import Guest
    from ..config import Settings
    from ..resources.domain import Facility


class InsufficientPoints(StateConflictError):
    def __init__(self, guest_id: EntityId, balance: int, required: int):
        super().__init__(
            f"У гостя {guest_id} {balance} баллов, для списания нужно {required}"
        )
        self.guest_id = guest_id
        self.balance = balance
        self.required = required


class Quote(BaseModel):
    """Расчет стоимости: базовая сумма, скидка, итог и движение баллов."""

    model_config = ConfigDict(frozen=True)

    base: Money
    discount: Money
    total: Money
    points_redeemed: int = Field(0, ge=0)
    points_earned: int = Field(0, ge=0)

    @property
    def discounted(self) -> bool:
        return not self.discount.is_zero()


class PricingPolicy(BaseModel):
    """Тарифы, скидки и начисление баллов лояльности."""

    model_config = ConfigDict(frozen=True)

    discount_threshold: int = Field(1000, gt=0)
    points_rate: int = Field(10, ge=0)
    points_unit: Decimal = Field(Decimal("100"), gt=0)
    room_discount_rate: Decimal = Field(Decimal("0.10"), ge=0, le=1)
    facility_discount_rate: Decimal = Field(Decimal("0.50"), ge=0, le=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> PricingPolicy:
        return cls(
            discount_threshold=settings.DISCOUNT_THRESHOLD,
            points_rate=settings.LOYALTY_POINTS_RATE,
            points_unit=settings.LOYALTY_POINTS_UNIT,
            room_discount_rate=settings.ROOM_DISCOUNT_RATE,
            facility_discount_rate=settings.FACILITY_DISCOUNT_RATE,
        )

    def is_eligible(self, points: int) -> bool:
        return points >= self.discount_threshold

    @staticmethod
    def night_count(check_in: date, check_out: date) -> int:
        nights = (check_out - check_in).days
        if nights <= 0:
            raise ValidationError("Дата выезда должна быть позже даты заезда")
        return nights

    def points_for(self, total: Money) -> int:
        """Баллы за оплаченную сумму: rate за каждые полные unit долларов."""
        return int(total.amount // self.points_unit) * self.points_rate

    def quote_room(
        self, nightly_price: Money, check_in: date, check_out: date, points: int
    ) -> Quote:
        """
        Стоимость проживания.

        При балансе не ниже порога дается фиксированная скидка и списывается
        ровно порог баллов, независимо от суммы.
        """
        base = nightly_price * self.night_count(check_in, check_out)
        discount = Money.zero(base.currency)
        redeemed = 0
        if self.is_eligible(points):
            discount = base.percent(self.room_discount_rate)
            redeemed = self.discount_threshold
        total = base - discount
        return Quote(
            base=base,
            discount=discount,
            total=total,
            points_redeemed=redeemed,
            points_earned=self.points_for(total),
        )

    def quote_facility(self, facility: Facility, points: int) -> Quote:
        """Стоимость бронирования объекта; бесплатный объект скидку не дает."""
        base = facility.booking_fee
        discount = Money.zero(base.currency)
        redeemed = 0
        if self.is_eligible(points) and not base.is_zero():
            discount = base.percent(self.facility_discount_rate)
            redeemed = self.discount_threshold
        total = base - discount
        return Quote(
            base=base,
            discount=discount,
            total=total,
            points_redeemed=redeemed,
            points_earned=self.facility_points(facility, total),
        )

    def facility_points(self, facility: Facility, total: Money) -> int:
        if facility.points_override is not None:
            return facility.points_override
        return self.points_for(total)


class LoyaltyLedger:
    """Списание и начисление баллов на баланс гостя."""

    def redeem(self, guest: Guest, points: int) -> None:
        if points <= 0:
            return
        # Баланс проверяется до списания
        if guest.loyalty_points < points:
            raise InsufficientPoints(guest.id, guest.loyalty_points, points)
        guest.debit_points(points)

    def credit(self, guest: Guest, points: int) -> None:
        if points > 0:
            guest.credit_points(points)

    def settle(self, guest: Guest, quote: Quote) -> int:
        """Списывает баллы за скидку, начисляет заработанные и возвращает новый баланс."""
        self.redeem(guest, quote.points_redeemed)
        self.credit(guest, quote.points_earned)
        return guest.loyalty_points
