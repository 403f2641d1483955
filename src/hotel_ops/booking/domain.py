"""
Доменная модель контекста бронирования.

Содержит гостей, бронирования номеров и объектов инфраструктуры,
политику допустимых периодов и события жизненного цикла бронирования.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..shared_kernel import (
    DomainEvent,
    EntityId,
    Money,
    NotFoundError,
    StateConflictError,
    ValidationError,
)


class BookingStatus(str, Enum):
    """Статусы бронирования."""

    UPCOMING = "Upcoming"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    # Зарезервирован: ни одна операция пока не переводит бронирование в этот статус
    CANCELLED = "Cancelled"


# Исключения контекста


class GuestNotFound(NotFoundError):
    def __init__(self, guest_id: EntityId):
        super().__init__(f"Гость {guest_id} не найден")
        self.guest_id = guest_id


class BookingNotFound(NotFoundError):
    def __init__(self, booking_id: EntityId):
        super().__init__(f"Бронирование {booking_id} не найдено")
        self.booking_id = booking_id


class DuplicateGuest(StateConflictError):
    def __init__(self, guest_id: EntityId):
        super().__init__(f"Гость с идентификатором {guest_id} уже зарегистрирован")
        self.guest_id = guest_id


class DuplicateBooking(StateConflictError):
    def __init__(self, booking_id: EntityId):
        super().__init__(f"Бронирование {booking_id} уже есть в индексе")
        self.booking_id = booking_id


class BookingGuestMismatch(ValidationError):
    def __init__(self, booking_id: EntityId, guest_id: EntityId):
        super().__init__(f"Бронирование {booking_id} не принадлежит гостю {guest_id}")
        self.booking_id = booking_id
        self.guest_id = guest_id


# Сущности


class Guest(BaseModel):
    """Гость отеля."""

    model_config = ConfigDict(validate_assignment=True)

    id: EntityId = Field(..., min_length=1)
    name: str
    contact: str = ""
    email: str = ""
    preferences: str = ""
    loyalty_points: int = Field(0, ge=0)

    @field_validator("id", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Поле не может быть пустым")
        return v

    def credit_points(self, points: int) -> None:
        if points < 0:
            raise ValueError("Нельзя начислить отрицательное число баллов")
        self.loyalty_points += points

    def debit_points(self, points: int) -> None:
        if points > self.loyalty_points:
            raise StateConflictError(
                f"У гостя {self.id} недостаточно баллов: {self.loyalty_points} < {points}"
            )
        self.loyalty_points -= points


class Booking(BaseModel):
    """
    Бронирование номера или объекта инфраструктуры.

    Ссылается на гостя, номер, парковочное место и объект только по идентификаторам.
    Ровно одно из полей room_no / facility_id заполнено.
    """

    id: EntityId
    guest_id: EntityId
    room_no: Optional[int] = None
    parking_slot: Optional[int] = None
    facility_id: Optional[int] = None
    check_in: date
    check_out: date
    total: Money
    status: BookingStatus = BookingStatus.UPCOMING

    @model_validator(mode="after")
    def check_consistency(self) -> "Booking":
        if self.check_in >= self.check_out:
            raise ValueError("Дата выезда должна быть позже даты заезда")
        if (self.room_no is None) == (self.facility_id is None):
            raise ValueError("Бронирование должно относиться либо к номеру, либо к объекту")
        return self

    @property
    def is_room_booking(self) -> bool:
        return self.room_no is not None

    @property
    def is_facility_booking(self) -> bool:
        return self.facility_id is not None

    def is_open(self) -> bool:
        """Бронирование еще не завершено."""
        return self.status in (BookingStatus.UPCOMING, BookingStatus.ACTIVE)

    def needs_advance(self, today: date) -> bool:
        if self.status == BookingStatus.UPCOMING:
            return today >= self.check_in
        if self.status == BookingStatus.ACTIVE:
            return today >= self.check_out
        return False

    def advance(self, today: date) -> Optional[BookingStatus]:
        """
        Продвигает статус по текущей дате.

        Upcoming → Active, когда наступила дата заезда; Active → Completed,
        когда наступила дата выезда. За один вызов возможны оба перехода.
        Возвращает прежний статус, если он изменился.
        """
        previous = self.status
        if self.status == BookingStatus.UPCOMING and today >= self.check_in:
            self.status = BookingStatus.ACTIVE
        if self.status == BookingStatus.ACTIVE and today >= self.check_out:
            self.status = BookingStatus.COMPLETED
        return previous if self.status != previous else None


class StatusChange(BaseModel):
    """Переход статуса одного бронирования."""

    model_config = ConfigDict(frozen=True)

    booking_id: EntityId
    previous: BookingStatus
    current: BookingStatus


# Доменные сервисы


class BookingPolicy:
    """Политика допустимых периодов бронирования."""

    @staticmethod
    def validate_day(value: date, min_year: int, max_year: int) -> None:
        """Проверяет, что год даты попадает в окно min_year..max_year."""
        if not min_year <= value.year <= max_year:
            raise ValidationError(
                f"Дата {value:%d/%m/%Y} вне допустимого диапазона {min_year}..{max_year}"
            )

    @staticmethod
    def validate_period(
        check_in: date, check_out: date, min_year: int, max_year: int
    ) -> None:
        """Проверяет диапазон лет и порядок дат."""
        for value in (check_in, check_out):
            BookingPolicy.validate_day(value, min_year, max_year)
        if check_out <= check_in:
            raise ValidationError("Дата выезда должна быть позже даты заезда")


# События


class GuestRegistered(DomainEvent):
    guest_id: EntityId
    name: str


class RoomBooked(DomainEvent):
    booking_id: EntityId
    guest_id: EntityId
    room_no: int
    check_in: date
    check_out: date
    total: Money


class FacilityBooked(DomainEvent):
    booking_id: EntityId
    guest_id: EntityId
    facility_id: int
    booked_for: date
    total: Money


class BookingStatusChanged(DomainEvent):
    booking_id: EntityId
    previous: BookingStatus
    current: BookingStatus
