"""
Прикладной слой контекста бронирования.

Содержит сервисы приложения, которые координируют реестр ресурсов,
политику цен и индекс бронирований в рамках одной транзакции.
"""

from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..loyalty import LoyaltyLedger, PricingPolicy, Quote
from ..resources.domain import RoomNotAvailable, RoomReleased, RoomStatus
from ..shared_kernel import (
    CalendarDate,
    EntityId,
    ILogger,
    Money,
    StandardLogger,
    next_day,
)
from . import interfaces as ports
from .domain import (
    Booking,
    BookingPolicy,
    BookingStatus,
    BookingStatusChanged,
    FacilityBooked,
    Guest,
    GuestRegistered,
    RoomBooked,
    StatusChange,
)
from .infrastructure import GuestBookings

# DTO для входящих данных


class RegisterGuestRequest(BaseModel):
    """Запрос на регистрацию гостя."""

    guest_id: EntityId = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    contact: str = ""
    email: str = ""
    preferences: str = ""
    loyalty_points: int = Field(0, ge=0)


class BookRoomRequest(BaseModel):
    """Запрос на бронирование номера."""

    guest_id: EntityId
    room_no: int
    check_in: CalendarDate
    check_out: CalendarDate

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> CalendarDate:
        return CalendarDate.coerce(v)


class BookFacilityRequest(BaseModel):
    """Запрос на бронирование объекта инфраструктуры на один день."""

    guest_id: EntityId
    facility_id: int
    booked_for: CalendarDate

    @field_validator("booked_for", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> CalendarDate:
        return CalendarDate.coerce(v)


# DTO для исходящих данных


class BookingDTO(BaseModel):
    """DTO для представления бронирования."""

    id: EntityId
    guest_id: EntityId
    room_no: Optional[int]
    parking_slot: Optional[int]
    facility_id: Optional[int]
    check_in: date
    check_out: date
    total: Money
    status: BookingStatus

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingDTO":
        """Создает DTO из доменной модели."""
        return cls(
            id=booking.id,
            guest_id=booking.guest_id,
            room_no=booking.room_no,
            parking_slot=booking.parking_slot,
            facility_id=booking.facility_id,
            check_in=booking.check_in,
            check_out=booking.check_out,
            total=booking.total,
            status=booking.status,
        )


class BookingConfirmation(BaseModel):
    """Результат бронирования: запись, расчет стоимости и новый баланс баллов."""

    booking: BookingDTO
    quote: Quote
    points_balance: int
    nearby_facilities: List[str] = Field(default_factory=list)

    @property
    def total(self) -> Money:
        return self.quote.total

    @property
    def points_earned(self) -> int:
        return self.quote.points_earned


# Сервисы приложения


class BookingApplicationService:
    """Сервис приложения для работы с гостями и бронированиями."""

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        pricing: Optional[PricingPolicy] = None,
        ledger: Optional[LoyaltyLedger] = None,
        logger: Optional[ILogger] = None,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._pricing = pricing or PricingPolicy.from_settings(uow.settings)
        self._ledger = ledger or LoyaltyLedger()
        self._logger = logger or StandardLogger(__name__)

    def register_guest(self, request: RegisterGuestRequest) -> Guest:
        """Регистрирует нового гостя; идентификатор должен быть уникальным."""
        try:
            with self._uow:
                guest = Guest(
                    id=request.guest_id,
                    name=request.name,
                    contact=request.contact,
                    email=request.email,
                    preferences=request.preferences,
                    loyalty_points=request.loyalty_points,
                )
                self._uow.guests.add(guest)
                self._uow.record_undo(lambda: self._uow.guests.discard(guest.id))
                self._uow.collect_event(GuestRegistered(guest_id=guest.id, name=guest.name))
        except Exception as e:
            self._logger.error(
                "Guest registration failed", guest_id=request.guest_id, error=str(e)
            )
            raise
        self._logger.info("Guest registered", guest_id=guest.id)
        return guest

    def get_guest(self, guest_id: EntityId) -> Guest:
        return self._uow.guests.get(guest_id)

    def book_room(self, request: BookRoomRequest) -> BookingConfirmation:
        """
        Бронирует номер.

        Проверка гостя, номера и дат, расчет стоимости, вставка в индекс,
        занятие номера и движение баллов выполняются как одна транзакция.
        """
        try:
            with self._uow:
                guest = self._uow.guests.get(request.guest_id)
                room = self._uow.rooms.get(request.room_no)
                check_in = request.check_in.to_date()
                check_out = request.check_out.to_date()
                self._validate_period(check_in, check_out)
                if not room.is_available():
                    raise RoomNotAvailable(room.number, room.status)

                quote = self._pricing.quote_room(
                    room.nightly_price, check_in, check_out, guest.loyalty_points
                )
                booking = Booking(
                    id=self._new_booking_id(),
                    guest_id=guest.id,
                    room_no=room.number,
                    check_in=check_in,
                    check_out=check_out,
                    total=quote.total,
                )
                self._insert(booking)

                self._uow.track(room)
                room.allocate()

                self._uow.track(guest)
                balance = self._ledger.settle(guest, quote)

                self._uow.collect_event(
                    RoomBooked(
                        booking_id=booking.id,
                        guest_id=guest.id,
                        room_no=room.number,
                        check_in=check_in,
                        check_out=check_out,
                        total=quote.total,
                    )
                )
        except Exception as e:
            self._logger.error(
                "Room booking failed",
                guest_id=request.guest_id,
                room_no=request.room_no,
                error=str(e),
            )
            raise
        self._logger.info(
            "Room booked",
            booking_id=booking.id,
            room_no=booking.room_no,
            total=str(quote.total),
            discounted=quote.discounted,
        )
        return BookingConfirmation(
            booking=BookingDTO.from_domain(booking), quote=quote, points_balance=balance
        )

    def book_facility(self, request: BookFacilityRequest) -> BookingConfirmation:
        """
        Бронирует объект инфраструктуры на день booked_for.

        Бронирование хранится с выездом на следующий день. В ответе
        перечислены соседние объекты.
        """
        try:
            with self._uow:
                guest = self._uow.guests.get(request.guest_id)
                facility = self._uow.facilities.get(request.facility_id)
                check_in = request.booked_for.to_date()
                settings = self._uow.settings
                BookingPolicy.validate_day(check_in, settings.MIN_YEAR, settings.MAX_YEAR)
                check_out = next_day(check_in)

                quote = self._pricing.quote_facility(facility, guest.loyalty_points)

                self._uow.track(facility)
                facility.allocate()

                booking = Booking(
                    id=self._new_booking_id(),
                    guest_id=guest.id,
                    facility_id=facility.id,
                    check_in=check_in,
                    check_out=check_out,
                    total=quote.total,
                )
                self._insert(booking)

                self._uow.track(guest)
                balance = self._ledger.settle(guest, quote)

                self._uow.collect_event(
                    FacilityBooked(
                        booking_id=booking.id,
                        guest_id=guest.id,
                        facility_id=facility.id,
                        booked_for=check_in,
                        total=quote.total,
                    )
                )
                nearby = [f.name for f in self._uow.facilities.neighbours(facility.id)]
        except Exception as e:
            self._logger.error(
                "Facility booking failed",
                guest_id=request.guest_id,
                facility_id=request.facility_id,
                error=str(e),
            )
            raise
        self._logger.info(
            "Facility booked",
            booking_id=booking.id,
            facility_id=booking.facility_id,
            total=str(quote.total),
        )
        return BookingConfirmation(
            booking=BookingDTO.from_domain(booking),
            quote=quote,
            points_balance=balance,
            nearby_facilities=nearby,
        )

    def _validate_period(self, check_in: date, check_out: date) -> None:
        settings = self._uow.settings
        BookingPolicy.validate_period(
            check_in, check_out, settings.MIN_YEAR, settings.MAX_YEAR
        )

    def _new_booking_id(self) -> EntityId:
        return self._uow.bookings.new_id(
            self._uow.rng, self._uow.settings.BOOKING_ID_LENGTH
        )

    def _insert(self, booking: Booking) -> None:
        bookings = self._uow.bookings
        bookings.insert(booking)
        self._uow.record_undo(lambda: bookings.discard(booking.id))

    def find_booking(self, booking_id: EntityId) -> Booking:
        """Возвращает бронирование по идентификатору."""
        return self._uow.bookings.find_by_id(booking_id)

    def list_guest_bookings(self, guest_id: EntityId) -> GuestBookings:
        """Бронирования гостя по возрастанию даты заезда."""
        self._uow.guests.get(guest_id)
        return self._uow.bookings.list_by_guest(guest_id)

    def advance_statuses(self, today: Optional[date] = None) -> List[StatusChange]:
        """
        Продвигает статусы всех бронирований на дату today (по умолчанию
        текущая дата движка). Повторный вызов с той же датой ничего не меняет.
        """
        today = today or self._uow.today()
        try:
            with self._uow:
                for booking in self._uow.bookings.due_for_advance(today):
                    self._uow.track(booking)
                changes = self._uow.bookings.advance_statuses(today)
                for change in changes:
                    self._uow.collect_event(
                        BookingStatusChanged(
                            booking_id=change.booking_id,
                            previous=change.previous,
                            current=change.current,
                        )
                    )
                    if change.current == BookingStatus.COMPLETED:
                        self._on_completed(self._uow.bookings.find_by_id(change.booking_id))
        except Exception as e:
            self._logger.error("Status advancement failed", today=today, error=str(e))
            raise
        self._logger.info("Booking statuses advanced", today=today, changed=len(changes))
        return changes

    def _on_completed(self, booking: Booking) -> None:
        if not self._uow.settings.RELEASE_ROOM_ON_CHECKOUT or booking.room_no is None:
            return
        room = self._uow.rooms.get(booking.room_no)
        if room.status == RoomStatus.BOOKED:
            self._uow.track(room)
            room.release()
            self._uow.collect_event(RoomReleased(room_no=room.number))
