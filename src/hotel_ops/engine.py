"""
Фасад движка бронирования.

Принимает простые значения (строки, числа, даты), сам строит и проверяет
запросы и делегирует работу сервисам приложения. Ошибки проверки
входных данных pydantic превращаются в доменный ValidationError.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .billing.application import (
    BillingApplicationService,
    GenerateBillRequest,
    PayBillRequest,
    ServiceOrderApplicationService,
    ServiceOrderRequest,
)
from .billing.domain import Bill, PaymentMethod, ServiceOrder, ServiceStatus
from .booking.application import (
    BookFacilityRequest,
    BookingApplicationService,
    BookingConfirmation,
    BookingDTO,
    BookRoomRequest,
    RegisterGuestRequest,
)
from .booking.domain import Guest, StatusChange
from .resources.application import ParkingRequest, ReportMaintenanceRequest, ResourceRegistry
from .resources.domain import (
    Facility,
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceRequest,
    MaintenanceStatus,
    ParkingAllocation,
    ParkingSlot,
    Room,
    RoomStatus,
    WaitlistEntry,
)
from .shared_kernel import ActivityLog, CalendarDate, Money, ValidationError
from .unit_of_work import HotelUnitOfWork

TRequest = TypeVar("TRequest", bound=BaseModel)
TEnum = TypeVar("TEnum", bound=Enum)


def build_request(model: Type[TRequest], **data: Any) -> TRequest:
    """Создает DTO запроса; ошибки проверки pydantic становятся доменными."""
    try:
        return model(**data)
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or model.__name__}: {error['msg']}"
            for error in e.errors()
        )
        raise ValidationError(f"Некорректный запрос {model.__name__}: {details}") from e


def parse_enum(enum_cls: Type[TEnum], value: Union[str, TEnum]) -> TEnum:
    """Приводит строку к значению перечисления (по значению или по имени)."""
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if value in (member.value, member.name) or str(value).lower() == member.value.lower():
            return member
    allowed = ", ".join(member.value for member in enum_cls)
    raise ValidationError(f"Недопустимое значение {value!r}; ожидается одно из: {allowed}")


def percentage(part: int, whole: int) -> Decimal:
    if whole == 0:
        return Decimal("0.0")
    return (Decimal(part) * 100 / Decimal(whole)).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )


class DashboardDTO(BaseModel):
    """Сводка по загрузке отеля."""

    total_rooms: int
    booked_rooms: int
    rooms_in_maintenance: int
    room_occupancy_pct: Decimal
    total_parking_slots: int
    occupied_parking_slots: int
    parking_occupancy_pct: Decimal
    waitlist_length: int
    total_revenue: Money
    paid_bills: int
    open_maintenance_requests: int
    bookings_by_status: Dict[str, int]
    total_bookings: int
    registered_guests: int


class HotelEngine:
    """Операции движка бронирования с простыми параметрами."""

    def __init__(
        self,
        uow: HotelUnitOfWork,
        registry: ResourceRegistry,
        bookings: BookingApplicationService,
        billing: BillingApplicationService,
        services: ServiceOrderApplicationService,
        activity_log: Optional[ActivityLog] = None,
    ):
        self.uow = uow
        self.registry = registry
        self.bookings = bookings
        self.billing = billing
        self.services = services
        self.activity_log = activity_log

    # Гости и бронирования

    def register_guest(
        self,
        guest_id: str,
        name: str,
        contact: str = "",
        email: str = "",
        preferences: str = "",
        loyalty_points: int = 0,
    ) -> Guest:
        request = build_request(
            RegisterGuestRequest,
            guest_id=guest_id,
            name=name,
            contact=contact,
            email=email,
            preferences=preferences,
            loyalty_points=loyalty_points,
        )
        return self.bookings.register_guest(request)

    def get_guest(self, guest_id: str) -> Guest:
        return self.bookings.get_guest(guest_id)

    def book_room(
        self, guest_id: str, room_no: int, check_in: Any, check_out: Any
    ) -> BookingConfirmation:
        request = build_request(
            BookRoomRequest,
            guest_id=guest_id,
            room_no=room_no,
            check_in=check_in,
            check_out=check_out,
        )
        return self.bookings.book_room(request)

    def book_facility(
        self, guest_id: str, facility_id: int, booked_for: Any
    ) -> BookingConfirmation:
        request = build_request(
            BookFacilityRequest,
            guest_id=guest_id,
            facility_id=facility_id,
            booked_for=booked_for,
        )
        return self.bookings.book_facility(request)

    def find_booking(self, booking_id: str) -> BookingDTO:
        return BookingDTO.from_domain(self.bookings.find_booking(booking_id))

    def list_bookings_for_guest(self, guest_id: str) -> List[BookingDTO]:
        return [
            BookingDTO.from_domain(booking)
            for booking in self.bookings.list_guest_bookings(guest_id)
        ]

    def advance_statuses(self, today: Any = None) -> List[StatusChange]:
        day: Optional[date] = None
        if today is not None:
            day = CalendarDate.coerce(today).to_date()
        return self.bookings.advance_statuses(day)

    # Ресурсы

    def get_room(self, room_no: int) -> Room:
        return self.registry.get_room(room_no)

    def allocate_room(self, room_no: int) -> Room:
        return self.registry.allocate_room(room_no)

    def release_room(self, room_no: int) -> Room:
        return self.registry.release_room(room_no)

    def list_available_rooms(self) -> List[Room]:
        return self.registry.list_available_rooms()

    def allocate_facility(self, facility_id: int) -> Facility:
        return self.registry.allocate_facility(facility_id)

    def release_facility(self, facility_id: int) -> Facility:
        return self.registry.release_facility(facility_id)

    def nearby_facilities(self, facility_id: int) -> List[Facility]:
        return self.registry.nearby_facilities(facility_id)

    def allocate_parking(self, guest_id: str, vehicle: str) -> ParkingAllocation:
        request = build_request(ParkingRequest, guest_id=guest_id, vehicle=vehicle)
        return self.registry.allocate_parking(request)

    def release_parking(self, slot_no: int) -> ParkingSlot:
        return self.registry.release_parking(slot_no)

    def drain_waitlist(self) -> List[ParkingAllocation]:
        return self.registry.drain_waitlist()

    def list_parking(self) -> List[ParkingSlot]:
        return self.registry.list_parking()

    def waitlist(self) -> List[WaitlistEntry]:
        return self.registry.waitlist()

    def report_maintenance(
        self,
        room_no: int,
        category: Union[str, MaintenanceCategory],
        description: str = "",
        priority: Union[str, MaintenancePriority] = "Medium",
    ) -> MaintenanceRequest:
        request = build_request(
            ReportMaintenanceRequest,
            room_no=room_no,
            category=parse_enum(MaintenanceCategory, category),
            description=description,
            priority=parse_enum(MaintenancePriority, priority),
        )
        return self.registry.report_maintenance(request)

    def update_maintenance_status(
        self, request_id: int, status: Union[str, MaintenanceStatus]
    ) -> MaintenanceRequest:
        return self.registry.update_maintenance_status(
            request_id, parse_enum(MaintenanceStatus, status)
        )

    def list_maintenance(self, open_only: bool = False) -> List[MaintenanceRequest]:
        return self.registry.list_maintenance(open_only)

    # Обслуживание и счета

    def order_service(self, room_no: int, item: str) -> ServiceOrder:
        request = build_request(ServiceOrderRequest, room_no=room_no, item=item)
        return self.services.order_service(request)

    def update_service_status(
        self, order_id: int, status: Union[str, ServiceStatus]
    ) -> ServiceOrder:
        return self.services.update_service_status(
            order_id, parse_enum(ServiceStatus, status)
        )

    def list_orders(self, room_no: Optional[int] = None) -> List[ServiceOrder]:
        return self.services.list_orders(room_no)

    def generate_bill(self, guest_id: str, booking_id: str) -> Bill:
        request = build_request(
            GenerateBillRequest, guest_id=guest_id, booking_id=booking_id
        )
        return self.billing.generate_bill(request)

    def pay_bill(
        self, bill_id: int, method: Union[str, PaymentMethod, None] = None
    ) -> Bill:
        payment_method = None if method is None else parse_enum(PaymentMethod, method)
        request = build_request(PayBillRequest, bill_id=bill_id, method=payment_method)
        return self.billing.pay_bill(request)

    def get_bill(self, bill_id: int) -> Bill:
        return self.billing.get_bill(bill_id)

    def list_bills(self) -> List[Bill]:
        return self.billing.list_bills()

    # Аналитика

    def dashboard(self) -> DashboardDTO:
        """Сводка по номерам, парковке, выручке, ремонту и бронированиям."""
        uow = self.uow
        with uow:
            booked = uow.rooms.count_by_status(RoomStatus.BOOKED)
            occupied = uow.parking.occupied_count()
            by_status = uow.bookings.count_by_status()
            return DashboardDTO(
                total_rooms=len(uow.rooms),
                booked_rooms=booked,
                rooms_in_maintenance=uow.rooms.count_by_status(RoomStatus.MAINTENANCE),
                room_occupancy_pct=percentage(booked, len(uow.rooms)),
                total_parking_slots=len(uow.parking),
                occupied_parking_slots=occupied,
                parking_occupancy_pct=percentage(occupied, len(uow.parking)),
                waitlist_length=len(uow.waitlist),
                total_revenue=uow.revenue.total,
                paid_bills=uow.revenue.payments,
                open_maintenance_requests=len(uow.maintenance.list_open()),
                bookings_by_status={
                    status.value: count for status, count in by_status.items()
                },
                total_bookings=len(uow.bookings),
                registered_guests=len(uow.guests),
            )
