"""
Доменная модель контекста ресурсов.

Содержит номера, парковочные места, объекты инфраструктуры отеля,
заявки на ремонт и очередь ожидания парковки.
"""

from collections import deque
from datetime import date
from enum import Enum
from typing import Deque, Iterator, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from ..shared_kernel import (
    DomainEvent,
    EntityId,
    Money,
    NotFoundError,
    StateConflictError,
    ValidationError,
)


class RoomType(str, Enum):
    """Типы номеров в отеле."""

    STANDARD = "Standard"
    DELUXE = "Deluxe"
    SUITE = "Suite"


class RoomStatus(str, Enum):
    """Статусы номера."""

    AVAILABLE = "Available"
    BOOKED = "Booked"
    MAINTENANCE = "Maintenance"


class ParkingStatus(str, Enum):
    """Статусы парковочного места."""

    AVAILABLE = "Available"
    OCCUPIED = "Occupied"


class FacilityStatus(str, Enum):
    """Статусы объекта инфраструктуры."""

    AVAILABLE = "Available"
    BOOKED = "Booked"


class MaintenanceCategory(str, Enum):
    """Категории неисправностей."""

    ELECTRICAL = "Electrical"
    PLUMBING = "Plumbing"
    HVAC = "HVAC"
    FURNITURE = "Furniture"
    OTHER = "Other"


class MaintenancePriority(str, Enum):
    """Приоритет заявки на ремонт."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class MaintenanceStatus(str, Enum):
    """Статусы заявки на ремонт."""

    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


# Исключения контекста


class InvalidRoomNumber(ValidationError):
    def __init__(self, room_no: int, room_count: int):
        super().__init__(f"Номер {room_no} вне диапазона 1..{room_count}")
        self.room_no = room_no


class InvalidSlotNumber(ValidationError):
    def __init__(self, slot_no: int, slot_count: int):
        super().__init__(f"Парковочное место {slot_no} вне диапазона 1..{slot_count}")
        self.slot_no = slot_no


class InvalidFacilityId(ValidationError):
    def __init__(self, facility_id: int, facility_count: int):
        super().__init__(
            f"Объект {facility_id} вне диапазона 1..{facility_count}"
        )
        self.facility_id = facility_id


class MaintenanceRequestNotFound(NotFoundError):
    def __init__(self, request_id: int):
        super().__init__(f"Заявка на ремонт {request_id} не найдена")
        self.request_id = request_id


class RoomNotAvailable(StateConflictError):
    def __init__(self, room_no: int, status: RoomStatus):
        super().__init__(f"Номер {room_no} недоступен (статус {status.value})")
        self.room_no = room_no
        self.status = status


class FacilityNotAvailable(StateConflictError):
    def __init__(self, facility_id: int, name: str):
        super().__init__(f"Объект {name} (#{facility_id}) уже забронирован")
        self.facility_id = facility_id


class ParkingAlreadyAssigned(StateConflictError):
    def __init__(self, guest_id: EntityId, slot_no: int):
        super().__init__(f"У гостя {guest_id} уже есть место {slot_no}")
        self.guest_id = guest_id
        self.slot_no = slot_no


class AlreadyWaitlisted(StateConflictError):
    def __init__(self, guest_id: EntityId, position: int):
        super().__init__(
            f"Гость {guest_id} уже стоит в очереди на парковку (позиция {position})"
        )
        self.guest_id = guest_id
        self.position = position


# Сущности


class Room(BaseModel):
    """Номер в отеле."""

    number: int = Field(..., ge=1)
    type: RoomType
    status: RoomStatus = RoomStatus.AVAILABLE
    nightly_price: Money
    floor: int = Field(..., ge=1)
    capacity: int = Field(..., gt=0)
    features: List[str] = Field(default_factory=list)

    def is_available(self) -> bool:
        return self.status == RoomStatus.AVAILABLE

    def allocate(self) -> None:
        """Занимает номер под бронирование."""
        if self.status != RoomStatus.AVAILABLE:
            raise RoomNotAvailable(self.number, self.status)
        self.status = RoomStatus.BOOKED

    def release(self) -> None:
        """Освобождает номер."""
        self.status = RoomStatus.AVAILABLE

    def mark_as_maintenance(self) -> None:
        """Выводит номер на ремонт независимо от текущего статуса."""
        self.status = RoomStatus.MAINTENANCE


class ParkingSlot(BaseModel):
    """Парковочное место."""

    number: int = Field(..., ge=1)
    status: ParkingStatus = ParkingStatus.AVAILABLE
    vehicle: Optional[str] = None
    guest_id: Optional[EntityId] = None

    def is_available(self) -> bool:
        return self.status == ParkingStatus.AVAILABLE

    def assign(self, guest_id: EntityId, vehicle: str) -> None:
        if self.status != ParkingStatus.AVAILABLE:
            raise StateConflictError(f"Место {self.number} уже занято")
        self.status = ParkingStatus.OCCUPIED
        self.guest_id = guest_id
        self.vehicle = vehicle

    def release(self) -> None:
        if self.status != ParkingStatus.OCCUPIED:
            raise StateConflictError(f"Место {self.number} и так свободно")
        self.status = ParkingStatus.AVAILABLE
        self.guest_id = None
        self.vehicle = None


class Facility(BaseModel):
    """Объект инфраструктуры отеля (спортзал, бассейн, спа и т.д.)."""

    id: int = Field(..., ge=1)
    name: str
    status: FacilityStatus = FacilityStatus.AVAILABLE
    booking_fee: Money
    adjacent: Set[int] = Field(default_factory=set)
    # Собственная норма начисления баллов; при None действует общая формула
    points_override: Optional[int] = Field(None, ge=0)

    def is_available(self) -> bool:
        return self.status == FacilityStatus.AVAILABLE

    def allocate(self) -> None:
        if self.status != FacilityStatus.AVAILABLE:
            raise FacilityNotAvailable(self.id, self.name)
        self.status = FacilityStatus.BOOKED

    def release(self) -> None:
        self.status = FacilityStatus.AVAILABLE


class MaintenanceRequest(BaseModel):
    """Заявка на ремонт номера."""

    id: int
    room_no: int
    category: MaintenanceCategory
    description: str = ""
    priority: MaintenancePriority
    status: MaintenanceStatus = MaintenanceStatus.OPEN
    report_date: date

    @property
    def issue(self) -> str:
        if not self.description:
            return self.category.value
        return f"{self.category.value}: {self.description}"

    def is_open(self) -> bool:
        return self.status != MaintenanceStatus.RESOLVED

    def change_status(self, status: MaintenanceStatus) -> None:
        """Продвигает заявку: Open → In Progress → Resolved, без возврата назад."""
        order = list(MaintenanceStatus)
        if order.index(status) <= order.index(self.status):
            raise StateConflictError(
                f"Заявка {self.id}: переход {self.status.value} → {status.value} невозможен"
            )
        self.status = status


class WaitlistEntry(BaseModel):
    """Запрос на парковку, ожидающий свободного места."""

    model_config = ConfigDict(frozen=True)

    guest_id: EntityId
    vehicle: str
    sequence: int


class ParkingWaitlist:
    """Очередь ожидания парковки, строго FIFO."""

    def __init__(self) -> None:
        self._entries: Deque[WaitlistEntry] = deque()
        self._sequence = 0

    def enqueue(self, guest_id: EntityId, vehicle: str) -> WaitlistEntry:
        self._sequence += 1
        entry = WaitlistEntry(guest_id=guest_id, vehicle=vehicle, sequence=self._sequence)
        self._entries.append(entry)
        return entry

    def peek(self) -> Optional[WaitlistEntry]:
        return self._entries[0] if self._entries else None

    def pop_next(self) -> WaitlistEntry:
        if not self._entries:
            raise StateConflictError("Очередь ожидания парковки пуста")
        return self._entries.popleft()

    def requeue_front(self, entry: WaitlistEntry) -> None:
        """Возвращает запись в голову очереди (используется при откате)."""
        self._entries.appendleft(entry)

    def discard_last(self, entry: WaitlistEntry) -> None:
        """Убирает только что добавленную запись (используется при откате)."""
        if self._entries and self._entries[-1] == entry:
            self._entries.pop()

    def position_of(self, guest_id: EntityId) -> Optional[int]:
        for position, entry in enumerate(self._entries, start=1):
            if entry.guest_id == guest_id:
                return position
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[WaitlistEntry]:
        return iter(list(self._entries))

    def __bool__(self) -> bool:
        return bool(self._entries)


class ParkingAllocation(BaseModel):
    """Результат запроса на парковку: назначенное место или позиция в очереди."""

    guest_id: EntityId
    vehicle: str
    slot_no: Optional[int] = None
    waitlist_position: Optional[int] = None

    @property
    def waitlisted(self) -> bool:
        return self.slot_no is None


# События


class RoomReleased(DomainEvent):
    room_no: int


class MaintenanceReported(DomainEvent):
    request_id: int
    room_no: int
    issue: str
    priority: MaintenancePriority


class MaintenanceStatusChanged(DomainEvent):
    request_id: int
    room_no: int
    status: MaintenanceStatus


class ParkingAssigned(DomainEvent):
    guest_id: EntityId
    slot_no: int
    vehicle: str
    from_waitlist: bool = False


class ParkingWaitlisted(DomainEvent):
    guest_id: EntityId
    vehicle: str
    position: int


class ParkingReleased(DomainEvent):
    slot_no: int
    guest_id: Optional[EntityId] = None


class FacilityReleased(DomainEvent):
    facility_id: int
