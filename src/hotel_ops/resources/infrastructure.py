"""
Инфраструктурный слой контекста ресурсов.

Содержит реализации репозиториев в памяти и начальное наполнение
номерного фонда, парковки и объектов инфраструктуры.
"""

import random
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..shared_kernel import CapacityError, EntityId, Money
from . import interfaces as ports
from .domain import (
    Facility,
    InvalidFacilityId,
    InvalidRoomNumber,
    InvalidSlotNumber,
    MaintenanceRequest,
    MaintenanceRequestNotFound,
    ParkingSlot,
    Room,
    RoomStatus,
    RoomType,
)

# Тип номера -> (вместимость, базовая цена, разброс цены, удобства)
ROOM_TEMPLATES: Dict[RoomType, Tuple[int, int, int, List[str]]] = {
    RoomType.STANDARD: (2, 100, 50, ["TV", "WiFi", "AC"]),
    RoomType.DELUXE: (4, 200, 100, ["TV", "WiFi", "AC", "Mini-bar", "Balcony"]),
    RoomType.SUITE: (
        6,
        500,
        200,
        ["TV", "WiFi", "AC", "Mini-bar", "Jacuzzi", "Living area"],
    ),
}
ROOM_TYPE_CYCLE = (RoomType.STANDARD, RoomType.DELUXE, RoomType.SUITE)

# Каталог объектов: (название, стоимость бронирования)
FACILITY_CATALOG: Tuple[Tuple[str, str], ...] = (
    ("Gym", "10.00"),
    ("Pool", "5.00"),
    ("Spa", "50.00"),
    ("Restaurant", "0.00"),
    ("Conference Room", "100.00"),
)

# Пары соседних объектов (неориентированный граф)
FACILITY_ADJACENCY: Tuple[Tuple[int, int], ...] = ((1, 2), (1, 3), (2, 4), (3, 4), (4, 5))


def build_rooms(
    count: int, rng: random.Random, currency: str = "USD"
) -> List[Room]:
    """Создает номерной фонд: типы чередуются, по десять номеров на этаж."""
    rooms = []
    for index in range(count):
        room_type = ROOM_TYPE_CYCLE[index % len(ROOM_TYPE_CYCLE)]
        capacity, base_price, spread, features = ROOM_TEMPLATES[room_type]
        rooms.append(
            Room(
                number=index + 1,
                type=room_type,
                floor=index // 10 + 1,
                capacity=capacity,
                nightly_price=Money.of(base_price + rng.randrange(spread), currency),
                features=list(features),
            )
        )
    return rooms


def build_facilities(
    points_overrides: Optional[Mapping[int, int]] = None, currency: str = "USD"
) -> List[Facility]:
    """Создает фиксированный набор объектов и граф соседства между ними."""
    overrides = dict(points_overrides or {})
    facilities = [
        Facility(
            id=index,
            name=name,
            booking_fee=Money(amount=Decimal(fee), currency=currency),
            points_override=overrides.get(index),
        )
        for index, (name, fee) in enumerate(FACILITY_CATALOG, start=1)
    ]
    by_id = {facility.id: facility for facility in facilities}
    for left, right in FACILITY_ADJACENCY:
        by_id[left].adjacent.add(right)
        by_id[right].adjacent.add(left)
    return facilities


class InMemoryRoomRepository(ports.IRoomRepository):
    """Реализация репозитория номеров в памяти."""

    def __init__(self, rooms: Iterable[Room]):
        self._rooms: Dict[int, Room] = {room.number: room for room in rooms}

    def get(self, room_no: int) -> Room:
        if room_no not in self._rooms:
            raise InvalidRoomNumber(room_no, len(self._rooms))
        return self._rooms[room_no]

    def list_available(self) -> List[Room]:
        return [room for room in self if room.status == RoomStatus.AVAILABLE]

    def count_by_status(self, status: RoomStatus) -> int:
        return sum(1 for room in self._rooms.values() if room.status == status)

    def __iter__(self) -> Iterator[Room]:
        return iter(sorted(self._rooms.values(), key=lambda room: room.number))

    def __len__(self) -> int:
        return len(self._rooms)


class InMemoryParkingRepository(ports.IParkingRepository):
    """Реализация репозитория парковки в памяти; места перебираются по возрастанию номера."""

    def __init__(self, slot_count: int):
        self._slots: Dict[int, ParkingSlot] = {
            number: ParkingSlot(number=number) for number in range(1, slot_count + 1)
        }

    def get(self, slot_no: int) -> ParkingSlot:
        if slot_no not in self._slots:
            raise InvalidSlotNumber(slot_no, len(self._slots))
        return self._slots[slot_no]

    def first_available(self) -> Optional[ParkingSlot]:
        for slot in self:
            if slot.is_available():
                return slot
        return None

    def find_by_guest(self, guest_id: EntityId) -> Optional[ParkingSlot]:
        for slot in self._slots.values():
            if slot.guest_id == guest_id:
                return slot
        return None

    def occupied_count(self) -> int:
        return sum(1 for slot in self._slots.values() if not slot.is_available())

    def __iter__(self) -> Iterator[ParkingSlot]:
        return iter(self._slots[number] for number in sorted(self._slots))

    def __len__(self) -> int:
        return len(self._slots)


class InMemoryFacilityRepository(ports.IFacilityRepository):
    """Реализация репозитория объектов инфраструктуры в памяти."""

    def __init__(self, facilities: Iterable[Facility]):
        self._facilities: Dict[int, Facility] = {f.id: f for f in facilities}

    def get(self, facility_id: int) -> Facility:
        if facility_id not in self._facilities:
            raise InvalidFacilityId(facility_id, len(self._facilities))
        return self._facilities[facility_id]

    def neighbours(self, facility_id: int) -> List[Facility]:
        facility = self.get(facility_id)
        return [self._facilities[other] for other in sorted(facility.adjacent)]

    def __iter__(self) -> Iterator[Facility]:
        return iter(self._facilities[key] for key in sorted(self._facilities))

    def __len__(self) -> int:
        return len(self._facilities)


class InMemoryMaintenanceRepository(ports.IMaintenanceRepository):
    """Реализация репозитория заявок на ремонт в памяти."""

    def __init__(self, capacity: Optional[int] = None):
        self._requests: Dict[int, MaintenanceRequest] = {}
        self._capacity = capacity
        self._last_id = 0

    def next_id(self) -> int:
        if self._capacity is not None and len(self._requests) >= self._capacity:
            raise CapacityError(
                f"Достигнуто максимальное число заявок на ремонт ({self._capacity})"
            )
        return self._last_id + 1

    def add(self, request: MaintenanceRequest) -> None:
        self.next_id()
        self._requests[request.id] = request
        self._last_id = max(self._last_id, request.id)

    def discard(self, request_id: int) -> None:
        self._requests.pop(request_id, None)
        self._last_id = max(self._requests, default=0)

    def get(self, request_id: int) -> MaintenanceRequest:
        if request_id not in self._requests:
            raise MaintenanceRequestNotFound(request_id)
        return self._requests[request_id]

    def list_open(self) -> List[MaintenanceRequest]:
        return [request for request in self if request.is_open()]

    def __iter__(self) -> Iterator[MaintenanceRequest]:
        return iter(self._requests[key] for key in sorted(self._requests))

    def __len__(self) -> int:
        return len(self._requests)
