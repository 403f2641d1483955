"""
Тесты реестра ресурсов: номера, ремонт, объекты инфраструктуры и парковка.
"""

from decimal import Decimal

import pytest
from hotel_ops.booking.domain import GuestNotFound
from hotel_ops.resources.domain import (
    FacilityNotAvailable,
    FacilityStatus,
    InvalidFacilityId,
    InvalidRoomNumber,
    InvalidSlotNumber,
    MaintenanceRequestNotFound,
    MaintenanceStatus,
    ParkingAlreadyAssigned,
    ParkingStatus,
    RoomNotAvailable,
    RoomStatus,
    RoomType,
)
from hotel_ops.shared_kernel import CapacityError, StateConflictError, ValidationError


class TestRoomInventory:
    """Тесты начального номерного фонда."""

    def test_layout(self, uow):
        rooms = list(uow.rooms)

        assert len(rooms) == 50
        assert [room.number for room in rooms] == list(range(1, 51))
        assert rooms[0].type == RoomType.STANDARD
        assert rooms[1].type == RoomType.DELUXE
        assert rooms[2].type == RoomType.SUITE
        assert rooms[9].floor == 1
        assert rooms[10].floor == 2
        assert all(room.status == RoomStatus.AVAILABLE for room in rooms)

    def test_price_ranges(self, uow):
        ranges = {
            RoomType.STANDARD: (100, 149),
            RoomType.DELUXE: (200, 299),
            RoomType.SUITE: (500, 699),
        }
        for room in uow.rooms:
            low, high = ranges[room.type]
            assert Decimal(low) <= room.nightly_price.amount <= Decimal(high)

    def test_prices_repeat_for_same_seed(self, make_engine):
        first = make_engine(RANDOM_SEED=5)
        second = make_engine(RANDOM_SEED=5)

        assert [r.nightly_price for r in first.uow.rooms] == [
            r.nightly_price for r in second.uow.rooms
        ]


class TestRoomAllocation:
    """Тесты занятия и освобождения номеров."""

    def test_allocate_and_release(self, engine):
        room = engine.allocate_room(5)
        assert room.status == RoomStatus.BOOKED

        room = engine.release_room(5)
        assert room.status == RoomStatus.AVAILABLE

    def test_double_allocation_rejected(self, engine):
        engine.allocate_room(5)

        with pytest.raises(RoomNotAvailable):
            engine.allocate_room(5)

    @pytest.mark.parametrize("room_no", [0, 51, -3])
    def test_out_of_range(self, engine, room_no):
        with pytest.raises(InvalidRoomNumber) as exc_info:
            engine.allocate_room(room_no)
        assert isinstance(exc_info.value, ValidationError)

    def test_list_available_rooms(self, engine):
        engine.allocate_room(1)
        engine.allocate_room(2)

        available = engine.list_available_rooms()

        assert len(available) == 48
        assert 1 not in [room.number for room in available]

    def test_get_room(self, engine):
        engine.allocate_room(7)

        room = engine.get_room(7)

        assert room.number == 7
        assert room.status == RoomStatus.BOOKED
        with pytest.raises(InvalidRoomNumber):
            engine.get_room(51)


class TestMaintenance:
    """Тесты заявок на ремонт."""

    def test_report_overrides_booked_status(self, engine):
        # Подготовка
        engine.allocate_room(3)

        # Действие
        request = engine.report_maintenance(3, "Plumbing", "Течет кран", "High")

        # Проверка
        assert request.id == 1
        assert request.issue == "Plumbing: Течет кран"
        assert request.report_date.isoformat() == "2023-05-20"
        assert engine.uow.rooms.get(3).status == RoomStatus.MAINTENANCE

    def test_report_invalid_room(self, engine):
        with pytest.raises(InvalidRoomNumber):
            engine.report_maintenance(99, "Electrical")
        assert len(engine.uow.maintenance) == 0

    def test_unknown_category(self, engine):
        with pytest.raises(ValidationError):
            engine.report_maintenance(3, "Roof")

    def test_resolution_releases_room(self, engine):
        request = engine.report_maintenance(4, "HVAC")

        engine.update_maintenance_status(request.id, "In Progress")
        assert engine.uow.rooms.get(4).status == RoomStatus.MAINTENANCE

        engine.update_maintenance_status(request.id, "Resolved")
        assert engine.uow.rooms.get(4).status == RoomStatus.AVAILABLE
        assert engine.uow.maintenance.get(request.id).status == MaintenanceStatus.RESOLVED

    def test_status_cannot_go_back(self, engine):
        request = engine.report_maintenance(4, "HVAC")
        engine.update_maintenance_status(request.id, MaintenanceStatus.RESOLVED)

        with pytest.raises(StateConflictError):
            engine.update_maintenance_status(request.id, MaintenanceStatus.IN_PROGRESS)

    def test_unknown_request(self, engine):
        with pytest.raises(MaintenanceRequestNotFound):
            engine.update_maintenance_status(7, "Resolved")

    def test_capacity(self, make_engine):
        engine = make_engine(MAX_MAINTENANCE_REQUESTS=2)
        engine.report_maintenance(1, "Other")
        engine.report_maintenance(2, "Other")

        with pytest.raises(CapacityError):
            engine.report_maintenance(3, "Other")
        # Номер не должен перейти в ремонт при неудачной регистрации
        assert engine.uow.rooms.get(3).status == RoomStatus.AVAILABLE

    def test_list_maintenance(self, engine):
        # Подготовка
        resolved = engine.report_maintenance(4, "HVAC")
        pending = engine.report_maintenance(5, "Plumbing")
        engine.update_maintenance_status(resolved.id, "Resolved")

        # Действие
        everything = engine.list_maintenance()
        still_open = engine.list_maintenance(open_only=True)

        # Проверка
        assert [request.id for request in everything] == [resolved.id, pending.id]
        assert [request.id for request in still_open] == [pending.id]


class TestFacilities:
    """Тесты объектов инфраструктуры."""

    def test_catalog(self, uow):
        names = [facility.name for facility in uow.facilities]
        assert names == ["Gym", "Pool", "Spa", "Restaurant", "Conference Room"]
        assert uow.facilities.get(3).points_override == 0
        assert uow.facilities.get(1).points_override is None

    def test_nearby(self, engine):
        assert [f.name for f in engine.nearby_facilities(1)] == ["Pool", "Spa"]
        assert [f.name for f in engine.nearby_facilities(4)] == [
            "Pool",
            "Spa",
            "Conference Room",
        ]

    def test_allocate_twice(self, engine):
        engine.allocate_facility(2)

        with pytest.raises(FacilityNotAvailable):
            engine.allocate_facility(2)

    @pytest.mark.parametrize("facility_id", [0, 6])
    def test_invalid_id(self, engine, facility_id):
        with pytest.raises(InvalidFacilityId):
            engine.allocate_facility(facility_id)

    def test_explicit_release(self, engine):
        engine.allocate_facility(2)

        facility = engine.release_facility(2)

        assert facility.status == FacilityStatus.AVAILABLE
        with pytest.raises(StateConflictError):
            engine.release_facility(2)


class TestParking:
    """Тесты парковки."""

    def test_first_slot_in_ascending_order(self, engine, guest):
        engine.uow.parking.get(1).assign("someone", "X000XX")

        allocation = engine.allocate_parking(guest.id, "A123BC")

        assert not allocation.waitlisted
        assert allocation.slot_no == 2
        slot = engine.uow.parking.get(2)
        assert slot.status == ParkingStatus.OCCUPIED
        assert slot.guest_id == guest.id
        assert slot.vehicle == "A123BC"

    def test_one_slot_per_guest(self, engine, guest):
        engine.allocate_parking(guest.id, "A123BC")

        with pytest.raises(ParkingAlreadyAssigned):
            engine.allocate_parking(guest.id, "B456CD")

    def test_unknown_guest(self, engine):
        with pytest.raises(GuestNotFound):
            engine.allocate_parking("nobody", "A123BC")

    def test_empty_vehicle(self, engine, guest):
        with pytest.raises(ValidationError):
            engine.allocate_parking(guest.id, "   ")

    def test_assignment_updates_open_booking(self, engine, guest):
        confirmation = engine.book_room(guest.id, 10, "01/06/2023", "03/06/2023")

        allocation = engine.allocate_parking(guest.id, "A123BC")

        booking = engine.find_booking(confirmation.booking.id)
        assert booking.parking_slot == allocation.slot_no

    def test_release(self, engine, guest):
        allocation = engine.allocate_parking(guest.id, "A123BC")

        slot = engine.release_parking(allocation.slot_no)

        assert slot.status == ParkingStatus.AVAILABLE
        assert slot.guest_id is None
        with pytest.raises(StateConflictError):
            engine.release_parking(allocation.slot_no)

    def test_release_invalid_slot(self, engine):
        with pytest.raises(InvalidSlotNumber):
            engine.release_parking(31)

    def test_release_clears_booking_reference(self, make_engine):
        # Подготовка
        engine = make_engine(PARKING_SLOTS=1)
        engine.register_guest("G001", "Анна")
        engine.register_guest("G002", "Борис")
        first = engine.book_room("G001", 2, "01/06/2023", "03/06/2023")
        second = engine.book_room("G002", 3, "01/06/2023", "03/06/2023")
        engine.allocate_parking("G001", "A123BC")
        assert engine.find_booking(first.booking.id).parking_slot == 1

        # Действие
        engine.release_parking(1)
        allocation = engine.allocate_parking("G002", "B456CD")

        # Проверка
        assert allocation.slot_no == 1
        assert engine.find_booking(first.booking.id).parking_slot is None
        assert engine.find_booking(second.booking.id).parking_slot == 1

    def test_list_parking(self, engine, guest):
        engine.allocate_parking(guest.id, "A123BC")

        slots = engine.list_parking()

        assert len(slots) == 30
        assert [slot.number for slot in slots if slot.status == ParkingStatus.OCCUPIED] == [1]
