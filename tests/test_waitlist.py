"""
Тесты очереди ожидания парковки.
"""

import pytest
from hotel_ops.resources.domain import AlreadyWaitlisted, ParkingStatus, ParkingWaitlist
from hotel_ops.shared_kernel import StateConflictError


@pytest.fixture
def small_lot(make_engine):
    """Движок с двумя парковочными местами и четырьмя гостями."""
    engine = make_engine(PARKING_SLOTS=2)
    for number in range(1, 5):
        engine.register_guest(f"G{number}", f"Гость {number}")
    return engine


class TestParkingWaitlist:
    """Модульные тесты очереди."""

    def test_fifo_order(self):
        waitlist = ParkingWaitlist()
        waitlist.enqueue("A", "A111AA")
        waitlist.enqueue("B", "B222BB")
        waitlist.enqueue("C", "C333CC")

        assert [waitlist.pop_next().guest_id for _ in range(3)] == ["A", "B", "C"]
        assert not waitlist

    def test_position_of(self):
        waitlist = ParkingWaitlist()
        waitlist.enqueue("A", "A111AA")
        waitlist.enqueue("B", "B222BB")

        assert waitlist.position_of("B") == 2
        assert waitlist.position_of("Z") is None

    def test_pop_empty(self):
        with pytest.raises(StateConflictError):
            ParkingWaitlist().pop_next()

    def test_requeue_front_restores_head(self):
        waitlist = ParkingWaitlist()
        waitlist.enqueue("A", "A111AA")
        waitlist.enqueue("B", "B222BB")

        entry = waitlist.pop_next()
        waitlist.requeue_front(entry)

        assert waitlist.peek().guest_id == "A"
        assert len(waitlist) == 2


class TestWaitlistFlow:
    """Сценарии с заполненной парковкой."""

    def test_full_lot_waitlists_in_order(self, small_lot):
        # Подготовка
        small_lot.allocate_parking("G1", "A111AA")
        small_lot.allocate_parking("G2", "B222BB")

        # Действие
        third = small_lot.allocate_parking("G3", "C333CC")
        fourth = small_lot.allocate_parking("G4", "D444DD")

        # Проверка
        assert third.waitlisted and third.waitlist_position == 1
        assert fourth.waitlisted and fourth.waitlist_position == 2
        assert [entry.guest_id for entry in small_lot.waitlist()] == ["G3", "G4"]

    def test_release_then_drain_serves_head(self, small_lot):
        # Подготовка
        small_lot.allocate_parking("G1", "A111AA")
        small_lot.allocate_parking("G2", "B222BB")
        small_lot.allocate_parking("G3", "C333CC")
        small_lot.allocate_parking("G4", "D444DD")

        # Действие
        small_lot.release_parking(1)
        assert len(small_lot.waitlist()) == 2
        allocations = small_lot.drain_waitlist()

        # Проверка
        assert [(a.guest_id, a.slot_no) for a in allocations] == [("G3", 1)]
        slot = small_lot.uow.parking.get(1)
        assert slot.status == ParkingStatus.OCCUPIED
        assert slot.guest_id == "G3"
        assert slot.vehicle == "C333CC"
        assert [entry.guest_id for entry in small_lot.waitlist()] == ["G4"]

    def test_drain_without_free_slots(self, small_lot):
        small_lot.allocate_parking("G1", "A111AA")
        small_lot.allocate_parking("G2", "B222BB")
        small_lot.allocate_parking("G3", "C333CC")

        assert small_lot.drain_waitlist() == []
        assert len(small_lot.waitlist()) == 1

    def test_guest_cannot_queue_twice(self, small_lot):
        small_lot.allocate_parking("G1", "A111AA")
        small_lot.allocate_parking("G2", "B222BB")
        small_lot.allocate_parking("G3", "C333CC")

        with pytest.raises(AlreadyWaitlisted):
            small_lot.allocate_parking("G3", "C333CC")
        assert len(small_lot.waitlist()) == 1

    def test_drain_sets_slot_on_open_booking(self, small_lot):
        small_lot.allocate_parking("G1", "A111AA")
        small_lot.allocate_parking("G2", "B222BB")
        confirmation = small_lot.book_room("G3", 7, "01/06/2023", "04/06/2023")
        small_lot.allocate_parking("G3", "C333CC")

        small_lot.release_parking(2)
        small_lot.drain_waitlist()

        assert small_lot.find_booking(confirmation.booking.id).parking_slot == 2
