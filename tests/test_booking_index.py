"""
Тесты индекса бронирований и жизненного цикла статусов.
"""

import random
from datetime import date

import pytest
from hotel_ops.booking.domain import (
    Booking,
    BookingNotFound,
    BookingStatus,
    GuestNotFound,
)
from hotel_ops.booking.infrastructure import BookingIndex
from hotel_ops.shared_kernel import CapacityError, Money, StateConflictError


def make_booking(booking_id, guest_id="G1", check_in=date(2023, 6, 1), nights=2, room_no=1):
    return Booking(
        id=booking_id,
        guest_id=guest_id,
        room_no=room_no,
        check_in=check_in,
        check_out=date.fromordinal(check_in.toordinal() + nights),
        total=Money.of(100),
    )


class TestBookingModel:
    def test_check_out_after_check_in(self):
        with pytest.raises(ValueError):
            make_booking("AAAAAA", nights=0)

    def test_room_or_facility(self):
        with pytest.raises(ValueError):
            Booking(
                id="AAAAAA",
                guest_id="G1",
                room_no=1,
                facility_id=2,
                check_in=date(2023, 6, 1),
                check_out=date(2023, 6, 2),
                total=Money.of(10),
            )


class TestBookingIndex:
    """Тесты упорядоченного индекса."""

    def test_ordered_by_check_in_with_stable_ties(self):
        # Подготовка
        index = BookingIndex()
        index.insert(make_booking("C00001", check_in=date(2023, 6, 10)))
        index.insert(make_booking("A00001", check_in=date(2023, 6, 1)))
        index.insert(make_booking("B00001", check_in=date(2023, 6, 10)))
        index.insert(make_booking("D00001", check_in=date(2023, 5, 30)))

        # Действие
        ids = [booking.id for booking in index]

        # Проверка
        assert ids == ["D00001", "A00001", "C00001", "B00001"]

    def test_list_by_guest_is_lazy_and_restartable(self):
        index = BookingIndex()
        index.insert(make_booking("X00002", guest_id="G1", check_in=date(2023, 7, 1)))
        index.insert(make_booking("Y00001", guest_id="G2", check_in=date(2023, 6, 1)))
        index.insert(make_booking("X00001", guest_id="G1", check_in=date(2023, 6, 1)))

        view = index.list_by_guest("G1")
        assert [b.id for b in view] == ["X00001", "X00002"]
        assert [b.id for b in view] == ["X00001", "X00002"]

        # Новое бронирование видно в уже полученном представлении
        index.insert(make_booking("X00003", guest_id="G1", check_in=date(2023, 5, 25)))
        assert [b.id for b in view] == ["X00003", "X00001", "X00002"]
        assert len(view) == 3

    def test_unknown_guest_yields_nothing(self):
        assert list(BookingIndex().list_by_guest("nobody")) == []

    def test_duplicate_id(self):
        index = BookingIndex()
        index.insert(make_booking("AAAAAA"))

        with pytest.raises(StateConflictError):
            index.insert(make_booking("AAAAAA", check_in=date(2023, 8, 1)))
        assert len(index) == 1

    def test_capacity(self):
        index = BookingIndex(capacity=2)
        index.insert(make_booking("A00001"))
        index.insert(make_booking("A00002"))

        with pytest.raises(CapacityError):
            index.insert(make_booking("A00003"))

    def test_find_by_id(self):
        index = BookingIndex()
        booking = make_booking("AAAAAA")
        index.insert(booking)

        assert index.find_by_id("AAAAAA") is booking
        with pytest.raises(BookingNotFound):
            index.find_by_id("ZZZZZZ")

    def test_discard_keeps_order(self):
        index = BookingIndex()
        for number, day in enumerate((5, 1, 9), start=1):
            index.insert(make_booking(f"B0000{number}", check_in=date(2023, 6, day)))

        index.discard("B00001")

        assert [b.id for b in index] == ["B00002", "B00003"]
        assert "B00001" not in index
        assert [b.id for b in index.list_by_guest("G1")] == ["B00002", "B00003"]

    def test_generated_ids_are_unique(self):
        index = BookingIndex()
        rng = random.Random(2023)

        for _ in range(10000):
            index.insert(make_booking(index.new_id(rng)))

        assert len(index) == 10000
        assert len({booking.id for booking in index}) == 10000


class TestStatusAdvancement:
    """Тесты продвижения статусов по дате."""

    def test_upcoming_to_active_to_completed(self):
        index = BookingIndex()
        booking = make_booking("AAAAAA", check_in=date(2023, 6, 1), nights=3)
        index.insert(booking)

        assert index.advance_statuses(date(2023, 5, 31)) == []
        assert booking.status == BookingStatus.UPCOMING

        changes = index.advance_statuses(date(2023, 6, 1))
        assert [(c.previous, c.current) for c in changes] == [
            (BookingStatus.UPCOMING, BookingStatus.ACTIVE)
        ]

        index.advance_statuses(date(2023, 6, 4))
        assert booking.status == BookingStatus.COMPLETED

    def test_both_transitions_in_one_call(self):
        index = BookingIndex()
        booking = make_booking("AAAAAA", check_in=date(2023, 6, 1), nights=2)
        index.insert(booking)

        changes = index.advance_statuses(date(2023, 6, 10))

        assert booking.status == BookingStatus.COMPLETED
        assert changes[0].previous == BookingStatus.UPCOMING
        assert changes[0].current == BookingStatus.COMPLETED

    def test_idempotent(self):
        index = BookingIndex()
        index.insert(make_booking("AAAAAA", check_in=date(2023, 6, 1)))

        first = index.advance_statuses(date(2023, 6, 1))
        second = index.advance_statuses(date(2023, 6, 1))

        assert len(first) == 1
        assert second == []

    def test_cancelled_is_terminal(self):
        booking = make_booking("AAAAAA", check_in=date(2023, 6, 1))
        booking.status = BookingStatus.CANCELLED

        assert booking.advance(date(2030, 1, 1)) is None
        assert booking.status == BookingStatus.CANCELLED

    def test_find_active_by_room(self):
        index = BookingIndex()
        index.insert(make_booking("OLD001", check_in=date(2023, 5, 1), nights=2, room_no=4))
        index.insert(make_booking("NOW001", check_in=date(2023, 6, 1), nights=5, room_no=4))
        index.advance_statuses(date(2023, 6, 2))

        assert index.find_active_by_room(4).id == "NOW001"
        assert index.find_active_by_room(5) is None


class TestGuestBookingsThroughEngine:
    def test_list_requires_known_guest(self, engine):
        with pytest.raises(GuestNotFound):
            engine.list_bookings_for_guest("nobody")

    def test_list_in_check_in_order(self, engine, guest):
        late = engine.book_room(guest.id, 2, "10/07/2023", "12/07/2023")
        early = engine.book_room(guest.id, 3, "01/06/2023", "02/06/2023")

        listed = engine.list_bookings_for_guest(guest.id)

        assert [b.id for b in listed] == [early.booking.id, late.booking.id]

    def test_advance_through_engine_uses_clock(self, engine, guest):
        confirmation = engine.book_room(guest.id, 2, "20/05/2023", "22/05/2023")

        changes = engine.advance_statuses()

        assert [c.booking_id for c in changes] == [confirmation.booking.id]
        assert engine.find_booking(confirmation.booking.id).status == BookingStatus.ACTIVE
        assert engine.advance_statuses("22/05/2023")[0].current == BookingStatus.COMPLETED
