"""
Инфраструктурный слой контекста бронирования.

Содержит репозиторий гостей и индекс бронирований в памяти.
"""

import random
from bisect import bisect_left, insort
from collections import Counter
from datetime import date
from typing import Dict, Iterator, List, Optional, Tuple

from ..shared_kernel import CapacityError, EntityId, generate_booking_id
from . import interfaces as ports
from .domain import (
    Booking,
    BookingNotFound,
    BookingStatus,
    DuplicateBooking,
    DuplicateGuest,
    Guest,
    GuestNotFound,
    StatusChange,
)

# Ключ индекса: дата заезда и порядковый номер вставки для устойчивого порядка
IndexKey = Tuple[date, int]


class InMemoryGuestRepository(ports.IGuestRepository):
    """Реализация репозитория гостей в памяти."""

    def __init__(self, capacity: Optional[int] = None):
        self._guests: Dict[EntityId, Guest] = {}
        self._capacity = capacity

    def add(self, guest: Guest) -> None:
        if guest.id in self._guests:
            raise DuplicateGuest(guest.id)
        if self._capacity is not None and len(self._guests) >= self._capacity:
            raise CapacityError(
                f"Достигнуто максимальное число гостей ({self._capacity})"
            )
        self._guests[guest.id] = guest

    def discard(self, guest_id: EntityId) -> None:
        self._guests.pop(guest_id, None)

    def get(self, guest_id: EntityId) -> Guest:
        if guest_id not in self._guests:
            raise GuestNotFound(guest_id)
        return self._guests[guest_id]

    def __contains__(self, guest_id: object) -> bool:
        return guest_id in self._guests

    def __iter__(self) -> Iterator[Guest]:
        return iter(list(self._guests.values()))

    def __len__(self) -> int:
        return len(self._guests)


class GuestBookings:
    """
    Бронирования одного гостя по возрастанию даты заезда.

    Представление ленивое: бронирования читаются из индекса при обходе,
    и каждый новый обход начинается с начала.
    """

    def __init__(self, index: "BookingIndex", guest_id: EntityId):
        self._index = index
        self._guest_id = guest_id

    @property
    def guest_id(self) -> EntityId:
        return self._guest_id

    def __iter__(self) -> Iterator[Booking]:
        for key in tuple(self._index._keys_by_guest.get(self._guest_id, ())):
            booking = self._index._by_key.get(key)
            if booking is not None:
                yield booking

    def __len__(self) -> int:
        return len(self._index._keys_by_guest.get(self._guest_id, ()))

    def __repr__(self) -> str:
        return f"GuestBookings(guest_id={self._guest_id!r}, count={len(self)})"


class BookingIndex(ports.IBookingIndex):
    """
    Индекс бронирований, упорядоченный по дате заезда.

    Ключи хранятся в отсортированном списке и вставляются бинарным поиском;
    при совпадении дат порядок определяется порядком вставки. Рядом
    поддерживаются словарь по идентификатору и вторичные индексы
    гость -> ключи и номер -> ключи.
    """

    def __init__(self, capacity: Optional[int] = None):
        self._capacity = capacity
        self._sequence = 0
        self._order: List[IndexKey] = []
        self._by_key: Dict[IndexKey, Booking] = {}
        self._key_by_id: Dict[EntityId, IndexKey] = {}
        self._keys_by_guest: Dict[EntityId, List[IndexKey]] = {}
        self._keys_by_room: Dict[int, List[IndexKey]] = {}

    def insert(self, booking: Booking) -> None:
        if booking.id in self._key_by_id:
            raise DuplicateBooking(booking.id)
        if self._capacity is not None and len(self._order) >= self._capacity:
            raise CapacityError(
                f"Достигнуто максимальное число бронирований ({self._capacity})"
            )
        self._sequence += 1
        key = (booking.check_in, self._sequence)
        insort(self._order, key)
        self._by_key[key] = booking
        self._key_by_id[booking.id] = key
        insort(self._keys_by_guest.setdefault(booking.guest_id, []), key)
        if booking.room_no is not None:
            insort(self._keys_by_room.setdefault(booking.room_no, []), key)

    def new_id(self, rng: random.Random, length: int = 6) -> EntityId:
        """Случайный идентификатор, которого еще нет в индексе."""
        while True:
            candidate = generate_booking_id(rng, length)
            if candidate not in self._key_by_id:
                return candidate

    def discard(self, booking_id: EntityId) -> None:
        """Удаляет бронирование из индекса (используется при откате)."""
        key = self._key_by_id.pop(booking_id, None)
        if key is None:
            return
        booking = self._by_key.pop(key)
        self._remove_key(self._order, key)
        self._remove_key(self._keys_by_guest.get(booking.guest_id, []), key)
        if booking.room_no is not None:
            self._remove_key(self._keys_by_room.get(booking.room_no, []), key)

    @staticmethod
    def _remove_key(keys: List[IndexKey], key: IndexKey) -> None:
        position = bisect_left(keys, key)
        if position < len(keys) and keys[position] == key:
            del keys[position]

    def find_by_id(self, booking_id: EntityId) -> Booking:
        key = self._key_by_id.get(booking_id)
        if key is None:
            raise BookingNotFound(booking_id)
        return self._by_key[key]

    def list_by_guest(self, guest_id: EntityId) -> GuestBookings:
        return GuestBookings(self, guest_id)

    def due_for_advance(self, today: date) -> List[Booking]:
        """Бронирования, статус которых изменится при продвижении на дату today."""
        return [booking for booking in self if booking.needs_advance(today)]

    def advance_statuses(self, today: date) -> List[StatusChange]:
        changes = []
        for booking in self:
            previous = booking.advance(today)
            if previous is not None:
                changes.append(
                    StatusChange(
                        booking_id=booking.id, previous=previous, current=booking.status
                    )
                )
        return changes

    def find_active_by_room(self, room_no: int) -> Optional[Booking]:
        """Первое по дате заезда активное бронирование номера."""
        for key in self._keys_by_room.get(room_no, ()):
            booking = self._by_key[key]
            if booking.status == BookingStatus.ACTIVE:
                return booking
        return None

    def find_open_for_guest(self, guest_id: EntityId) -> Optional[Booking]:
        """Ближайшее по дате заезда незавершенное бронирование гостя."""
        for booking in self.list_by_guest(guest_id):
            if booking.is_open():
                return booking
        return None

    def count_by_status(self) -> Dict[BookingStatus, int]:
        counts = Counter(booking.status for booking in self._by_key.values())
        return {status: counts.get(status, 0) for status in BookingStatus}

    def __contains__(self, booking_id: object) -> bool:
        return booking_id in self._key_by_id

    def __iter__(self) -> Iterator[Booking]:
        for key in tuple(self._order):
            yield self._by_key[key]

    def __len__(self) -> int:
        return len(self._order)
