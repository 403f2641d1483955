"""
Тесты общего ядра: даты, деньги, события и журнал действий.
"""

import random
from datetime import date
from decimal import Decimal

import pytest
from hotel_ops.shared_kernel import (
    BOOKING_ID_ALPHABET,
    ActivityLog,
    CalendarDate,
    DomainEvent,
    InMemoryEventBus,
    Money,
    ValidationError,
    days_in_month,
    generate_booking_id,
    is_leap_year,
    is_valid_date,
)


class SampleHappened(DomainEvent):
    room_no: int


class TestCalendar:
    """Тесты календарных проверок."""

    @pytest.mark.parametrize(
        "year, expected",
        [(2024, True), (2023, False), (1900, False), (2000, True), (2100, False)],
    )
    def test_leap_years(self, year, expected):
        assert is_leap_year(year) is expected

    def test_february_29(self):
        assert is_valid_date(29, 2, 2024)
        assert not is_valid_date(29, 2, 2023)

    @pytest.mark.parametrize(
        "day, month, year",
        [(31, 4, 2024), (0, 1, 2024), (1, 13, 2024), (32, 12, 2024), (1, 0, 2024)],
    )
    def test_invalid_dates(self, day, month, year):
        assert not is_valid_date(day, month, year)

    def test_agrees_with_datetime(self):
        """Проверка совпадает с datetime.date для каждого дня нескольких лет."""
        for year in (2023, 2024, 2100):
            for month in range(1, 13):
                for day in range(1, 32):
                    try:
                        date(year, month, day)
                        expected = True
                    except ValueError:
                        expected = False
                    assert is_valid_date(day, month, year) is expected

    def test_days_in_month(self):
        assert days_in_month(2, 2024) == 29
        assert days_in_month(2, 2023) == 28
        assert days_in_month(11, 2023) == 30
        assert days_in_month(12, 2023) == 31


class TestCalendarDate:
    """Тесты приведения дат."""

    @pytest.mark.parametrize(
        "value",
        [
            "01/06/2023",
            "01 06 2023",
            "1/6/2023",
            (1, 6, 2023),
            date(2023, 6, 1),
            {"day": 1, "month": 6, "year": 2023},
        ],
    )
    def test_coerce_formats(self, value):
        assert CalendarDate.coerce(value).to_date() == date(2023, 6, 1)

    def test_coerce_iso_string(self):
        # Формат гггг-мм-дд распознается раньше дд/мм/гггг
        assert CalendarDate.coerce("2023-06-01") == CalendarDate.of(2023, 6, 1)
        assert str(CalendarDate.coerce(" 2024-02-29 ")) == "29/02/2024"

    def test_coerce_iso_string_checks_calendar(self):
        with pytest.raises(ValidationError):
            CalendarDate.coerce("2023-02-30")

    @pytest.mark.parametrize("value", ["29/02/2023", "31/04/2024", "2023-06", "abc", 42])
    def test_coerce_rejects(self, value):
        with pytest.raises(ValidationError):
            CalendarDate.coerce(value)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            CalendarDate.coerce("30/02/2024")

    def test_str(self):
        assert str(CalendarDate.of(2024, 2, 29)) == "29/02/2024"


class TestMoney:
    """Тесты денежных сумм."""

    def test_rounds_to_cents(self):
        assert Money.of("10.005").amount == Decimal("10.01")

    def test_arithmetic(self):
        # Подготовка
        price = Money.of(120)

        # Действие
        total = price * 3
        discount = total.percent(Decimal("0.10"))

        # Проверка
        assert total == Money.of(360)
        assert discount == Money.of(36)
        assert total - discount == Money.of("324.00")
        assert 3 * price == total

    def test_negative_result_rejected(self):
        with pytest.raises(ValueError):
            Money.of(5) - Money.of(10)

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            Money.of(-1)

    def test_currency_mismatch(self):
        with pytest.raises(ValueError):
            Money.of(1) + Money.of(1, currency="EUR")

    def test_comparison_and_str(self):
        assert Money.of(10) < Money.of(11)
        assert Money.zero().is_zero()
        assert str(Money.of("412.5")) == "$412.50"


class TestBookingIdGenerator:
    def test_format(self):
        rng = random.Random(1)
        booking_id = generate_booking_id(rng)
        assert len(booking_id) == 6
        assert set(booking_id) <= set(BOOKING_ID_ALPHABET)

    def test_deterministic_for_seed(self):
        first = [generate_booking_id(random.Random(7)) for _ in range(3)]
        second = [generate_booking_id(random.Random(7)) for _ in range(3)]
        assert first == second


class TestEventsAndActivityLog:
    """Тесты шины событий и журнала действий."""

    def test_event_type_and_summary(self):
        event = SampleHappened(room_no=7)
        assert event.event_type == "SampleHappened"
        assert event.summary() == "SampleHappened(room_no=7)"

    def test_bus_delivers_to_base_type_subscribers(self):
        # Подготовка
        bus = InMemoryEventBus()
        log = ActivityLog()
        bus.subscribe(DomainEvent, log)

        # Действие
        bus.publish(SampleHappened(room_no=1))

        # Проверка
        assert len(log) == 1
        assert log.records[0].event_type == "SampleHappened"
        assert log.records[0].log_id == 1

    def test_handler_errors_do_not_propagate(self):
        bus = InMemoryEventBus()
        received = []

        def failing(event):
            raise RuntimeError("boom")

        bus.subscribe(SampleHappened, failing)
        bus.subscribe(SampleHappened, received.append)

        bus.publish(SampleHappened(room_no=2))

        assert len(received) == 1

    def test_activity_log_capacity(self):
        log = ActivityLog(capacity=2)
        for room_no in range(5):
            log(SampleHappened(room_no=room_no))
        assert len(log) == 2
