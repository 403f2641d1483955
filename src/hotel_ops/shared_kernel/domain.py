"""
Основные доменные типы и утилиты общего ядра.
"""

import random
import re
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Tuple, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Общие типы идентификаторов
EntityId = str

BOOKING_ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
CENTS = Decimal("0.01")


def generate_booking_id(rng: random.Random, length: int = 6) -> str:
    """Генерирует случайный идентификатор бронирования из цифр и латиницы."""
    return "".join(rng.choice(BOOKING_ID_ALPHABET) for _ in range(length))


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок."""

    pass


class ValidationError(DomainException, ValueError):
    """Некорректные входные данные: дата, диапазон номера, период."""

    pass


class NotFoundError(DomainException, LookupError):
    """Сущность не найдена."""

    pass


class CapacityError(DomainException):
    """Коллекция достигла настроенной вместимости."""

    pass


class StateConflictError(DomainException):
    """Операция противоречит текущему состоянию сущности."""

    pass


class Money(BaseModel):
    """Денежная сумма в единственной валюте отеля."""

    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(default=Decimal("0"), ge=0, description="Сумма денег")
    currency: str = Field(
        default="USD", max_length=3, description="Код валюты (ISO 4217)"
    )

    @field_validator("amount")
    @classmethod
    def round_to_cents(cls, v: Decimal) -> Decimal:
        return v.quantize(CENTS, rounding=ROUND_HALF_UP)

    @classmethod
    def of(cls, value: Union[int, float, str, Decimal], currency: str = "USD") -> "Money":
        """Создает сумму из числа или строки."""
        return cls(amount=Decimal(str(value)), currency=currency)

    @classmethod
    def zero(cls, currency: str = "USD") -> "Money":
        return cls(amount=Decimal("0"), currency=currency)

    def _check_currency(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError("Операция возможна только с объектами Money")
        if self.currency != other.currency:
            raise ValueError("Нельзя смешивать разные валюты")

    def __add__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check_currency(other)
        if self.amount < other.amount:
            raise ValueError("Результат не может быть отрицательным")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __mul__(self, multiplier: Union[int, float, Decimal]) -> "Money":
        if isinstance(multiplier, bool) or not isinstance(
            multiplier, (int, float, Decimal)
        ):
            raise TypeError("Множитель должен быть числом")
        if multiplier < 0:
            raise ValueError("Множитель не может быть отрицательным")
        return Money(
            amount=self.amount * Decimal(str(multiplier)), currency=self.currency
        )

    __rmul__ = __mul__

    def __lt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount >= other.amount

    def percent(self, rate: Union[float, Decimal]) -> "Money":
        """Доля суммы, например percent(0.1) дает десять процентов."""
        return self * rate

    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"${self.amount}"


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(month: int, year: int) -> int:
    if month == 2:
        return 29 if is_leap_year(year) else 28
    if month in (4, 6, 9, 11):
        return 30
    return 31


def is_valid_date(day: int, month: int, year: int) -> bool:
    """Проверяет дату по григорианскому календарю."""
    if year < 1 or year > 9999:
        return False
    if month < 1 or month > 12:
        return False
    return 1 <= day <= days_in_month(month, year)


_DATE_SEPARATORS = re.compile(r"[\s/.\-]+")


class CalendarDate(BaseModel):
    """Календарная дата в виде день/месяц/год, проверяемая при создании."""

    model_config = ConfigDict(frozen=True)

    day: int
    month: int
    year: int

    @model_validator(mode="after")
    def check_calendar(self) -> "CalendarDate":
        if not is_valid_date(self.day, self.month, self.year):
            raise ValueError(
                f"Некорректная дата: {self.day:02d}/{self.month:02d}/{self.year}"
            )
        return self

    @classmethod
    def of(cls, year: int, month: int, day: int) -> "CalendarDate":
        return cls(day=day, month=month, year=year)

    @classmethod
    def from_date(cls, value: date) -> "CalendarDate":
        return cls(day=value.day, month=value.month, year=value.year)

    @classmethod
    def coerce(cls, value: Any) -> "CalendarDate":
        """
        Приводит значение к CalendarDate.

        Принимает CalendarDate, datetime.date, кортеж (день, месяц, год),
        строку ISO "гггг-мм-дд" или строку "дд/мм/гггг" / "дд мм гггг".
        """
        if isinstance(value, CalendarDate):
            return value
        if isinstance(value, datetime):
            return cls.from_date(value.date())
        if isinstance(value, date):
            return cls.from_date(value)
        if isinstance(value, str):
            try:
                return cls.from_date(date.fromisoformat(value.strip()))
            except ValueError:
                pass
        try:
            if isinstance(value, str):
                parts: Tuple[int, ...] = tuple(
                    int(part) for part in _DATE_SEPARATORS.split(value.strip()) if part
                )
            elif isinstance(value, (tuple, list)):
                parts = tuple(int(part) for part in value)
            elif isinstance(value, dict):
                return cls(**value)
            else:
                raise ValidationError(f"Неподдерживаемый формат даты: {value!r}")
            if len(parts) != 3:
                raise ValidationError(f"Ожидалось три части даты: {value!r}")
            return cls(day=parts[0], month=parts[1], year=parts[2])
        except ValidationError:
            raise
        except ValueError as e:
            raise ValidationError(f"Некорректная дата {value!r}: {e}") from e

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def __str__(self) -> str:
        return f"{self.day:02d}/{self.month:02d}/{self.year}"


def next_day(value: date) -> date:
    return value + timedelta(days=1)


class DomainEvent(BaseModel):
    """Базовый класс для всех доменных событий."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    event_id: UUID = Field(default_factory=uuid4)
    occurred_on: datetime = Field(default_factory=datetime.now)
    event_type: str = ""

    @model_validator(mode="after")
    def fill_event_type(self) -> "DomainEvent":
        if not self.event_type:
            self.event_type = type(self).__name__
        return self

    def summary(self) -> str:
        """Короткое описание события для журнала действий."""
        payload = self.model_dump(exclude={"event_id", "occurred_on", "event_type"})
        details = ", ".join(f"{key}={value}" for key, value in payload.items())
        return f"{self.event_type}({details})"

