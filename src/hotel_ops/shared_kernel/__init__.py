"""
Общее ядро (Shared Kernel) движка бронирования отеля.

Содержит общие типы данных и утилиты, используемые в различных ограниченных контекстах.
"""

from .domain import (
    BOOKING_ID_ALPHABET,
    CalendarDate,
    CapacityError,
    DomainEvent,
    # Исключения
    DomainException,
    # Базовые типы
    EntityId,
    # Основные классы
    Money,
    NotFoundError,
    StateConflictError,
    ValidationError,
    days_in_month,
    generate_booking_id,
    is_leap_year,
    is_valid_date,
    next_day,
)
from .infrastructure import ActivityLog, ActivityRecord, InMemoryEventBus, StandardLogger
from .interfaces import IEventBus, ILogger

__all__ = [
    # Базовые типы
    "EntityId",
    "BOOKING_ID_ALPHABET",
    "generate_booking_id",
    # Основные классы
    "Money",
    "CalendarDate",
    "DomainEvent",
    # Исключения
    "DomainException",
    "ValidationError",
    "NotFoundError",
    "CapacityError",
    "StateConflictError",
    # Календарь
    "is_leap_year",
    "days_in_month",
    "is_valid_date",
    "next_day",
    # Инфраструктура
    "ILogger",
    "IEventBus",
    "StandardLogger",
    "InMemoryEventBus",
    "ActivityLog",
    "ActivityRecord",
]
