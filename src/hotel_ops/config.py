"""
Настройки движка.
Читаются из переменных окружения с префиксом HOTEL_ и из файла .env.
"""

import logging
from decimal import Decimal
from functools import lru_cache
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Настройки движка бронирования."""

    model_config = SettingsConfigDict(
        env_prefix="HOTEL_", env_file=".env", case_sensitive=True, extra="ignore"
    )

    APP_NAME: str = "Hotel Operations"

    # Ресурсы отеля
    ROOM_COUNT: int = Field(50, gt=0)
    PARKING_SLOTS: int = Field(30, gt=0)

    # Вместимость коллекций (None: без ограничения)
    MAX_GUESTS: Optional[int] = 100
    MAX_BOOKINGS: Optional[int] = 200
    MAX_BILLS: Optional[int] = 200
    MAX_SERVICE_ORDERS: Optional[int] = 10
    MAX_MAINTENANCE_REQUESTS: Optional[int] = 20
    MAX_ACTIVITY_RECORDS: Optional[int] = 1000

    # Допустимый диапазон лет для дат бронирования
    MIN_YEAR: int = 2023
    MAX_YEAR: int = 2100

    # Программа лояльности
    DISCOUNT_THRESHOLD: int = 1000
    LOYALTY_POINTS_RATE: int = 10  # баллов за каждые LOYALTY_POINTS_UNIT долларов
    LOYALTY_POINTS_UNIT: Decimal = Decimal("100")
    ROOM_DISCOUNT_RATE: Decimal = Decimal("0.10")
    FACILITY_DISCOUNT_RATE: Decimal = Decimal("0.50")
    SERVICE_COMPLETION_POINTS: int = 1
    FACILITY_POINTS_OVERRIDES: Dict[int, int] = Field(default_factory=lambda: {3: 0})

    # Счета
    TAX_RATE: Decimal = Decimal("0.10")
    CURRENCY: str = "USD"

    BOOKING_ID_LENGTH: int = Field(6, ge=4)
    RANDOM_SEED: Optional[int] = None
    RELEASE_ROOM_ON_CHECKOUT: bool = False

    LOG_LEVEL: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Возвращает настройки, прочитанные один раз за время жизни процесса."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
