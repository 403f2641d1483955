"""
Конфигурация тестов для pytest.
Каждый тест получает свежий движок с фиксированными часами и зерном генератора.
"""

from datetime import datetime

import pytest
from hotel_ops import Settings, bootstrap_app
from hotel_ops.shared_kernel import Money

FIXED_NOW = datetime(2023, 5, 20, 9, 30)


def make_settings(**overrides) -> Settings:
    values = {"RANDOM_SEED": 42}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def engine(settings, clock):
    """Движок со стандартными настройками."""
    return bootstrap_app(settings=settings, clock=clock)


@pytest.fixture
def uow(engine):
    return engine.uow


@pytest.fixture
def guest(engine):
    """Зарегистрированный гость без баллов."""
    return engine.register_guest("G001", "Анна Петрова", contact="+79001234567")


@pytest.fixture
def room_120(engine):
    """Номер 1 с ценой 120 долларов за ночь."""
    room = engine.uow.rooms.get(1)
    room.nightly_price = Money.of(120)
    return room


@pytest.fixture
def make_engine(clock):
    """Фабрика движков с измененными настройками."""

    def factory(**overrides):
        return bootstrap_app(settings=make_settings(**overrides), clock=clock)

    return factory
