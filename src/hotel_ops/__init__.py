"""
Движок бронирования и распределения ресурсов отеля.

Распределяет номера, парковочные места и объекты инфраструктуры
по бронированиям, ведет жизненный цикл бронирований, считает скидки
и баллы лояльности и формирует счета.
"""

from .bootstrap import bootstrap_app, build_command_table
from .commands import CommandTable, UnknownCommand
from .config import Settings, get_settings
from .engine import DashboardDTO, HotelEngine
from .unit_of_work import HotelUnitOfWork

__all__ = [
    "bootstrap_app",
    "build_command_table",
    "CommandTable",
    "UnknownCommand",
    "Settings",
    "get_settings",
    "DashboardDTO",
    "HotelEngine",
    "HotelUnitOfWork",
]
