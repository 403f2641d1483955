"""
Модуль контекста бронирования (Booking Context).

Отвечает за гостей и бронирования, включая:
- Регистрацию гостей
- Бронирование номеров и объектов инфраструктуры
- Упорядоченный по дате заезда индекс бронирований
- Продвижение статусов бронирований по текущей дате
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
