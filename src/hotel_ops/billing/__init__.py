"""
Модуль контекста биллинга (Billing Context).

Отвечает за финансовую сторону пребывания:
- Формирование счетов с налогом
- Оплату счетов и учет выручки
- Заказы обслуживания в номер
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
