"""
Модуль контекста лояльности (Loyalty Context).

Отвечает за расчет стоимости проживания и бронирования объектов,
скидки по баллам и движение баллов на балансе гостя.
"""

from . import domain
from .domain import InsufficientPoints, LoyaltyLedger, PricingPolicy, Quote

__all__ = [
    "domain",
    "InsufficientPoints",
    "LoyaltyLedger",
    "PricingPolicy",
    "Quote",
]
