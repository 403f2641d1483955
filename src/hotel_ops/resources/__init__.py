"""
Модуль контекста ресурсов (Resources Context).

Отвечает за физические ресурсы отеля:
- Номера и их статусы
- Парковку и очередь ожидания
- Объекты инфраструктуры и граф их соседства
- Заявки на ремонт
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
