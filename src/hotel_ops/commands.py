"""
Таблица команд.

Сопоставляет имя операции обработчику движка. Внешний слой (меню, API)
передает имя команды и параметры, таблица проверяет их и вызывает движок.
"""

import inspect
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from .engine import HotelEngine
from .shared_kernel import ILogger, NotFoundError, StandardLogger, ValidationError


class UnknownCommand(NotFoundError):
    def __init__(self, name: str, available: List[str]):
        super().__init__(f"Неизвестная команда {name!r}; доступны: {', '.join(available)}")
        self.name = name


class CommandDefinition(BaseModel):
    """Описание команды: имя, назначение и обработчик."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    description: str
    handler: Callable[..., Any]


# Имя команды -> (метод движка, описание)
DEFAULT_COMMANDS = {
    "register_guest": ("register_guest", "Регистрация гостя"),
    "get_guest": ("get_guest", "Карточка гостя"),
    "allocate_room": ("allocate_room", "Занять номер"),
    "release_room": ("release_room", "Освободить номер"),
    "book_room": ("book_room", "Бронирование номера"),
    "book_facility": ("book_facility", "Бронирование объекта инфраструктуры"),
    "allocate_facility": ("allocate_facility", "Занять объект инфраструктуры"),
    "release_facility": ("release_facility", "Освободить объект инфраструктуры"),
    "nearby_facilities": ("nearby_facilities", "Соседние объекты"),
    "allocate_parking": ("allocate_parking", "Парковочное место для гостя"),
    "release_parking": ("release_parking", "Освободить парковочное место"),
    "drain_waitlist": ("drain_waitlist", "Разобрать очередь ожидания парковки"),
    "waitlist": ("waitlist", "Очередь ожидания парковки"),
    "report_maintenance": ("report_maintenance", "Заявка на ремонт"),
    "update_maintenance_status": ("update_maintenance_status", "Статус заявки на ремонт"),
    "order_service": ("order_service", "Заказ обслуживания в номер"),
    "update_service_status": ("update_service_status", "Статус заказа обслуживания"),
    "advance_statuses": ("advance_statuses", "Продвинуть статусы бронирований"),
    "generate_bill": ("generate_bill", "Сформировать счет"),
    "pay_bill": ("pay_bill", "Оплатить счет"),
    "get_bill": ("get_bill", "Счет по номеру"),
    "find_booking": ("find_booking", "Найти бронирование"),
    "list_bookings": ("list_bookings_for_guest", "Бронирования гостя"),
    "get_room": ("get_room", "Карточка номера"),
    "list_available_rooms": ("list_available_rooms", "Свободные номера"),
    "list_parking": ("list_parking", "Парковочные места"),
    "list_maintenance": ("list_maintenance", "Заявки на ремонт"),
    "list_orders": ("list_orders", "Заказы обслуживания"),
    "list_bills": ("list_bills", "Выставленные счета"),
    "dashboard": ("dashboard", "Сводка по отелю"),
}


class CommandTable:
    """Реестр команд движка с проверкой параметров перед вызовом."""

    def __init__(self, engine: HotelEngine, logger: Optional[ILogger] = None):
        self._logger = logger or StandardLogger(__name__)
        self._commands: Dict[str, CommandDefinition] = {}
        for name, (method, description) in DEFAULT_COMMANDS.items():
            self.register(name, getattr(engine, method), description)

    def register(
        self, name: str, handler: Callable[..., Any], description: str = ""
    ) -> None:
        """Добавляет или заменяет команду."""
        self._commands[name] = CommandDefinition(
            name=name, description=description, handler=handler
        )

    def names(self) -> List[str]:
        return sorted(self._commands)

    def describe(self) -> Dict[str, str]:
        return {name: self._commands[name].description for name in self.names()}

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def dispatch(self, name: str, /, **params: Any) -> Any:
        """
        Выполняет команду.

        Raises:
            UnknownCommand: если команда не зарегистрирована
            ValidationError: если параметры не подходят обработчику
        """
        command = self._commands.get(name)
        if command is None:
            raise UnknownCommand(name, self.names())

        try:
            inspect.signature(command.handler).bind(**params)
        except TypeError as e:
            self._logger.warning("Command parameters rejected", command=name, error=str(e))
            raise ValidationError(f"Неверные параметры команды {name}: {e}") from e

        self._logger.debug("Dispatching command", command=name, params=params)
        return command.handler(**params)
