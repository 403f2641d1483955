"""
Инфраструктура общего ядра: логгер, шина событий и журнал действий.
"""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel

from . import interfaces as ports
from .domain import DomainEvent


class StandardLogger(ports.ILogger):
    """Логгер поверх модуля logging; контекст дописывается к сообщению как JSON."""

    def __init__(self, name: str = "hotel_ops"):
        self._logger = logging.getLogger(name)

    @staticmethod
    def _format(message: str, context: Dict[str, Any]) -> str:
        if not context:
            return message
        return f"{message} | {json.dumps(context, default=str, ensure_ascii=False)}"

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._format(message, kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(self._format(message, kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._format(message, kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(self._format(message, kwargs))


class InMemoryEventBus(ports.IEventBus):
    """Реализация шины событий в памяти."""

    def __init__(self, logger: Optional[ports.ILogger] = None):
        self._subscribers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._logger = logger or StandardLogger()

    def publish(self, event: DomainEvent) -> None:
        """Публикует событие всем подписчикам его типа и базовых типов."""
        handlers = [
            handler
            for event_type, subscribed in self._subscribers.items()
            if isinstance(event, event_type)
            for handler in subscribed
        ]
        if not handlers:
            self._logger.debug(f"No subscribers for event type {event.event_type}")
            return

        self._logger.debug(f"Publishing event: {event.event_type}")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self._logger.error(
                    f"Error in event handler for {event.event_type}",
                    error=str(e),
                    event=event.model_dump(),
                )

    def subscribe(self, event_type: Type[DomainEvent], handler: Callable) -> None:
        """Подписывает обработчик на события указанного типа."""
        self._subscribers.setdefault(event_type, []).append(handler)
        self._logger.debug(f"Subscribed handler to {event_type.__name__} events")


class ActivityRecord(BaseModel):
    """Запись журнала действий."""

    log_id: int
    action: str
    event_type: str
    recorded_at: datetime


class ActivityLog:
    """Журнал действий персонала: по одной записи на каждое доменное событие."""

    def __init__(self, capacity: Optional[int] = None):
        self._records: List[ActivityRecord] = []
        self._capacity = capacity

    def __call__(self, event: DomainEvent) -> None:
        # При достижении вместимости новые записи отбрасываются
        if self._capacity is not None and len(self._records) >= self._capacity:
            return
        self._records.append(
            ActivityRecord(
                log_id=len(self._records) + 1,
                action=event.summary(),
                event_type=event.event_type,
                recorded_at=event.occurred_on,
            )
        )

    @property
    def records(self) -> List[ActivityRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
