# lazythumbs/services/events/bus.py
from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, DefaultDict, List, Type, TypeVar

E = TypeVar("E")
Handler = Callable[[Any], Any]


class EventBus:
    """
    Synchronous, typed publish/subscribe. Handlers run in subscription order for the
    event's exact type; a handler exception propagates to the publisher.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[type, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[E], handler: Callable[[E], Any]) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: Type[E], handler: Callable[[E], Any]) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Any) -> List[Any]:
        return [handler(event) for handler in list(self._handlers.get(type(event), []))]
