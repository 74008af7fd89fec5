from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, Iterable, List, Type


Handler = Callable[[object], None]


@dataclass(frozen=True)
class _Subscription:
    priority: int
    order: int
    handler: Handler


class EventBus:
    """Synchronous publisher for ledger events.

    Services publish only after their unit of work has committed, so a failing
    handler is logged and isolated instead of undoing the write.
    """

    def __init__(self) -> None:
        self._subscriptions: DefaultDict[Type[object], List[_Subscription]] = defaultdict(list)
        self._next_order = 0
        self._last_publish_errors: List[Exception] = []
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: Handler, *, priority: int = 100) -> Callable[[], None]:
        subscription = _Subscription(int(priority), self._next_order, handler)
        self._next_order += 1
        rows = self._subscriptions[event_type]
        rows.append(subscription)
        rows.sort(key=lambda row: (row.priority, row.order))

        def _unsubscribe() -> None:
            if subscription in self._subscriptions[event_type]:
                self._subscriptions[event_type].remove(subscription)

        return _unsubscribe

    def publish(self, event: object) -> List[Exception]:
        errors: List[Exception] = []
        event_type = type(event)
        for subscription in list(self._subscriptions[event_type]):
            try:
                subscription.handler(event)
            except Exception as exc:
                errors.append(exc)
                handler = subscription.handler
                self._logger.exception(
                    "Ledger event handler failed and was isolated",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": getattr(handler, "__qualname__", getattr(handler, "__name__", repr(handler))),
                        "priority": subscription.priority,
                    },
                )
        self._last_publish_errors = errors
        return list(errors)

    def publish_all(self, events: Iterable[object]) -> None:
        for event in events:
            self.publish(event)

    def last_publish_errors(self) -> List[Exception]:
        return list(self._last_publish_errors)
