from typing import Callable

from loguru import logger

Subscriber = Callable[[dict], None]


class EventChannel:
    """Synchronous outbound event stream.

    ``publish`` fans each event out to every subscriber in subscription
    order before returning. A subscriber that raises is logged and skipped;
    it never interrupts the publisher or the remaining subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register ``fn``; the returned callable unsubscribes it."""
        self._subscribers.append(fn)

        def _unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return _unsubscribe

    def publish(self, event: dict) -> None:
        for fn in list(self._subscribers):
            try:
                fn(event)
            except Exception as e:
                logger.warning(f"Timer event subscriber failed on {event.get('event')!r}: {e}")

    def clear(self) -> None:
        self._subscribers.clear()

    def __len__(self) -> int:
        return len(self._subscribers)
