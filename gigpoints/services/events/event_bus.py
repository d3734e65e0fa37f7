"""
In-process publish/subscribe bus.

One EventBus is created per application (see gigpoints.main) and passed
to whatever needs it; tests build their own. Delivery is synchronous, in
subscription order, to the handlers registered at publish time. A handler
that raises is logged and skipped so the remaining handlers still run.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from gigpoints.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

Handler = Callable[[Any], None]


@dataclass(slots=True)
class Subscription:
    """Handle returned by EventBus.subscribe."""

    bus: "EventBus"
    channel: str
    handler: Handler

    def unsubscribe(self) -> bool:
        return self.bus.unsubscribe(self.channel, self.handler)


class EventBus:
    def __init__(self, name: str = "default"):
        self.name = name
        self._handlers: dict[str, list[Handler]] = {}

    def subscribe(self, channel: str, handler: Handler) -> Subscription:
        self._handlers.setdefault(channel, []).append(handler)
        logger.debug(
            "Event handler subscribed",
            bus=self.name,
            channel=channel,
            handler_count=len(self._handlers[channel]),
        )
        return Subscription(bus=self, channel=channel, handler=handler)

    def unsubscribe(self, channel: str, handler: Handler) -> bool:
        """Remove the first registration of handler on channel."""
        handlers = self._handlers.get(channel)
        if not handlers:
            return False
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        if not handlers:
            del self._handlers[channel]
        return True

    def publish(self, channel: str, payload: Any) -> int:
        """
        Deliver payload to every handler on channel.

        Returns:
            Number of handlers that completed without raising
        """
        handlers = list(self._handlers.get(channel, ()))
        delivered = 0

        for handler in handlers:
            try:
                handler(payload)
                delivered += 1
            except Exception:
                logger.exception(
                    "Error in event listener",
                    bus=self.name,
                    channel=channel,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                )

        return delivered

    def handler_count(self, channel: str) -> int:
        return len(self._handlers.get(channel, ()))

    def clear(self) -> None:
        self._handlers.clear()
