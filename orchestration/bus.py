"""Event bus for posting pipeline events."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from ledger_sdk.logging import get_logger

from .events import Event

EventHandler = Callable[[Event], Awaitable[None]]


class EventBusProtocol(Protocol):
    """What the pipeline needs from a bus: publish, and subscribe by event name."""

    async def publish(self, event: Event) -> None: ...

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Register an async handler for events named `event_name`
        (e.g. "posting.step.failed")."""
        ...


class InMemoryEventBus(EventBusProtocol):
    """
    Process-local bus. Handlers run sequentially in subscription order.

    Handler errors are logged and never reach the publisher, so a broken
    subscriber cannot fail a posting.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._logger = get_logger("orchestration.event_bus")

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_name, []).append(handler)

    async def publish(self, event: Event) -> None:
        handlers = self._handlers.get(event.name, [])
        if not handlers:
            return

        self._logger.debug(
            f"[PIPELINE] {event.name} for {event.metadata.order_code} "
            f"-> {len(handlers)} handler(s)"
        )

        for handler in handlers:
            try:
                await handler(event)
            except Exception as exc:
                self._logger.error(
                    f"[PIPELINE] Handler {handler!r} failed on {event.name}: {exc}",
                    exc_info=True,
                )
