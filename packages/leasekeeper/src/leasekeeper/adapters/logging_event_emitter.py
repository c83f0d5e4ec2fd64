"""Event emitters backed by the standard logging module and callbacks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from leasekeeper.domain.events import ElectionEvent, ElectionEventType

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

_EVENT_LEVELS: dict[ElectionEventType, int] = {
    ElectionEventType.STARTED_LEADING: logging.INFO,
    ElectionEventType.STOPPED_LEADING: logging.INFO,
    ElectionEventType.NEW_LEADER_OBSERVED: logging.INFO,
    ElectionEventType.LEASE_RELEASED: logging.INFO,
    ElectionEventType.RENEWAL_FAILED: logging.WARNING,
}


class LoggingEventEmitter:
    """EventEmitterPort that writes each event as one log record.

    Leadership changes log at INFO, failed renewals at WARNING.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        """Initialize the emitter.

        Args:
            log: Logger to write to. Defaults to this module's logger.
        """
        self._logger = log or logger

    def emit(self, event: ElectionEvent) -> None:
        """Log the event."""
        level = _EVENT_LEVELS.get(event.event_type, logging.INFO)
        message = f"[{event.candidate_id}] {event.event_type.value}"
        if event.holder_identity:
            message += f" (holder: {event.holder_identity})"
        if event.reason:
            message += f": {event.reason}"
        self._logger.log(level, message)


class CallbackEventEmitter:
    """EventEmitterPort that fans events out to registered callbacks.

    A failing callback is logged and does not stop delivery to the others.

    Example:
        >>> emitter = CallbackEventEmitter()
        >>> emitter.subscribe(lambda event: print(event.event_type))
    """

    def __init__(
        self, callbacks: Iterable[Callable[[ElectionEvent], None]] = ()
    ) -> None:
        self._callbacks: list[Callable[[ElectionEvent], None]] = list(callbacks)

    def subscribe(self, callback: Callable[[ElectionEvent], None]) -> None:
        """Register a callback for every subsequent event."""
        self._callbacks.append(callback)

    def emit(self, event: ElectionEvent) -> None:
        """Deliver the event to every callback."""
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    f"Election event callback failed for {event.event_type.value}"
                )
