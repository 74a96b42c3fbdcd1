"""
Outbound notifications of a GameSession.

Two separate channels:
* listeners: called (without payload) every time the session state got replaced. They re-read the state themselves.
* notifier: receives human-readable descriptions of what happened (captures, check, ...), fire-and-forget.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol
from uuid import UUID, uuid4

_LOGGER = logging.getLogger(__name__)

Listener = Callable[[], None]


@dataclass(frozen=True)
class ListenerHandle:
    """Returned on subscribing. Hand it back to unsubscribe."""

    id: UUID = field(default_factory=uuid4)


class Notifier(Protocol):
    """Presentation layer hook (toasts, status bar, ...)"""

    def notify(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier: event descriptions end up in the log"""

    def __init__(self, logger: logging.Logger = _LOGGER) -> None:
        self.logger = logger

    def notify(self, message: str) -> None:
        self.logger.info(message)
