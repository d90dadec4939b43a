"""Handler registry — one handler per message type, with validation guards."""

from __future__ import annotations

import inspect
import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .exceptions import ErrorKind, EventError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator

    from .message import Message

logger = logging.getLogger("lib_events.registry")


class MessageHandler(ABC):
    """Base class for queue message handlers.

    ``validate`` is a shape guard run before ``handle``: it answers "is this
    the message I expect?", not "is this business operation allowed?".

    Usage::

        class OrderCreatedHandler(MessageHandler):
            message_type = EventType.ORDER_CREATED.value

            def validate(self, message: Message) -> bool:
                return isinstance(message.body, dict) and "order_id" in message.body

            async def handle(self, message: Message) -> None:
                ...
    """

    message_type: str = ""

    def validate(self, message: Message) -> bool:  # noqa: ARG002
        """Return True if *message* has the shape ``handle`` expects."""
        return True

    @abstractmethod
    async def handle(self, message: Message) -> None:
        """Process the message. Raising leaves it on the queue for redelivery."""
        ...


class FunctionHandler(MessageHandler):
    """Adapts a plain (sync or async) callable into a :class:`MessageHandler`."""

    def __init__(
        self,
        message_type: str,
        handle: Callable[[Message], Awaitable[None] | None],
        validate: Callable[[Message], bool] | None = None,
    ) -> None:
        self.message_type = message_type
        self._handle = handle
        self._validate = validate

    def validate(self, message: Message) -> bool:
        if self._validate is None:
            return True
        return bool(self._validate(message))

    async def handle(self, message: Message) -> None:
        result = self._handle(message)
        if inspect.isawaitable(result):
            await result


class HandlerRegistry:
    """Type-keyed table of message handlers.

    Built once at startup and read by the poll engine for every message.
    Registering a second handler for a type is a configuration error.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, MessageHandler] = {}
        self._lock = threading.Lock()

    def register(self, message_type: str, handler: MessageHandler) -> None:
        """Register *handler* for *message_type*.

        Raises:
            EventError: kind ``DUPLICATE_HANDLER`` if the type already has one.
        """
        key = _key(message_type)
        with self._lock:
            existing = self._handlers.get(key)
            if existing is not None:
                raise EventError(
                    ErrorKind.DUPLICATE_HANDLER,
                    f"Message handler for type {key} already exists: "
                    f"{type(existing).__name__} already registered, "
                    f"cannot register {type(handler).__name__}",
                )
            self._handlers[key] = handler
        logger.debug("Registered handler %s -> %s", key, type(handler).__name__)

    def handler(
        self,
        message_type: str,
        *,
        validate: Callable[[Message], bool] | None = None,
    ) -> Callable[[Callable[[Message], Any]], Callable[[Message], Any]]:
        """Decorator form of :meth:`register` for plain functions."""

        def decorator(fn: Callable[[Message], Any]) -> Callable[[Message], Any]:
            self.register(message_type, FunctionHandler(message_type, fn, validate))
            return fn

        return decorator

    def lookup(self, message_type: str) -> MessageHandler | None:
        """Return the handler for *message_type*, or None."""
        return self._handlers.get(_key(message_type))

    def types(self) -> list[str]:
        """Return all registered message types."""
        return list(self._handlers)

    def __contains__(self, message_type: object) -> bool:
        return isinstance(message_type, str) and _key(message_type) in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handlers))


def _key(message_type: str) -> str:
    # EventType members are str subclasses; normalise to the plain value.
    return str(getattr(message_type, "value", message_type))
