"""Protocols implemented by connection managers, publishers and queue clients."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping

    from .message import Message, QueueMessage
    from .registry import MessageHandler


@runtime_checkable
class IConnection(Protocol):
    """
    Port for obtaining a transport client.

    :class:`~lib_events.aws.AWSConnectionManager` is the production adapter;
    :mod:`lib_events.memory` provides one for tests.
    """

    async def get_client(self) -> Any: ...

    async def get_queue_url(self, queue_name: str) -> str: ...

    async def health_check(self, **probe: Any) -> bool: ...

    async def close(self) -> None: ...


@runtime_checkable
class IEventPublisher(Protocol):
    """
    Port for publishing platform events.
    """

    async def dispatch(self, message: Message | Mapping[str, Any]) -> Any:
        """
        Validate and publish *message*.

        Validation failures raise :class:`~lib_events.exceptions.EventError`
        before any I/O.
        """
        ...


@runtime_checkable
class IQueueClient(Protocol):
    """
    Port for a queue that the same service writes to and reads from.
    """

    async def health(self) -> bool: ...

    def register_message_handler(self, handler: MessageHandler) -> None: ...

    async def start_poll_for_messages(
        self, stop_event: asyncio.Event | None = None
    ) -> None: ...

    async def send_messages(
        self, *messages: QueueMessage | Mapping[str, Any]
    ) -> None: ...
