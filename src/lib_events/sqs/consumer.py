"""SQSConsumer — poll engine with per-message acknowledgement.

Messages are deleted only after they are handled successfully. Anything that
goes wrong while decoding, routing, validating or handling one message is
logged and leaves that message on the queue, where the visibility timeout
makes it visible again for redelivery. Siblings in the same batch are not
affected.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..envelope import decode_envelope, map_relayed_attributes
from ..exceptions import ErrorKind, EventError
from ..registry import HandlerRegistry
from ..retry import BackoffPolicy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from ..message import Message
    from ..ports import IConnection
    from ..registry import MessageHandler

    ExplicitAckHandler = Callable[[Message, "Acknowledger"], Awaitable[Any] | Any]

logger = logging.getLogger("lib_events.consumer")

DEFAULT_MAX_NUMBER_OF_MESSAGES = 10
DEFAULT_MAX_ITERATIONS = 10


class MessageOutcome(str, Enum):
    """What happened to one received message."""

    ACKED = "acked"
    HANDLED = "handled"  # explicit-ack handler returned without calling ack()
    FAILED = "failed"
    INVALID = "invalid"
    NO_HANDLER = "no_handler"
    SKIPPED = "skipped"  # later message of a FIFO group after a failure

    @property
    def succeeded(self) -> bool:
        return self in (MessageOutcome.ACKED, MessageOutcome.HANDLED)


@dataclass
class BatchResult:
    """Outcome of one receive call and the processing of its batch."""

    received: int = 0
    outcomes: list[MessageOutcome] = field(default_factory=list)
    receive_failed: bool = False

    def count(self, outcome: MessageOutcome) -> int:
        return self.outcomes.count(outcome)


@dataclass
class PollSummary:
    """Aggregate of a bounded poll."""

    iterations: int = 0
    received: int = 0
    receive_failures: int = 0
    outcomes: Counter[MessageOutcome] = field(default_factory=Counter)

    def add(self, batch: BatchResult) -> None:
        self.iterations += 1
        self.received += batch.received
        self.receive_failures += int(batch.receive_failed)
        self.outcomes.update(batch.outcomes)

    @property
    def acked(self) -> int:
        return self.outcomes[MessageOutcome.ACKED]

    @property
    def failed(self) -> int:
        return sum(n for outcome, n in self.outcomes.items() if not outcome.succeeded)


class Acknowledger:
    """Deletes one received message from the queue when awaited.

    Handed to explicit-ack handlers, which may call it before finishing slow
    work: that lowers the chance of a duplicate redelivery but gives up
    redelivery if the handler then fails. Calling it more than once is a no-op.
    """

    def __init__(
        self,
        connection: IConnection,
        queue_url: str,
        raw: Mapping[str, Any],
    ) -> None:
        self._connection = connection
        self._queue_url = queue_url
        self._raw = raw
        self._acked = False

    @property
    def acked(self) -> bool:
        return self._acked

    async def __call__(self) -> None:
        if self._acked:
            return
        receipt = self._raw.get("ReceiptHandle")
        if not receipt:
            raise EventError(ErrorKind.INVALID_EVENT_MESSAGE, "invalid ReceiptHandle")
        client = await self._connection.get_client()
        await client.delete_message(QueueUrl=self._queue_url, ReceiptHandle=receipt)
        self._acked = True


class SQSConsumer:
    """Drains one SQS queue and routes each message to exactly one handler.

    Two modes:

    * registry mode (``handler`` omitted): the message type selects a
      :class:`~lib_events.registry.MessageHandler`; the message is deleted
      after ``handle`` returns.
    * explicit-ack mode (``poll(handler)``): ``handler(message, ack)`` is
      called for every message and decides itself when to ``await ack()``.

    Messages of one batch are processed concurrently. On FIFO queues the batch
    is split by ``MessageGroupId``; groups run concurrently and each group runs
    in receipt order, stopping at its first failure so that no later message
    of the group is deleted ahead of it.
    """

    def __init__(
        self,
        connection: IConnection,
        *,
        queue_url: str,
        registry: HandlerRegistry | None = None,
        wait_time_seconds: int = 1,
        visibility_timeout: int = 30,
        max_number_of_messages: int = DEFAULT_MAX_NUMBER_OF_MESSAGES,
        max_concurrency: int | None = None,
        poll_interval: float = 1.0,
        fifo: bool | None = None,
        backoff: BackoffPolicy | None = None,
    ) -> None:
        """Configure consumer.

        Args:
            connection: Connection manager for the ``sqs`` service.
            queue_url: Queue URL, or a queue name resolved on first use.
            registry: Handlers for registry mode; a new one is created if None.
            wait_time_seconds: Long-poll wait per receive.
            visibility_timeout: Visibility timeout for received messages.
            max_number_of_messages: Default batch size for receives (1-10).
            max_concurrency: Bound on concurrently handled messages per batch.
            poll_interval: Idle delay between iterations of the unbounded poll.
            fifo: Whether the queue is FIFO; inferred from a ``.fifo`` suffix
                when None.
            backoff: Delay policy after failed receives in the unbounded poll.
        """
        self._connection = connection
        self._queue = queue_url
        self._queue_url: str | None = queue_url if "://" in queue_url else None
        self._registry = registry if registry is not None else HandlerRegistry()
        self._wait_time_seconds = wait_time_seconds
        self._visibility_timeout = visibility_timeout
        self._max_number_of_messages = max_number_of_messages
        self._semaphore = (
            asyncio.Semaphore(max_concurrency) if max_concurrency else None
        )
        self._poll_interval = poll_interval
        self._fifo = queue_url.endswith(".fifo") if fifo is None else fifo
        self._backoff = backoff or BackoffPolicy()
        self._running = False

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def is_fifo(self) -> bool:
        return self._fifo

    @property
    def running(self) -> bool:
        return self._running

    def register_message_handler(self, handler: MessageHandler) -> None:
        """Register *handler* under its ``message_type``."""
        self._registry.register(handler.message_type, handler)

    async def queue_url(self) -> str:
        """Return the queue URL, resolving a queue name once."""
        if self._queue_url is None:
            self._queue_url = await self._connection.get_queue_url(self._queue)
        return self._queue_url

    # ── Polling ──────────────────────────────────────────────────

    async def poll(
        self,
        handler: ExplicitAckHandler | None = None,
        *,
        max_number_of_messages: int | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> PollSummary:
        """Receive and process batches until drained or out of iterations.

        Stops after ``max_iterations`` receive calls, or as soon as a receive
        returns no messages. A failed receive uses up an iteration without
        stopping the poll.
        """
        summary = PollSummary()
        for _ in range(max_iterations):
            batch = await self.poll_once(
                handler, max_number_of_messages=max_number_of_messages
            )
            summary.add(batch)
            if not batch.receive_failed and batch.received == 0:
                break
        logger.debug(
            "Poll finished after %d iteration(s): %d received, %d acked, %d failed",
            summary.iterations,
            summary.received,
            summary.acked,
            summary.failed,
        )
        return summary

    async def start_poll_for_messages(
        self, stop_event: asyncio.Event | None = None
    ) -> None:
        """Poll forever in registry mode.

        Returns only once ``stop_event`` is set or :meth:`stop` is called; the
        in-flight batch is finished first and no new receive is started.
        """
        self._running = True
        failures = 0
        logger.info("Starting poll loop for %s", self._queue)
        try:
            while self._should_continue(stop_event):
                batch = await self.poll_once()
                if batch.receive_failed:
                    failures += 1
                    await self._backoff.wait(failures)
                    continue
                failures = 0
                await self._idle(stop_event)
        finally:
            self._running = False
            logger.info("Poll loop for %s stopped", self._queue)

    async def stop(self) -> None:
        """Ask the unbounded poll to stop after the in-flight batch."""
        self._running = False

    async def poll_once(
        self,
        handler: ExplicitAckHandler | None = None,
        *,
        max_number_of_messages: int | None = None,
    ) -> BatchResult:
        """Run one receive call and process the batch it returns."""
        try:
            messages = await self._receive(
                max_number_of_messages or self._max_number_of_messages
            )
        except Exception:  # noqa: BLE001
            logger.exception(
                "Error polling messages from %s. Skipping and retrying.", self._queue
            )
            return BatchResult(receive_failed=True)
        if not messages:
            return BatchResult()
        outcomes = await self._process_batch(messages, handler)
        return BatchResult(received=len(messages), outcomes=outcomes)

    async def _receive(self, max_number_of_messages: int) -> list[dict[str, Any]]:
        queue_url = await self.queue_url()
        client = await self._connection.get_client()
        out = await client.receive_message(
            QueueUrl=queue_url,
            MaxNumberOfMessages=max_number_of_messages,
            WaitTimeSeconds=self._wait_time_seconds,
            VisibilityTimeout=self._visibility_timeout,
            MessageAttributeNames=["All"],
            AttributeNames=["All"],
        )
        return list(out.get("Messages") or [])

    def _should_continue(self, stop_event: asyncio.Event | None) -> bool:
        if stop_event is not None and stop_event.is_set():
            return False
        return self._running

    async def _idle(self, stop_event: asyncio.Event | None) -> None:
        if self._poll_interval <= 0:
            return
        if stop_event is None:
            await asyncio.sleep(self._poll_interval)
            return
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self._poll_interval)
        except asyncio.TimeoutError:
            pass

    # ── Batch processing ─────────────────────────────────────────

    async def _process_batch(
        self,
        messages: list[dict[str, Any]],
        handler: ExplicitAckHandler | None,
    ) -> list[MessageOutcome]:
        if not self._fifo:
            return list(
                await asyncio.gather(
                    *(self._process_bounded(raw, handler) for raw in messages)
                )
            )

        groups: dict[str, list[tuple[int, dict[str, Any]]]] = {}
        for index, raw in enumerate(messages):
            group_id = (raw.get("Attributes") or {}).get("MessageGroupId", "")
            groups.setdefault(group_id, []).append((index, raw))

        outcomes: list[MessageOutcome] = [MessageOutcome.SKIPPED] * len(messages)
        results = await asyncio.gather(
            *(self._process_group(group, handler) for group in groups.values())
        )
        for group_result in results:
            for index, outcome in group_result:
                outcomes[index] = outcome
        return outcomes

    async def _process_group(
        self,
        group: list[tuple[int, dict[str, Any]]],
        handler: ExplicitAckHandler | None,
    ) -> list[tuple[int, MessageOutcome]]:
        results: list[tuple[int, MessageOutcome]] = []
        halted = False
        for index, raw in group:
            if halted:
                logger.warning(
                    "Skipping message %s: an earlier message of its group failed",
                    raw.get("MessageId"),
                )
                results.append((index, MessageOutcome.SKIPPED))
                continue
            outcome = await self._process_bounded(raw, handler)
            results.append((index, outcome))
            halted = not outcome.succeeded
        return results

    async def _process_bounded(
        self,
        raw: dict[str, Any],
        handler: ExplicitAckHandler | None,
    ) -> MessageOutcome:
        if self._semaphore is None:
            return await self.process_message(raw, handler)
        async with self._semaphore:
            return await self.process_message(raw, handler)

    async def process_message(
        self,
        raw: Mapping[str, Any],
        handler: ExplicitAckHandler | None = None,
    ) -> MessageOutcome:
        """Decode, route and handle one raw SQS message. Never raises.

        A message already deleted through its :class:`Acknowledger` counts as
        ``ACKED`` even when the handler raises afterwards.
        """
        ack: Acknowledger | None = None
        try:
            ack = Acknowledger(self._connection, await self.queue_url(), raw)
            message = decode_envelope(raw)
            if handler is not None:
                result = handler(message, ack)
                if inspect.isawaitable(result):
                    await result
                return MessageOutcome.ACKED if ack.acked else MessageOutcome.HANDLED
            await self._dispatch(message)
            await ack()
            return MessageOutcome.ACKED
        except Exception as e:  # noqa: BLE001
            if ack is not None and ack.acked:
                logger.exception(
                    "Handler failed after acknowledging message %s",
                    raw.get("MessageId"),
                    extra={"raw_message": raw},
                )
                return MessageOutcome.ACKED
            if isinstance(e, EventError) and e.kind is ErrorKind.NO_HANDLER_FOUND:
                logger.warning(
                    "%s. Skipping delete.", e.detail, extra={"raw_message": raw}
                )
                return MessageOutcome.NO_HANDLER
            if isinstance(e, EventError) and e.kind is ErrorKind.INVALID_MESSAGE:
                logger.error(
                    "%s. Skipping delete.", e.detail, extra={"raw_message": raw}
                )
                return MessageOutcome.INVALID
            logger.exception(
                "Error processing message %s. Skipping delete.",
                raw.get("MessageId"),
                extra={"raw_message": raw},
            )
            return MessageOutcome.FAILED

    async def _dispatch(self, message: Message) -> None:
        registered = self._registry.lookup(message.type)
        if registered is None:
            raise EventError(
                ErrorKind.NO_HANDLER_FOUND,
                f"No handler found for message type {message.type!r}",
            )
        if not registered.validate(message):
            raise EventError(
                ErrorKind.INVALID_MESSAGE,
                f"Invalid message of type {message.type!r} "
                f"rejected by {type(registered).__name__}",
            )
        await registered.handle(message)

    # ── Helpers ──────────────────────────────────────────────────

    def get_attributes(self, body: str) -> Message:
        """Decode a bare message body (no native attributes)."""
        return decode_envelope({"Body": body})

    @staticmethod
    def map_attributes(data: Mapping[str, Any]) -> Message:
        """Decode an SNS notification body's ``{Type, Value}`` attributes."""
        return map_relayed_attributes(data)

    async def health_check(self) -> bool:
        """Return True if the queue answers GetQueueAttributes."""
        try:
            queue_url = await self.queue_url()
        except Exception:  # noqa: BLE001
            logger.warning("Could not resolve queue %s", self._queue, exc_info=True)
            return False
        return await self._connection.health_check(QueueUrl=queue_url)
