"""Build publishers and consumers from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .aws import AWSConnectionManager
from .sns.publisher import SNSPublisher
from .sqs.consumer import SQSConsumer

if TYPE_CHECKING:
    from aiobotocore.session import AioSession

    from .config import ConsumerConfig, PublisherConfig
    from .registry import HandlerRegistry


def _client_kwargs(endpoint_url: str | None) -> dict[str, Any]:
    return {"endpoint_url": endpoint_url} if endpoint_url else {}


def create_publisher(
    config: PublisherConfig,
    *,
    session: AioSession | None = None,
) -> SNSPublisher:
    """Return an :class:`SNSPublisher` with its own SNS connection."""
    connection = AWSConnectionManager(
        "sns",
        config.region,
        credentials=config.credentials,
        session=session,
        **_client_kwargs(config.endpoint_url),
    )
    return SNSPublisher(
        connection,
        topic=config.topic,
        api_host=config.api_host,
        fifo=config.fifo,
        ignore_events=config.ignore_events,
    )


def create_consumer(
    config: ConsumerConfig,
    *,
    registry: HandlerRegistry | None = None,
    session: AioSession | None = None,
) -> SQSConsumer:
    """Return an :class:`SQSConsumer` with its own SQS connection."""
    connection = AWSConnectionManager(
        "sqs",
        config.region,
        credentials=config.credentials,
        session=session,
        **_client_kwargs(config.endpoint_url),
    )
    return SQSConsumer(
        connection,
        queue_url=config.queue_url,
        registry=registry,
        wait_time_seconds=config.wait_time_seconds,
        visibility_timeout=config.visibility_timeout,
        max_number_of_messages=config.max_number_of_messages,
        max_concurrency=config.max_concurrency,
        poll_interval=config.poll_interval,
        fifo=config.fifo,
    )
