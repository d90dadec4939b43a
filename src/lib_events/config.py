"""Configuration models for publishers and consumers."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class AWSCredentials(BaseModel):
    """Static AWS credentials.

    When ``access_key_id``/``secret_access_key`` are unset the default botocore
    credential chain applies. ``session_token`` is only needed for temporary
    (assumed role) credentials.
    """

    model_config = ConfigDict(frozen=True)

    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None

    def client_kwargs(self) -> dict[str, Any]:
        """Return aiobotocore ``create_client`` credential kwargs."""
        if not (self.access_key_id and self.secret_access_key):
            return {}
        kwargs: dict[str, Any] = {
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
        }
        if self.session_token:
            kwargs["aws_session_token"] = self.session_token
        return kwargs

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> AWSCredentials:
        env = os.environ if env is None else env
        return cls(
            access_key_id=env.get("AWS_ACCESS_KEY_ID") or None,
            secret_access_key=env.get("AWS_SECRET_ACCESS_KEY") or None,
            session_token=env.get("AWS_SESSION_TOKEN") or None,
        )


class PublisherConfig(BaseModel):
    """Settings for :class:`~lib_events.sns.publisher.SNSPublisher`.

    ``ignore_events`` turns ``dispatch`` into a validated no-op, for
    environments that must not emit real events.
    """

    model_config = ConfigDict(frozen=True)

    credentials: AWSCredentials = Field(default_factory=AWSCredentials)
    region: str = "us-east-1"
    topic: str = Field(..., min_length=1, description="SNS topic ARN")
    api_host: str = ""
    fifo: bool | None = None
    ignore_events: bool = False
    endpoint_url: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> PublisherConfig:
        """Read ``AWS_*``, ``API_HOST`` and ``IGNORE_EVENTS`` variables."""
        env = os.environ if env is None else env
        return cls(
            credentials=AWSCredentials.from_env(env),
            region=env.get("AWS_SNS_REGION") or env.get("AWS_REGION") or "us-east-1",
            topic=env.get("AWS_SNS_TOPIC_ARN", ""),
            api_host=env.get("API_HOST", ""),
            ignore_events=_flag(env.get("IGNORE_EVENTS")),
            endpoint_url=env.get("AWS_ENDPOINT_URL") or None,
        )


class ConsumerConfig(BaseModel):
    """Settings for :class:`~lib_events.sqs.consumer.SQSConsumer`."""

    model_config = ConfigDict(frozen=True)

    credentials: AWSCredentials = Field(default_factory=AWSCredentials)
    region: str = "us-east-1"
    queue_url: str = Field(..., min_length=1)
    wait_time_seconds: int = Field(default=1, ge=0, le=20)
    visibility_timeout: int = Field(default=30, ge=0, le=43200)
    max_number_of_messages: int = Field(default=10, ge=1, le=10)
    max_concurrency: int | None = Field(default=None, ge=1)
    poll_interval: float = Field(default=1.0, ge=0)
    fifo: bool | None = None
    endpoint_url: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ConsumerConfig:
        """Read ``AWS_*`` variables; the queue comes from ``AWS_SQS_QUEUE_URL``."""
        env = os.environ if env is None else env
        return cls(
            credentials=AWSCredentials.from_env(env),
            region=env.get("AWS_SQS_REGION") or env.get("AWS_REGION") or "us-east-1",
            queue_url=env.get("AWS_SQS_QUEUE_URL", ""),
            endpoint_url=env.get("AWS_ENDPOINT_URL") or None,
        )


def _flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES
