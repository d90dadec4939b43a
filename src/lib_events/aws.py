"""aiobotocore client management shared by the SNS and SQS adapters."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from aiobotocore.session import AioSession

from .exceptions import MessagingConnectionError

if TYPE_CHECKING:
    from .config import AWSCredentials

logger = logging.getLogger("lib_events.aws")


class AWSConnectionManager:
    """Owns one aiobotocore client for a service (``"sns"`` or ``"sqs"``).

    The client is created lazily and shared by every call made through this
    manager, including the concurrent handlers of one poll batch.
    """

    def __init__(
        self,
        service_name: str,
        region_name: str = "us-east-1",
        *,
        credentials: AWSCredentials | None = None,
        session: AioSession | None = None,
        **client_kwargs: Any,
    ) -> None:
        """Configure service, region and optional credentials/session."""
        self._service_name = service_name
        self._region = region_name
        self._session = session or AioSession()
        self._client_kwargs = dict(client_kwargs)
        if credentials is not None:
            self._client_kwargs.update(credentials.client_kwargs())
        self._client: Any = None
        self._client_cm: Any = None

    @property
    def service_name(self) -> str:
        return self._service_name

    async def get_client(self) -> Any:
        """Return shared client; create if needed."""
        if self._client is None:
            self._client_cm = self._session.create_client(
                self._service_name,
                region_name=self._region,
                **self._client_kwargs,
            )
            self._client = await self._client_cm.__aenter__()
        return self._client

    async def get_queue_url(self, queue_name: str) -> str:
        """Resolve an SQS queue name to its URL."""
        client = await self.get_client()
        try:
            out = await client.get_queue_url(QueueName=queue_name)
        except Exception as e:
            raise MessagingConnectionError(str(e)) from e
        return str(out["QueueUrl"])

    async def close(self) -> None:
        """Close the client if open."""
        if self._client_cm is not None:
            await self._client_cm.__aexit__(None, None, None)
            self._client_cm = None
            self._client = None

    async def __aenter__(self) -> AWSConnectionManager:
        await self.get_client()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def health_check(self, **probe: Any) -> bool:
        """Return True if a lightweight call succeeds.

        SQS probes ``get_queue_attributes`` when given ``QueueUrl`` and
        ``list_queues`` otherwise; SNS probes ``get_topic_attributes`` when
        given ``TopicArn`` and ``list_topics`` otherwise.
        """
        try:
            client = await self.get_client()
            if self._service_name == "sns":
                if "TopicArn" in probe:
                    await client.get_topic_attributes(TopicArn=probe["TopicArn"])
                else:
                    await client.list_topics()
                return True
            if "QueueUrl" in probe:
                out = await client.get_queue_attributes(
                    QueueUrl=probe["QueueUrl"], AttributeNames=["QueueArn"]
                )
                return bool((out.get("Attributes") or {}).get("QueueArn"))
            await client.list_queues(MaxResults=1)
            return True
        except Exception:  # noqa: BLE001
            logger.warning("%s health check failed", self._service_name, exc_info=True)
            return False
