"""InMemoryConnection — IConnection serving a fixed in-memory client."""

from __future__ import annotations

from typing import Any


class InMemoryConnection:
    """Hands out one pre-built client, e.g. an InMemorySQSClient."""

    def __init__(self, client: Any, *, healthy: bool = True) -> None:
        self._client = client
        self.healthy = healthy
        self.closed = False

    async def get_client(self) -> Any:
        return self._client

    async def get_queue_url(self, queue_name: str) -> str:
        return f"memory://{queue_name}"

    async def health_check(self, **probe: Any) -> bool:  # noqa: ARG002
        return self.healthy

    async def close(self) -> None:
        self.closed = True
