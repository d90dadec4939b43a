"""Pytest fixtures for lib-events tests."""

from __future__ import annotations

import pytest

from lib_events.memory import InMemoryConnection, InMemorySNSClient, InMemorySQSClient

QUEUE_URL = "https://sqs.ap-southeast-2.amazonaws.com/1234/my-sqs-name"


@pytest.fixture
def sqs_client() -> InMemorySQSClient:
    return InMemorySQSClient(QUEUE_URL)


@pytest.fixture
def sqs_connection(sqs_client: InMemorySQSClient) -> InMemoryConnection:
    return InMemoryConnection(sqs_client)


@pytest.fixture
def sns_client() -> InMemorySNSClient:
    return InMemorySNSClient()


@pytest.fixture
def sns_connection(sns_client: InMemorySNSClient) -> InMemoryConnection:
    return InMemoryConnection(sns_client)
