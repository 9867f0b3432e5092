"""Pytest configuration and shared fixtures."""

import logging

import pytest

from dealyze_client.client import DealyzeClient
from dealyze_client.config import ClientConfig
from dealyze_client.log import PACKAGE_LOGGER_NAME, PAYLOAD_LOGGER_NAME
from dealyze_client.transport import MockRegisterTransport


@pytest.fixture
def config() -> ClientConfig:
    """Config with a test employee and immediate reconnects."""
    return ClientConfig(
        uri="ws://register.test:3100",
        employee_id="123456",
        employee_username="testusername",
        reconnect_delay=0.0,
        max_reconnect_attempts=3,
    )


@pytest.fixture
def transport() -> MockRegisterTransport:
    return MockRegisterTransport()


@pytest.fixture
def client(config: ClientConfig, transport: MockRegisterTransport) -> DealyzeClient:
    return DealyzeClient(config, transport=transport)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo handlers and propagation changes made by configure_logging."""
    yield
    for name in (PACKAGE_LOGGER_NAME, PAYLOAD_LOGGER_NAME):
        target = logging.getLogger(name)
        for handler in list(target.handlers):
            target.removeHandler(handler)
            handler.close()
        target.setLevel(logging.NOTSET)
        target.propagate = True
