from __future__ import annotations

from typing import Any

import pytest

from modbot.config.model import BotConfig
from modbot.irc.connection import Connection
from modbot.logging_config import error_aggregator
from tests.fixtures.irc_fakes import FakeWriter, StaticResolver, make_config


@pytest.fixture
def config() -> BotConfig:
    return make_config()


@pytest.fixture
def writer() -> FakeWriter:
    return FakeWriter()


@pytest.fixture
def resolver() -> StaticResolver:
    return StaticResolver()


@pytest.fixture
def make_connection(writer: FakeWriter, resolver: StaticResolver):
    """Factory for a connection wired to the shared fake writer and resolver."""

    def _make(*, ready: bool = True, **config_overrides: Any) -> Connection:
        return Connection(
            make_config(**config_overrides),
            writer=writer,  # type: ignore[arg-type]
            preauthenticated=ready,
            resolver=resolver,
        )

    return _make


@pytest.fixture
def connection(make_connection) -> Connection:
    return make_connection()


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    yield
    error_aggregator.clear()
