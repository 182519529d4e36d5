"""Pytest configuration and shared fixtures."""

import sys
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

# Use tomllib for Python 3.11+, fallback to tomli for older versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import pytest

from snowexplorer.config import get_config_dir
from snowexplorer.connection import ConnectionCredentials


class FakeConnector:
    """In-memory stand-in for SnowflakeConnector.

    Statements are answered from ``backend.responses``: the first key that is a
    substring of the SQL wins. A response is a list of row dicts or an
    exception instance to raise. RESULT_SCAN(LAST_QUERY_ID()) filters the rows
    of the previous statement by the bound name.
    """

    def __init__(self, credentials: ConnectionCredentials, backend: "FakeBackend"):
        self.credentials = credentials
        self.backend = backend
        self.connect_calls = 0
        self.close_calls = 0
        self.executed: list[tuple[str, Any]] = []
        self._connected = False
        self._last_rows: list[dict] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self):
        self.connect_calls += 1
        if self.backend.connect_delay:
            time.sleep(self.backend.connect_delay)
        if self.backend.connect_error is not None:
            raise self.backend.connect_error
        self._connected = True
        return self

    def execute(self, sql: str, bindings: Optional[Any] = None) -> list[dict]:
        self.executed.append((sql, bindings))
        self.backend.log.append(sql)
        with self.backend.tracking():
            delay = next((d for f, d in self.backend.delays.items() if f in sql), 0)
            if delay:
                time.sleep(delay)
            return self._answer(sql, bindings)

    def _answer(self, sql: str, bindings: Optional[Any]) -> list[dict]:
        if "RESULT_SCAN(LAST_QUERY_ID())" in sql:
            (key,) = bindings
            exact = 'UPPER("name")' not in sql
            return [
                {"name": row["name"]}
                for row in self._last_rows
                if (row["name"] if exact else row["name"].upper()) == key
            ]

        for fragment, outcome in self.backend.responses.items():
            if fragment in sql:
                if isinstance(outcome, BaseException):
                    raise outcome
                self._last_rows = [dict(row) for row in outcome]
                return [dict(row) for row in outcome]

        self._last_rows = []
        return []

    def execute_many(self, statements):
        return [self.execute(sql, bindings) for sql, bindings in statements]

    def close(self) -> None:
        self.close_calls += 1
        self._connected = False


class FakeBackend:
    """Connector factory that records every connector it builds."""

    def __init__(self):
        self.responses: Dict[str, Any] = {}
        self.connect_error: Optional[BaseException] = None
        self.connect_delay: float = 0.0
        self.delays: Dict[str, float] = {}
        self.active = 0
        self.max_active = 0
        self._guard = threading.Lock()
        self.connectors: list[FakeConnector] = []
        self.log: list[str] = []

    def __call__(self, credentials: ConnectionCredentials) -> FakeConnector:
        connector = FakeConnector(credentials, self)
        self.connectors.append(connector)
        return connector

    @contextmanager
    def tracking(self):
        """Count statements running at the same time across all connectors."""
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            yield
        finally:
            with self._guard:
                self.active -= 1

    @property
    def connect_calls(self) -> int:
        return sum(c.connect_calls for c in self.connectors)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Scriptable connector factory for Session, validate and the driver."""
    return FakeBackend()


@pytest.fixture
def credentials() -> ConnectionCredentials:
    """Complete password credentials."""
    return ConnectionCredentials(
        account="test-account",
        username="tester",
        password="secret",
        database="ANALYTICS",
        warehouse="COMPUTE_WH",
        role="ANALYST",
    )


def _load_test_config() -> Dict[str, Any]:
    """Load the [test] section of test_config.toml from the config directory, if present."""
    test_config_path = get_config_dir() / "test_config.toml"
    if not test_config_path.exists():
        return {}

    with open(test_config_path, "rb") as f:
        config = tomllib.load(f)

    return config.get("test", {})


@pytest.fixture(scope="session")
def test_profile() -> str:
    """Snowflake profile to use for integration tests."""
    profile = _load_test_config().get("profile")
    if not profile:
        pytest.skip(
            f"Integration profile not configured: add 'profile = \"name\"' to the "
            f"[test] section of {get_config_dir() / 'test_config.toml'}"
        )
    return profile
