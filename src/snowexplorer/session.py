"""Lazily opened, single-connection Snowflake session"""

import asyncio
import contextlib
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from snowexplorer.connection import ConnectionCredentials, SnowflakeConnector
from snowexplorer.connection.connection import Row, Statement
from snowexplorer.errors import (
    ConnectionError,
    MissingParameterError,
    ObjectNotFoundError,
    ProbeQueryError,
)
from snowexplorer.queries.catalog import (
    FETCH_DATABASES,
    FILTER_LAST_RESULT,
    PROBE,
    SESSION_SETUP,
    SHOW_WAREHOUSES,
)
from snowexplorer.utils.identifiers import lookup_key

if TYPE_CHECKING:
    from snowexplorer.primitives.execute import Executor

logger = logging.getLogger(__name__)

ConnectorFactory = Callable[[ConnectionCredentials], SnowflakeConnector]


class SessionState(str, Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"


class Session:
    """Owns at most one backend connection for the lifetime of the credentials

    ``open()`` is idempotent: while an open is in flight every caller awaits
    the same attempt, so concurrent callers never create two connections.
    Statements run one at a time, in submission order.

    Example:
        >>> async with Session(credentials) as session:
        ...     rows = await session.run("SELECT CURRENT_ROLE() AS ROLE")
    """

    def __init__(
        self,
        credentials: ConnectionCredentials,
        connector_factory: ConnectorFactory = SnowflakeConnector,
    ):
        self._credentials = credentials
        self._connector_factory = connector_factory
        self._connector: Optional[SnowflakeConnector] = None
        self._pending: Optional["asyncio.Task[SnowflakeConnector]"] = None
        self._state = SessionState.CLOSED
        self._lock = asyncio.Lock()

    @property
    def credentials(self) -> ConnectionCredentials:
        return self._credentials

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SessionState.OPEN

    def _set_state(self, state: SessionState) -> None:
        logger.debug("Session %s: %s -> %s", self._credentials.account, self._state.value, state.value)
        self._state = state

    async def open(self) -> SnowflakeConnector:
        """Open the connection, or join the open already in progress

        Raises:
            ConnectionError: connecting or configuring the session failed
        """
        if self._state is SessionState.OPEN and self._connector is not None:
            return self._connector

        if self._pending is None:
            self._set_state(SessionState.OPENING)
            self._pending = asyncio.ensure_future(self._open())

        return await asyncio.shield(self._pending)

    async def _open(self) -> SnowflakeConnector:
        connector: Optional[SnowflakeConnector] = None
        try:
            connector = self._connector_factory(self._credentials)
            if self._credentials.requires_browser:
                logger.info("Waiting for browser-based authentication to complete")
            await asyncio.to_thread(connector.connect)
            await asyncio.to_thread(connector.execute, SESSION_SETUP.render())
        except Exception as exc:
            logger.warning("Could not open Snowflake session for %s: %s", self._credentials.account, exc)
            if connector is not None:
                # Best effort: the connect error is what the caller needs to see
                with contextlib.suppress(Exception):
                    await asyncio.to_thread(connector.close)
            self._set_state(SessionState.CLOSED)
            raise ConnectionError(
                f"Could not connect to Snowflake account {self._credentials.account!r}: {exc}"
            ) from exc
        finally:
            self._pending = None

        self._connector = connector
        self._set_state(SessionState.OPEN)
        return connector

    async def close(self) -> None:
        """Release the connection; a no-op when nothing is open"""
        if self._pending is not None:
            try:
                await asyncio.shield(self._pending)
            except ConnectionError:
                # The failure belongs to whoever called open(); nothing to close.
                return

        if self._state is not SessionState.OPEN or self._connector is None:
            return

        connector, self._connector = self._connector, None
        self._set_state(SessionState.CLOSING)
        try:
            await self._serialized(connector.close)
        finally:
            self._set_state(SessionState.CLOSED)

    async def _serialized(self, func: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking connector call in a worker thread, holding the lock until it returns

        A cancelled caller still waits for the call to finish before the lock
        is released, so the connection never runs two statements at once.
        """
        async with self._lock:
            work = asyncio.ensure_future(asyncio.to_thread(func, *args))
            try:
                return await asyncio.shield(work)
            except asyncio.CancelledError:
                # Outcome is discarded; only completion matters
                with contextlib.suppress(Exception):
                    await work
                raise

    async def run(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> list[Row]:
        """Run one statement on the session's connection, opening it if needed"""
        connector = await self.open()
        return await self._serialized(connector.execute, sql, bindings)

    async def run_many(self, statements: Sequence[Statement]) -> list[list[Row]]:
        """Run statements back to back with no other statement in between"""
        connector = await self.open()
        return await self._serialized(connector.execute_many, statements)

    async def __aenter__(self) -> "Session":
        await self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Session(account='{self._credentials.account}', state={self._state.value})"


async def _check_exists(executor: "Executor", kind: str, name: str, show_sql: str) -> None:
    key, exact = lookup_key(name)
    result = await executor.execute_scan(
        [(show_sql, None), (FILTER_LAST_RESULT.render({"exact": exact}), [key])]
    )
    if result.error:
        raise ObjectNotFoundError(kind, name, detail=result.messages[-1].message)
    if not result.results:
        raise ObjectNotFoundError(kind, name)


async def validate(
    credentials: ConnectionCredentials,
    connector_factory: ConnectorFactory = SnowflakeConnector,
) -> None:
    """Check that the credentials can connect and reach their warehouse and database

    The session used for the check is always closed afterwards.

    Raises:
        MissingParameterError: database or warehouse is blank (no network call is made)
        ConnectionError: the connection could not be opened
        ProbeQueryError: the session cannot run a trivial statement
        ObjectNotFoundError: the warehouse or database does not exist
    """
    from snowexplorer.primitives.execute import Executor

    for parameter in ("database", "warehouse"):
        value = getattr(credentials, parameter)
        if not value or not value.strip():
            raise MissingParameterError(parameter)

    session = Session(credentials, connector_factory)
    try:
        await session.open()
        executor = Executor(session)

        probe = await executor.execute(PROBE.render())
        if probe.error:
            raise ProbeQueryError(probe)

        await _check_exists(executor, "warehouse", credentials.warehouse, SHOW_WAREHOUSES.render())
        await _check_exists(executor, "database", credentials.database, FETCH_DATABASES.render())
        logger.info("Connection to %s validated", credentials.account)
    finally:
        await session.close()
