"""Blocking Snowflake transport used by the async Session."""

import logging
from typing import Any, Literal, Optional, Sequence

import snowflake.connector
from snowflake.connector import DictCursor, SnowflakeConnection

from .credentials import ConnectionCredentials

logger = logging.getLogger(__name__)

Row = dict[str, Any]
Statement = tuple[str, Optional[Sequence[Any]]]


class SnowflakeConnector:
    """
    Owns one physical Snowflake connection and runs statements on it.

    Every method blocks on the network. The Session calls them from a worker
    thread and never concurrently, so the connector itself holds no lock.

    Args:
        credentials: Credentials used to build the connect() keyword arguments

    Example:
        >>> with SnowflakeConnector(credentials) as conn:
        ...     rows = conn.execute("SELECT CURRENT_VERSION() AS V")
    """

    def __init__(self, credentials: ConnectionCredentials) -> None:
        self._credentials = credentials
        self._connection: Optional[SnowflakeConnection] = None

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def connect(self) -> SnowflakeConnection:
        """
        Establish the connection if not already connected.

        For browser-based SSO this blocks until the user finishes signing in.

        Returns:
            The live SnowflakeConnection
        """
        if self._connection is None:
            options = self._credentials.connect_options()
            logger.info(
                "Connecting to Snowflake account %s as %s",
                self._credentials.account,
                self._credentials.username or "<default user>",
            )
            self._connection = snowflake.connector.connect(**options)

        return self._connection

    def execute(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> list[Row]:
        """Run one statement and return all rows as dicts keyed by column name"""
        cursor = self.connect().cursor(DictCursor)
        try:
            if bindings is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, bindings)
            rows = cursor.fetchall()
        finally:
            cursor.close()
        return [dict(row) for row in rows] if rows else []

    def execute_many(self, statements: Sequence[Statement]) -> list[list[Row]]:
        """Run statements in order on this connection, returning each one's rows"""
        return [self.execute(sql, bindings) for sql, bindings in statements]

    def close(self) -> None:
        """Close the connection, releasing resources."""
        if self._connection is not None:
            connection, self._connection = self._connection, None
            connection.close()
            logger.info("Closed Snowflake connection to %s", self._credentials.account)

    def __enter__(self) -> "SnowflakeConnector":
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> Literal[False]:
        """Close the connection; always returns False to propagate any exceptions."""
        self.close()
        return False

    def __repr__(self) -> str:
        status = "connected" if self._connection else "not connected"
        return f"SnowflakeConnector(account='{self._credentials.account}', {status})"
