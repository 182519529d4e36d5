"""Host-facing driver: one Snowflake connection in the explorer"""

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from snowexplorer.connection import ConnectionCredentials, SnowflakeConnector
from snowexplorer.models import CatalogNode
from snowexplorer.navigator import CatalogNavigator
from snowexplorer.primitives import Executor, QueryResult
from snowexplorer.queries import catalog as q
from snowexplorer.session import ConnectorFactory, Session, validate

logger = logging.getLogger(__name__)

Item = Union[CatalogNode, Mapping[str, Any]]


def _as_node(item: Item) -> CatalogNode:
    return item if isinstance(item, CatalogNode) else CatalogNode.from_dict(item)


class SnowflakeDriver:
    """
    Wires a Session, an Executor and a CatalogNavigator for one connection.

    The session opens lazily on the first statement; ``close()`` releases it.

    Args:
        credentials: Connection credentials for this explorer entry
        conn_id: Host identifier copied onto every QueryResult
        connector_factory: Builds the blocking connector (tests pass a fake)

    Example:
        >>> async with SnowflakeDriver.from_profile("default") as driver:
        ...     results = await driver.query("SELECT 1; SELECT 2")
    """

    def __init__(
        self,
        credentials: ConnectionCredentials,
        conn_id: Optional[str] = None,
        connector_factory: ConnectorFactory = SnowflakeConnector,
    ):
        self.credentials = credentials
        self.conn_id = conn_id
        self._connector_factory = connector_factory
        self.session = Session(credentials, connector_factory)
        self.executor = Executor(self.session, conn_id=conn_id)
        self.navigator = CatalogNavigator(self.executor)

    @classmethod
    def from_profile(
        cls, profile: str, path: Optional[str] = None, conn_id: Optional[str] = None, **overrides: Any
    ) -> "SnowflakeDriver":
        """Driver for a connections.toml profile"""
        credentials = ConnectionCredentials.from_profile(profile, path, **overrides)
        return cls(credentials, conn_id=conn_id or profile)

    async def open(self) -> None:
        await self.session.open()

    async def close(self) -> None:
        await self.session.close()

    async def test_connection(self) -> None:
        """Validate the credentials on a separate, short-lived session

        Raises the same errors as :func:`snowexplorer.session.validate`.
        """
        await validate(self.credentials, self._connector_factory)

    async def query(
        self,
        sql_text: str,
        bindings: Optional[Sequence[Any]] = None,
        request_id: Optional[str] = None,
    ) -> list[QueryResult]:
        """Run a script; one result per statement, stopping after the first failure

        With ``bindings`` the text is sent as a single statement, since
        positional bindings cannot be split across statements.
        """
        if bindings is not None:
            return [await self.executor.execute(sql_text, bindings, request_id=request_id)]
        return await self.executor.execute_block(sql_text, request_id=request_id)

    async def get_children_for_item(
        self, item: Item, parent: Optional[Item] = None
    ) -> list[CatalogNode]:
        return await self.navigator.children_of(
            _as_node(item), _as_node(parent) if parent is not None else None
        )

    async def describe_table(self, table: Item) -> QueryResult:
        """INFORMATION_SCHEMA column metadata for a table or view"""
        return await self.executor.execute(q.DESCRIBE_TABLE.render(_as_node(table)))

    async def show_records(self, table: Item, limit: int = 50, page: int = 0) -> QueryResult:
        """One page of rows; ``page`` is zero-based"""
        context = {"table": _as_node(table), "limit": limit, "offset": page * limit}
        return await self.executor.execute(q.FETCH_RECORDS.render(context))

    async def count_records(self, table: Item) -> Optional[int]:
        """Row count of a table, or None if the count query failed"""
        result = await self.executor.execute(q.COUNT_RECORDS.render({"table": _as_node(table)}))
        if result.error or not result.results:
            return None
        return int(result.results[0]["total"])

    async def search_items(self, item_type: str, search: str, **extra: Any) -> list[CatalogNode]:
        # Search is not offered for Snowflake connections
        return []

    def get_static_completions(self) -> dict[str, Any]:
        return {}

    async def __aenter__(self) -> "SnowflakeDriver":
        await self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"SnowflakeDriver(conn_id={self.conn_id!r}, session={self.session!r})"
