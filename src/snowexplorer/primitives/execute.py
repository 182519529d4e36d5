"""Execute SQL on a Session and normalize the outcome into QueryResults"""

import logging
from io import StringIO
from typing import Any, Optional, Sequence

from snowflake.connector.util_text import split_statements

from snowexplorer.connection.connection import Statement
from snowexplorer.session import Session

from .result import QueryResult, single_line

logger = logging.getLogger(__name__)


def split_sql(sql_text: str) -> list[str]:
    """Split a script into its statements, dropping empty ones"""
    statements = []
    for statement, _is_put_or_get in split_statements(StringIO(sql_text), remove_comments=True):
        if statement.strip().rstrip(";").strip():
            statements.append(statement)
    return statements


class Executor:
    """Run statements on a Session; every call yields QueryResults and never raises

    Query failures, including a session that cannot be opened, are returned
    as results with ``error=True`` so callers can render partial failure.
    """

    def __init__(self, session: Session, conn_id: Optional[str] = None):
        self.session = session
        self.conn_id = conn_id

    async def execute(
        self,
        sql: str,
        bindings: Optional[Sequence[Any]] = None,
        request_id: Optional[str] = None,
    ) -> QueryResult:
        """Execute one statement and return its QueryResult"""
        try:
            rows = await self.session.run(sql, bindings)
        except Exception as exc:
            logger.warning("Query failed: %s", single_line(str(exc)))
            return QueryResult.failure(sql, exc, request_id=request_id, conn_id=self.conn_id)
        return QueryResult.success(sql, rows, request_id=request_id, conn_id=self.conn_id)

    async def execute_scan(
        self,
        statements: Sequence[Statement],
        request_id: Optional[str] = None,
    ) -> QueryResult:
        """Execute statements back to back and return the last one's rows

        Used to post-filter SHOW output with RESULT_SCAN(LAST_QUERY_ID()).
        """
        query = ";\n".join(sql for sql, _ in statements)
        try:
            outputs = await self.session.run_many(statements)
        except Exception as exc:
            logger.warning("Query failed: %s", single_line(str(exc)))
            return QueryResult.failure(query, exc, request_id=request_id, conn_id=self.conn_id)
        rows = outputs[-1] if outputs else []
        return QueryResult.success(query, rows, request_id=request_id, conn_id=self.conn_id)

    async def execute_block(
        self,
        sql_text: str,
        request_id: Optional[str] = None,
    ) -> list[QueryResult]:
        """Execute a script statement by statement, stopping after the first failure"""
        statements = split_sql(sql_text)
        if not statements:
            # Nothing to send; still report one result for the submitted text
            return [QueryResult.success(sql_text, [], request_id=request_id, conn_id=self.conn_id)]

        results: list[QueryResult] = []
        for statement in statements:
            result = await self.execute(statement, request_id=request_id)
            results.append(result)
            if result.error:
                break
        return results
