"""A uniform tabular record for every executed statement, successful or not"""
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Sequence
from uuid import uuid4

import pandas as pd

_NEWLINES = re.compile(r"\s*[\r\n]+\s*")


def single_line(text: str) -> str:
    """Collapse embedded line breaks (and the whitespace around them) to one space"""
    return _NEWLINES.sub(" ", text).strip()


def _new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class QueryMessage:
    """A human-readable notice attached to a result"""

    message: str
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class QueryResult:
    """Rows and status of one statement

    Failures are data: ``error`` is True, ``cols`` and ``results`` are empty,
    ``raw_error`` holds the original exception and the last message explains it.
    """

    query: str
    cols: list[str] = field(default_factory=list)
    results: list[dict[str, Any]] = field(default_factory=list)
    messages: list[QueryMessage] = field(default_factory=list)
    error: bool = False
    raw_error: Optional[BaseException] = None
    request_id: Optional[str] = None
    result_id: str = field(default_factory=_new_id)
    conn_id: Optional[str] = None

    @classmethod
    def success(
        cls,
        query: str,
        rows: Sequence[dict[str, Any]],
        request_id: Optional[str] = None,
        conn_id: Optional[str] = None,
    ) -> "QueryResult":
        """Wrap returned rows; columns come from the first row's keys"""
        rows = list(rows)
        cols = list(rows[0].keys()) if rows else []
        return cls(
            query=query,
            cols=cols,
            results=rows,
            messages=[QueryMessage(f"Query ok with {len(rows)} results")],
            request_id=request_id,
            conn_id=conn_id,
        )

    @classmethod
    def failure(
        cls,
        query: str,
        exc: BaseException,
        request_id: Optional[str] = None,
        conn_id: Optional[str] = None,
    ) -> "QueryResult":
        """Record a failed statement, keeping the cause in ``raw_error``"""
        text = single_line(str(exc)) or type(exc).__name__
        return cls(
            query=query,
            messages=[QueryMessage(text)],
            error=True,
            raw_error=exc,
            request_id=request_id,
            conn_id=conn_id,
        )

    @property
    def rowcount(self) -> int:
        """Number of rows returned, or -1 for a failed statement"""
        return -1 if self.error else len(self.results)

    def to_df(self, lowercase_columns: bool = True) -> pd.DataFrame:
        """Results as a DataFrame with optional column casing"""
        df = pd.DataFrame(self.results, columns=self.cols)
        if lowercase_columns and len(df.columns) > 0:
            df.columns = df.columns.str.lower()
        return df

    def __repr__(self) -> str:
        status = "error" if self.error else f"rowcount={self.rowcount}"
        return f"QueryResult(result_id='{self.result_id}', {status})"
