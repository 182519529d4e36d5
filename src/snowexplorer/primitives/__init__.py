"""Primitive operations: statement execution and result normalization"""

from snowexplorer.primitives.result import QueryResult, QueryMessage, single_line
from snowexplorer.primitives.execute import Executor, split_sql

__all__ = [
    "QueryResult",
    "QueryMessage",
    "single_line",
    "Executor",
    "split_sql",
]
