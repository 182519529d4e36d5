"""Connection module exports."""

from .connection import SnowflakeConnector
from .credentials import ConnectionCredentials

__all__ = [
    "SnowflakeConnector",
    "ConnectionCredentials",
]
