"""
snowexplorer - Snowflake catalog browsing and query execution for database explorers

Code is organized in layers
- config/ and connection/ load profiles and own the physical connection
- session wraps a connection in a lazily opened, serialized async session
- queries/ and primitives/ render SQL templates and normalize results
- models/ and navigator turn catalog metadata into explorer tree nodes
- driver is the host-facing facade over all of the above
"""

# Layer 1: Core connectivity
from snowexplorer.config import load_profile, list_profiles
from snowexplorer.connection import ConnectionCredentials, SnowflakeConnector
from snowexplorer.errors import (
    SnowExplorerError,
    MissingParameterError,
    ConnectionError,
    ProbeQueryError,
    ObjectNotFoundError,
    TemplateBindingError,
)
from snowexplorer.session import Session, SessionState, validate

# Layer 2: Templates and execution
from snowexplorer.queries import QueryTemplate, Placeholder, render
from snowexplorer.primitives import QueryResult, QueryMessage, Executor

# Layer 3: Catalog tree
from snowexplorer.models import NodeType, CatalogNode
from snowexplorer.navigator import CatalogNavigator
from snowexplorer.driver import SnowflakeDriver

__version__ = "0.1.0"
__all__ = [
    # Layer 1: Configuration & Connection
    "load_profile",
    "list_profiles",
    "ConnectionCredentials",
    "SnowflakeConnector",
    "Session",
    "SessionState",
    "validate",
    # Errors
    "SnowExplorerError",
    "MissingParameterError",
    "ConnectionError",
    "ProbeQueryError",
    "ObjectNotFoundError",
    "TemplateBindingError",
    # Layer 2: Templates & Execution
    "QueryTemplate",
    "Placeholder",
    "render",
    "QueryResult",
    "QueryMessage",
    "Executor",
    # Layer 3: Catalog tree
    "NodeType",
    "CatalogNode",
    "CatalogNavigator",
    "SnowflakeDriver",
]
