"""Error taxonomy for snowexplorer

Session-level failures are raised. Query-level failures never are: they are
recorded on the QueryResult (``error=True``) by the Executor.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from snowexplorer.primitives.result import QueryResult


class SnowExplorerError(Exception):
    """Base class for all snowexplorer errors"""


class MissingParameterError(SnowExplorerError, ValueError):
    """A required connection parameter is blank"""

    def __init__(self, parameter: str):
        self.parameter = parameter
        super().__init__(f"Missing required connection parameter: {parameter}")


class ConnectionError(SnowExplorerError):
    """Opening the backend connection or configuring the session failed"""


class ProbeQueryError(SnowExplorerError):
    """The probe query ran but reported an error"""

    def __init__(self, result: "QueryResult"):
        self.result = result
        detail = result.messages[-1].message if result.messages else "unknown error"
        super().__init__(f"Probe query failed: {detail}")


class ObjectNotFoundError(SnowExplorerError):
    """A warehouse or database named in the credentials does not exist"""

    def __init__(self, kind: str, name: str, detail: Optional[str] = None):
        self.kind = kind
        self.name = name
        msg = f"{kind.capitalize()} {name!r} not found or not authorized"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class TemplateBindingError(SnowExplorerError):
    """A query template placeholder could not be evaluated against its context"""

    def __init__(self, placeholder: str, cause: BaseException):
        self.placeholder = placeholder
        super().__init__(
            f"Cannot bind template placeholder {placeholder!r}: "
            f"{type(cause).__name__}: {cause}"
        )
