"""Query template engine and the catalog template set"""

from .template import QueryTemplate, Placeholder, render, get_value
from . import catalog

__all__ = [
    "QueryTemplate",
    "Placeholder",
    "render",
    "get_value",
    "catalog",
]
