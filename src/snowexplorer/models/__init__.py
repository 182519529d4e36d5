"""Explorer tree node models"""

from .node import NodeType, CatalogNode

__all__ = [
    "NodeType",
    "CatalogNode",
]
