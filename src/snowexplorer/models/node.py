"""Catalog tree nodes"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class NodeType(str, Enum):
    """The closed set of explorer node kinds"""

    CONNECTION = "connection"
    CONNECTED_CONNECTION = "connected-connection"
    DATABASE = "database"
    SCHEMA = "schema"
    TABLE = "table"
    VIEW = "view"
    MATERIALIZED_VIEW = "materialized-view"
    COLUMN = "column"
    RESOURCE_GROUP = "resource-group"
    STAGE = "stage"
    PIPE = "pipe"
    STREAM = "stream"
    TASK = "task"
    FUNCTION = "function"
    PROCEDURE = "procedure"
    FILE_FORMAT = "file-format"
    SEQUENCE = "sequence"
    NO_CHILD = "no-child"

    @classmethod
    def parse(cls, value: Any) -> Optional["NodeType"]:
        """Member for ``value``, or None if it names no known kind"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_PAYLOAD_KEYS = frozenset({
    "type", "node_type", "label", "database", "schema", "childType", "child_type",
    "detail", "name", "table", "iconId", "icon_id", "extra",
})


@dataclass(frozen=True)
class CatalogNode:
    """One entry in the explorer tree

    ``label`` is what the host displays; ``name`` is the identifier used when
    building further queries against the object (it defaults to ``label``).
    """

    node_type: NodeType
    label: str
    database: Optional[str] = None
    schema: Optional[str] = None
    child_type: Optional[NodeType] = None
    detail: Optional[str] = None
    name: Optional[str] = None
    table: Optional[str] = None
    icon_id: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Default ``name`` to the label and freeze ``extra``"""
        if self.name is None:
            object.__setattr__(self, "name", self.label)
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def is_group(self) -> bool:
        return self.node_type is NodeType.RESOURCE_GROUP

    @classmethod
    def folder(
        cls,
        label: str,
        child_type: NodeType,
        database: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> "CatalogNode":
        """A resource-group node holding objects of ``child_type``"""
        return cls(
            node_type=NodeType.RESOURCE_GROUP,
            label=label,
            database=database,
            schema=schema,
            child_type=child_type,
            icon_id="folder",
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CatalogNode":
        """Build a node from a host payload (camelCase keys, as sent by the explorer)

        Unknown ``type`` values are kept as the raw string so that navigation
        can treat them as having no children.
        Keys that are not node fields are gathered into ``extra``, so a
        ``to_dict()`` payload reads back unchanged.
        """
        raw_type = data.get("type", data.get("node_type"))
        raw_child = data.get("childType", data.get("child_type"))
        extra = {k: v for k, v in data.items() if k not in _PAYLOAD_KEYS}
        extra.update(data.get("extra") or {})
        return cls(
            node_type=NodeType.parse(raw_type) or raw_type,
            label=data.get("label", ""),
            database=data.get("database"),
            schema=data.get("schema"),
            child_type=NodeType.parse(raw_child) if raw_child is not None else None,
            detail=data.get("detail"),
            name=data.get("name"),
            table=data.get("table"),
            icon_id=data.get("iconId", data.get("icon_id")),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        """Host payload with camelCase keys; unset fields are omitted"""
        out: dict[str, Any] = {
            "type": self.node_type.value if isinstance(self.node_type, NodeType) else self.node_type,
            "label": self.label,
            "name": self.name,
        }
        optional = {
            "database": self.database,
            "schema": self.schema,
            "childType": self.child_type.value if self.child_type else None,
            "detail": self.detail,
            "table": self.table,
            "iconId": self.icon_id,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        out.update(self.extra)
        return out
