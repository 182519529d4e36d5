"""Catalog navigation: children of an explorer node

Every node kind maps to one fetcher in a dispatch table built when the
navigator is created. Folder (resource-group) nodes dispatch a second time on
the kind of object they hold.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from snowexplorer.models import CatalogNode, NodeType
from snowexplorer.primitives import Executor
from snowexplorer.queries import QueryTemplate
from snowexplorer.queries import catalog as q
from snowexplorer.utils.identifiers import strip_quotes

logger = logging.getLogger(__name__)

Fetcher = Callable[[CatalogNode, Optional[CatalogNode]], Awaitable[list[CatalogNode]]]
Row = Mapping[str, Any]

SCHEMAS_FOLDER = "Schemas"

# Folders shown under a schema, in display order
OBJECT_FOLDERS: tuple[tuple[str, NodeType], ...] = (
    ("Tables", NodeType.TABLE),
    ("Views", NodeType.VIEW),
    ("Materialized Views", NodeType.MATERIALIZED_VIEW),
    ("Stages", NodeType.STAGE),
    ("Pipes", NodeType.PIPE),
    ("Streams", NodeType.STREAM),
    ("Tasks", NodeType.TASK),
    ("Functions", NodeType.FUNCTION),
    ("Procedures", NodeType.PROCEDURE),
    ("File Formats", NodeType.FILE_FORMAT),
    ("Sequences", NodeType.SEQUENCE),
)

_FOLDER_TYPES = {label.lower(): kind for label, kind in OBJECT_FOLDERS}
_FOLDER_TYPES[SCHEMAS_FOLDER.lower()] = NodeType.SCHEMA


@dataclass(frozen=True)
class ObjectListing:
    """How to list one kind of schema object and turn its rows into nodes"""

    template: QueryTemplate
    child_type: NodeType
    detail_column: Optional[str] = None
    unquote_label: bool = False
    extra_columns: tuple[str, ...] = ()

    def row_name(self, row: Row) -> str:
        return str(row.get("label") or row.get("name") or "")

    def to_node(self, kind: NodeType, row: Row, parent: CatalogNode) -> CatalogNode:
        name = self.row_name(row)
        detail = row.get(self.detail_column) if self.detail_column else None
        return CatalogNode(
            node_type=kind,
            label=strip_quotes(name) if self.unquote_label else name,
            name=name,
            database=parent.database,
            schema=parent.schema,
            child_type=self.child_type,
            detail=str(detail) if detail not in (None, "") else None,
            extra={col: row.get(col) for col in self.extra_columns if col in row},
        )


class RoutineListing(ObjectListing):
    """Functions and procedures: label with the argument signature so overloads stay distinct"""

    def to_node(self, kind: NodeType, row: Row, parent: CatalogNode) -> CatalogNode:
        name = self.row_name(row)
        arguments = str(row.get("arguments") or "")
        signature, _, returns = arguments.partition(" RETURN ")
        return CatalogNode(
            node_type=kind,
            label=signature or name,
            name=name,
            database=parent.database,
            schema=parent.schema,
            child_type=self.child_type,
            detail=returns or None,
            extra={"arguments": arguments} if arguments else {},
        )


LISTINGS: dict[NodeType, ObjectListing] = {
    NodeType.TABLE: ObjectListing(q.FETCH_TABLES, NodeType.COLUMN, "detail"),
    NodeType.VIEW: ObjectListing(q.FETCH_VIEWS, NodeType.COLUMN, "detail"),
    NodeType.MATERIALIZED_VIEW: ObjectListing(q.FETCH_MATERIALIZED_VIEWS, NodeType.COLUMN, "detail"),
    NodeType.STAGE: ObjectListing(
        q.FETCH_STAGES, NodeType.NO_CHILD, "type", unquote_label=True, extra_columns=("url",)
    ),
    NodeType.PIPE: ObjectListing(q.FETCH_PIPES, NodeType.NO_CHILD, "comment", extra_columns=("definition",)),
    NodeType.STREAM: ObjectListing(q.FETCH_STREAMS, NodeType.NO_CHILD, "table_name", extra_columns=("table_name",)),
    NodeType.TASK: ObjectListing(q.FETCH_TASKS, NodeType.NO_CHILD, "schedule", extra_columns=("schedule", "state")),
    NodeType.FUNCTION: RoutineListing(q.FETCH_FUNCTIONS, NodeType.NO_CHILD),
    NodeType.PROCEDURE: RoutineListing(q.FETCH_PROCEDURES, NodeType.NO_CHILD),
    NodeType.FILE_FORMAT: ObjectListing(q.FETCH_FILE_FORMATS, NodeType.NO_CHILD, "type", unquote_label=True),
    NodeType.SEQUENCE: ObjectListing(q.FETCH_SEQUENCES, NodeType.NO_CHILD, "next_value", extra_columns=("next_value", "interval")),
}


class CatalogNavigator:
    """Turns an explorer node into its child nodes"""

    def __init__(self, executor: Executor):
        self._executor = executor
        self._fetchers: dict[NodeType, Fetcher] = {
            NodeType.CONNECTION: self._databases,
            NodeType.CONNECTED_CONNECTION: self._databases,
            NodeType.DATABASE: self._schemas_folder,
            NodeType.SCHEMA: self._object_folders,
            NodeType.TABLE: self._columns,
            NodeType.VIEW: self._columns,
            NodeType.MATERIALIZED_VIEW: self._columns,
            NodeType.RESOURCE_GROUP: self._group_children,
            NodeType.COLUMN: self._no_children,
            NodeType.STAGE: self._no_children,
            NodeType.PIPE: self._no_children,
            NodeType.STREAM: self._no_children,
            NodeType.TASK: self._no_children,
            NodeType.FUNCTION: self._no_children,
            NodeType.PROCEDURE: self._no_children,
            NodeType.FILE_FORMAT: self._no_children,
            NodeType.SEQUENCE: self._no_children,
            NodeType.NO_CHILD: self._no_children,
        }
        missing = set(NodeType) - set(self._fetchers)
        if missing:
            raise TypeError(f"No fetcher for node types: {sorted(m.value for m in missing)}")

    async def children_of(
        self,
        node: Union[CatalogNode, Mapping[str, Any]],
        parent: Optional[CatalogNode] = None,
    ) -> list[CatalogNode]:
        """Children of ``node`` in display order; unknown kinds have none"""
        if not isinstance(node, CatalogNode):
            node = CatalogNode.from_dict(node)

        kind = NodeType.parse(node.node_type)
        if kind is None:
            logger.debug("No children for unknown node type %r", node.node_type)
            return []
        return await self._fetchers[kind](node, parent)

    async def _rows(self, template: QueryTemplate, node: CatalogNode) -> list[Row]:
        result = await self._executor.execute(template.render(node))
        if result.error:
            logger.warning(
                "Could not list children of %s %r: %s",
                node.node_type, node.label, result.messages[-1].message,
            )
            return []
        return result.results

    async def _no_children(self, node: CatalogNode, parent: Optional[CatalogNode]) -> list[CatalogNode]:
        return []

    async def _databases(self, node: CatalogNode, parent: Optional[CatalogNode]) -> list[CatalogNode]:
        nodes = []
        for row in await self._rows(q.FETCH_DATABASES, node):
            name = str(row["name"])
            nodes.append(CatalogNode(
                node_type=NodeType.DATABASE,
                label=name,
                database=name,
                child_type=NodeType.SCHEMA,
                detail=row.get("comment") or None,
            ))
        return nodes

    async def _schemas_folder(self, node: CatalogNode, parent: Optional[CatalogNode]) -> list[CatalogNode]:
        return [CatalogNode.folder(SCHEMAS_FOLDER, NodeType.SCHEMA, database=node.database or node.name)]

    async def _schemas(self, node: CatalogNode, parent: Optional[CatalogNode]) -> list[CatalogNode]:
        return [
            CatalogNode(
                node_type=NodeType.SCHEMA,
                label=str(row["label"]),
                database=node.database,
                schema=str(row["label"]),
                child_type=NodeType.RESOURCE_GROUP,
            )
            for row in await self._rows(q.FETCH_SCHEMAS, node)
        ]

    async def _object_folders(self, node: CatalogNode, parent: Optional[CatalogNode]) -> list[CatalogNode]:
        schema = node.schema or node.name
        return [
            CatalogNode.folder(label, kind, database=node.database, schema=schema)
            for label, kind in OBJECT_FOLDERS
        ]

    async def _group_children(self, node: CatalogNode, parent: Optional[CatalogNode]) -> list[CatalogNode]:
        kind = NodeType.parse(node.child_type) or _FOLDER_TYPES.get(node.label.lower())
        if kind is NodeType.SCHEMA:
            return await self._schemas(node, parent)
        listing = LISTINGS.get(kind) if kind is not None else None
        if listing is None:
            logger.debug("No children for folder %r (child type %r)", node.label, node.child_type)
            return []

        nodes = []
        for row in await self._rows(listing.template, node):
            if row.get("is_builtin") == "Y":
                continue
            nodes.append(listing.to_node(kind, row, node))
        return nodes

    async def _columns(self, node: CatalogNode, parent: Optional[CatalogNode]) -> list[CatalogNode]:
        nodes = []
        for row in await self._rows(q.FETCH_COLUMNS, node):
            nodes.append(CatalogNode(
                node_type=NodeType.COLUMN,
                label=str(row["label"]),
                database=node.database,
                schema=node.schema,
                child_type=NodeType.NO_CHILD,
                detail=row.get("detail"),
                table=node.name,
                icon_id="column",
                extra={
                    "data_type": row.get("dataType"),
                    "is_nullable": str(row.get("isNullable", "")).upper() == "YES",
                    "default_value": row.get("defaultValue"),
                    "size": row.get("size"),
                },
            ))
        return nodes
