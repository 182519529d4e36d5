"""SQL templates for catalog navigation, table browsing and connection checks

Object templates take a CatalogNode (or any object/mapping with the same
attributes) as context. Identifiers are double-quoted in the literal text and
use the node's ``name``, which keeps the original casing.
"""

from typing import Any

from .template import QueryTemplate, get_value


def _or_default(path: str, default: Any):
    def placeholder(context: Any) -> Any:
        return get_value(context, path, None) or default
    placeholder.__name__ = path
    return placeholder


# Session and probes

SESSION_SETUP = QueryTemplate.compile(
    "ALTER SESSION SET QUOTED_IDENTIFIERS_IGNORE_CASE = FALSE"
)

PROBE = QueryTemplate.compile("SELECT 1")

SHOW_WAREHOUSES = QueryTemplate.compile("SHOW WAREHOUSES")

# Filters the output of the preceding SHOW statement; bound with one name value
FILTER_LAST_RESULT = QueryTemplate.compile(
    """SELECT "name"
FROM TABLE(RESULT_SCAN(LAST_QUERY_ID()))
WHERE {name_expr} = %s""",
    name_expr=lambda p: '"name"' if p["exact"] else 'UPPER("name")',
)

# Table browsing

DESCRIBE_TABLE = QueryTemplate.compile(
    """SELECT C.*
FROM "{database}".information_schema.columns c
WHERE table_catalog = UPPER('{database}')
      AND table_schema = UPPER('{schema}')
      AND table_name = UPPER('{name}')
ORDER BY ordinal_position"""
)

FETCH_COLUMNS = QueryTemplate.compile(
    """SELECT
  column_name AS "label",
  table_name AS "table",
  data_type AS "dataType",
  UPPER(data_type || (
    CASE WHEN character_maximum_length > 0 THEN (
      '(' || character_maximum_length || ')'
    ) ELSE '' END
  )) AS "detail",
  character_maximum_length AS "size",
  table_catalog AS "database",
  table_schema AS "schema",
  column_default AS "defaultValue",
  is_nullable AS "isNullable"
FROM "{database}".information_schema.columns c
WHERE table_schema = '{schema}'
      AND table_name = '{name}'
ORDER BY ordinal_position"""
)

FETCH_RECORDS = QueryTemplate.compile(
    """SELECT *
FROM "{table.database}"."{table.schema}"."{table.name}"
LIMIT {limit}
OFFSET {offset};""",
    limit=_or_default("limit", 50),
    offset=_or_default("offset", 0),
)

COUNT_RECORDS = QueryTemplate.compile(
    'SELECT COUNT(1) AS "total"\n'
    'FROM "{table.database}"."{table.schema}"."{table.name}"'
)

# Catalog listings

FETCH_DATABASES = QueryTemplate.compile("SHOW DATABASES")

FETCH_SCHEMAS = QueryTemplate.compile(
    """SELECT
  schema_name AS "label",
  schema_name AS "schema",
  catalog_name AS "database"
FROM "{database}".information_schema.schemata
WHERE schema_name != 'INFORMATION_SCHEMA'
ORDER BY 1"""
)


def _fetch_tables(table_type: str) -> QueryTemplate:
    return QueryTemplate.compile(
        """SELECT table_name AS "label",
  table_schema AS "schema",
  table_catalog AS "database",
  comment AS "detail"
FROM "{database}".information_schema.tables
WHERE table_schema = '{schema}'
      AND table_type = '{table_type}'
ORDER BY table_name""",
        table_type=lambda _: table_type,
    )


def _show_in_schema(kind: str) -> QueryTemplate:
    return QueryTemplate.compile(
        'SHOW {kind} IN SCHEMA "{database}"."{schema}"',
        kind=lambda _: kind,
    )


FETCH_TABLES = _fetch_tables("BASE TABLE")
FETCH_VIEWS = _fetch_tables("VIEW")
FETCH_MATERIALIZED_VIEWS = _fetch_tables("MATERIALIZED VIEW")

FETCH_STAGES = _show_in_schema("STAGES")
FETCH_PIPES = _show_in_schema("PIPES")
FETCH_STREAMS = _show_in_schema("STREAMS")
FETCH_TASKS = _show_in_schema("TASKS")
FETCH_FUNCTIONS = _show_in_schema("USER FUNCTIONS")
FETCH_PROCEDURES = _show_in_schema("PROCEDURES")
FETCH_FILE_FORMATS = _show_in_schema("FILE FORMATS")
FETCH_SEQUENCES = _show_in_schema("SEQUENCES")
