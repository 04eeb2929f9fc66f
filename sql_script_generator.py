"""
SQL script rendering for decomposed relations.

Column types are inferred from the post-1NF values (which may still be display
text), promoted across rows to the most general compatible type, and rendered
through SQLAlchemy's DDL compiler together with the primary and foreign key
constraints carried by each relation. INSERT statements are compiled with
literal binds so the script can be replayed without parameters.

`to_sql_identifier` is the single identifier sanitizer for the whole tool: the
normalizer uses it for relation and key names, and this module uses it for
table and column names, so key references always line up textually.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import (
    DATE,
    DECIMAL,
    INTEGER,
    SMALLINT,
    TIMESTAMP,
    VARCHAR,
    Column,
    ForeignKeyConstraint,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    insert,
)
from sqlalchemy.engine import Dialect, default
from sqlalchemy.engine.url import make_url
from sqlalchemy.schema import CreateTable
from sqlalchemy.sql.elements import quoted_name


PLACEHOLDER_IDENTIFIER = "UNKNOWN_COLUMN"

TYPE_VARCHAR = "VARCHAR"
TYPE_INTEGER = "INTEGER"
TYPE_DECIMAL = "DECIMAL"
TYPE_BOOLEAN = "SMALLINT"
TYPE_DATE = "DATE"
TYPE_TIMESTAMP = "TIMESTAMP"

NON_IDENTIFIER_RE = re.compile(r"[^A-Za-z0-9_]")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?)?$")
INTEGER_RE = re.compile(r"^[-+]?\d+$")
DECIMAL_RE = re.compile(r"^[-+]?(\d+\.\d*|\.\d+)([eE][-+]?\d+)?$")
REFERENCE_RE = re.compile(r"^\s*([A-Za-z0-9_]+)\s*\(\s*([A-Za-z0-9_]+)\s*\)\s*$")


# --------------------------------------------------------------------------------------
# Identifiers
# --------------------------------------------------------------------------------------
def to_sql_identifier(name: Optional[Any]) -> str:
    """Convert a column or relation name into an uppercase SQL identifier.

    The result always matches `[A-Z_][A-Z0-9_]*`. Sanitizing an already
    sanitized identifier returns it unchanged: the digit guard is applied after
    the surrounding underscores are stripped, so it survives a second pass.
    """
    if name is None:
        return PLACEHOLDER_IDENTIFIER
    sanitized = NON_IDENTIFIER_RE.sub("_", str(name).strip()).strip("_")
    if not sanitized:
        return PLACEHOLDER_IDENTIFIER
    if sanitized[0].isdigit():
        sanitized = "_" + sanitized
    return sanitized.upper()


def parse_reference(reference: str) -> Tuple[str, str]:
    """Split an `OTHER_RELATION(COLUMN)` foreign key reference."""
    match = REFERENCE_RE.match(reference or "")
    if match is None:
        raise ValueError(f"Malformed foreign key reference: {reference!r}")
    return match.group(1), match.group(2)


def _ident(name: str) -> quoted_name:
    # Sanitized identifiers are emitted bare; SQLAlchemy would otherwise quote
    # every uppercase name.
    return quoted_name(name, False)


# --------------------------------------------------------------------------------------
# Type inference
# --------------------------------------------------------------------------------------
def _infer_from_text(value: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        return TYPE_VARCHAR
    if trimmed.lower() in {"true", "false"}:
        return TYPE_BOOLEAN
    if ISO_DATE_RE.match(trimmed):
        try:
            if "T" in trimmed:
                datetime.fromisoformat(trimmed)
                return TYPE_TIMESTAMP
            date.fromisoformat(trimmed)
            return TYPE_DATE
        except ValueError:
            return TYPE_VARCHAR
    if INTEGER_RE.match(trimmed):
        return TYPE_INTEGER
    if DECIMAL_RE.match(trimmed):
        return TYPE_DECIMAL
    return TYPE_VARCHAR


def infer_sql_type(value: Any) -> str:
    """Most specific SQL type for one cell value, inspecting text contents."""
    if value is None:
        return TYPE_VARCHAR
    if isinstance(value, bool):
        return TYPE_BOOLEAN
    if isinstance(value, int):
        return TYPE_INTEGER
    if isinstance(value, (float, Decimal)):
        return TYPE_DECIMAL
    if isinstance(value, datetime):
        return TYPE_TIMESTAMP
    if isinstance(value, date):
        return TYPE_DATE
    if isinstance(value, str):
        return _infer_from_text(value)
    return TYPE_VARCHAR


def promote_sql_type(existing: str, new: str) -> str:
    """Most general type compatible with both inputs; incompatible mixes fall back to VARCHAR."""
    if existing == new:
        return existing
    pair = {existing, new}
    if TYPE_VARCHAR in pair:
        return TYPE_VARCHAR
    if pair in ({TYPE_DECIMAL, TYPE_INTEGER}, {TYPE_DECIMAL, TYPE_BOOLEAN}):
        return TYPE_DECIMAL
    if pair == {TYPE_INTEGER, TYPE_BOOLEAN}:
        return TYPE_INTEGER
    if pair == {TYPE_TIMESTAMP, TYPE_DATE}:
        return TYPE_TIMESTAMP
    return TYPE_VARCHAR


def infer_column_types(rows: Sequence[Dict[str, Any]]) -> Dict[str, str]:
    """Sanitized column name -> promoted type, in column encounter order.

    Nulls never narrow or widen a column; a column that only ever holds nulls is
    typed VARCHAR.
    """
    schema: Dict[str, Optional[str]] = {}
    for row in rows:
        for column, value in row.items():
            name = to_sql_identifier(column)
            current = schema.get(name)
            if value is None:
                schema.setdefault(name, None)
                continue
            inferred = infer_sql_type(value)
            schema[name] = inferred if current is None else promote_sql_type(current, inferred)
    return {name: kind or TYPE_VARCHAR for name, kind in schema.items()}


def coerce_value(value: Any, sql_type: str) -> Any:
    """Convert a cell value to the Python type SQLAlchemy renders for `sql_type`."""
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        try:
            if sql_type in (TYPE_BOOLEAN, TYPE_INTEGER, TYPE_DECIMAL) and text.lower() in {"true", "false"}:
                return 1 if text.lower() == "true" else 0
            if sql_type in (TYPE_BOOLEAN, TYPE_INTEGER):
                return int(text)
            if sql_type == TYPE_DECIMAL:
                return Decimal(text)
            if sql_type == TYPE_DATE:
                return date.fromisoformat(text)
            if sql_type == TYPE_TIMESTAMP:
                return datetime.fromisoformat(text)
        except (ValueError, InvalidOperation) as exc:
            raise ValueError(f"Cannot render {value!r} as {sql_type}") from exc
        return value
    if sql_type == TYPE_VARCHAR:
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return str(value)
    if isinstance(value, bool):
        return int(value)
    if sql_type == TYPE_TIMESTAMP and isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time())
    return value


# --------------------------------------------------------------------------------------
# Script generation
# --------------------------------------------------------------------------------------
def resolve_dialect(name: Optional[str]) -> Dialect:
    """Instantiate a dialect by name (`sqlite`, `postgresql`, ...); None uses the generic one."""
    if not name:
        return default.StrCompileDialect()
    return make_url(f"{name}://").get_dialect()()


class SqlScriptGenerator:
    """Builds one SQLAlchemy `MetaData` for a run and renders it as a script."""

    def __init__(
        self,
        dialect: Optional[str] = None,
        varchar_length: int = 255,
        decimal_precision: int = 18,
        decimal_scale: int = 4,
    ) -> None:
        self.dialect = resolve_dialect(dialect)
        self.varchar_length = varchar_length
        self.decimal_precision = decimal_precision
        self.decimal_scale = decimal_scale
        self.metadata = MetaData()
        self.column_types: Dict[str, Dict[str, str]] = {}
        self.rows: Dict[str, List[Dict[str, Any]]] = {}

    def _column_type(self, sql_type: str):
        if sql_type == TYPE_INTEGER:
            return INTEGER()
        if sql_type == TYPE_DECIMAL:
            return DECIMAL(self.decimal_precision, self.decimal_scale)
        if sql_type == TYPE_BOOLEAN:
            return SMALLINT()
        if sql_type == TYPE_DATE:
            return DATE()
        if sql_type == TYPE_TIMESTAMP:
            return TIMESTAMP()
        return VARCHAR(self.varchar_length)

    def add_relation(self, relation: Any) -> Optional[Table]:
        """Register a decomposed relation; relations without rows are not materialized."""
        table_name = to_sql_identifier(relation.name)
        if not relation.data:
            return None
        column_types = infer_column_types(relation.data)
        primary_keys = [to_sql_identifier(pk) for pk in relation.primary_keys]
        for pk in primary_keys:
            if pk not in column_types:
                raise ValueError(f"Primary key column {pk} not found in relation {table_name}")

        columns = [
            Column(_ident(name), self._column_type(sql_type), nullable=name not in primary_keys)
            for name, sql_type in column_types.items()
        ]
        constraints = []
        if primary_keys:
            constraints.append(PrimaryKeyConstraint(*primary_keys, name=_ident(f"PK_{table_name}")))
        for local_column, reference in relation.foreign_keys.items():
            fk_column = to_sql_identifier(local_column)
            if fk_column not in column_types:
                raise ValueError(f"Foreign key column {fk_column} not found in relation {table_name}")
            ref_table, ref_column = parse_reference(reference)
            constraints.append(
                ForeignKeyConstraint(
                    [fk_column],
                    [f"{ref_table}.{ref_column}"],
                    name=_ident(f"FK_{table_name}_{fk_column}"),
                )
            )

        table = Table(_ident(table_name), self.metadata, *columns, *constraints)
        self.column_types[table_name] = column_types
        self.rows[table_name] = list(relation.data)
        return table

    def _insert_statements(self, table: Table) -> List[str]:
        column_types = self.column_types[table.name]
        statements = []
        for row in self.rows[table.name]:
            by_identifier = {to_sql_identifier(column): value for column, value in row.items()}
            values = {
                name: coerce_value(by_identifier.get(name), sql_type)
                for name, sql_type in column_types.items()
            }
            stmt = insert(table).values(values)
            compiled = stmt.compile(dialect=self.dialect, compile_kwargs={"literal_binds": True})
            statements.append(f"{compiled};")
        return statements

    def render(self) -> str:
        lines: List[str] = []
        # sorted_tables emits referenced tables before the tables pointing at them.
        for table in self.metadata.sorted_tables:
            ddl = str(CreateTable(table).compile(dialect=self.dialect)).strip()
            lines.append(f"-- Relation: {table.name}")
            lines.append(f"{ddl};")
            lines.append("")
            lines.extend(self._insert_statements(table))
            lines.append("")
        return "\n".join(lines)


def generate_sql_script(relations: Sequence[Any], dialect: Optional[str] = None, **type_options: int) -> str:
    """Render CREATE TABLE and INSERT statements for every relation of one run."""
    generator = SqlScriptGenerator(dialect=dialect, **type_options)
    empty: List[str] = []
    for relation in relations:
        if generator.add_relation(relation) is None:
            empty.append(to_sql_identifier(relation.name))
    if not generator.metadata.tables:
        return "-- No data to generate SQL for.\n"
    script = generator.render()
    for name in empty:
        script += f"-- No data to generate SQL for relation {name}.\n"
    return script
