"""Projections of decoded fields: objects, key lists and typed records.

These sit on top of `decode` and never change what it returns; the decoder
hands out text or None, and any typing happens here.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import AwareDatetime, BaseModel, Field, Json, TypeAdapter, ValidationError, field_validator

from .decoder import decode
from .models import Fields, ValuelessKeyPolicy

ColumnType = Literal[
    "text",
    "int",
    "bigint",
    "integer",
    "float",
    "real",
    "double",
    "numeric",
    "bool",
    "boolean",
    "date",
    "timestamp",
    "timestamptz",
    "json",
]

_TYPE_ALIASES = {
    "str": "text",
    "string": "text",
    "varchar": "text",
    "character varying": "text",
    "smallint": "int",
    "double precision": "double",
    "decimal": "numeric",
    "timestamp without time zone": "timestamp",
    "timestamp with time zone": "timestamptz",
    "jsonb": "json",
}

_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    "text": TypeAdapter(str),
    "int": TypeAdapter(int),
    "bigint": TypeAdapter(int),
    "integer": TypeAdapter(int),
    "float": TypeAdapter(float),
    "real": TypeAdapter(float),
    "double": TypeAdapter(float),
    "numeric": TypeAdapter(Decimal),
    "bool": TypeAdapter(bool),
    "boolean": TypeAdapter(bool),
    "date": TypeAdapter(date),
    "timestamp": TypeAdapter(datetime),
    "timestamptz": TypeAdapter(AwareDatetime),
    "json": TypeAdapter(Json[Any]),
}

_COLUMN_RE = re.compile(r'^\s*(?:"(?P<quoted>[^"]+)"|(?P<name>[^\s"]+))\s+(?P<type>\S.*?)\s*$')


class RecordColumn(BaseModel):
    """One named, typed output column of a fixed-schema projection."""

    name: str = Field(min_length=1, description="Logfmt key to look up.")
    type: ColumnType = Field(default="text", description="Declared output type.")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            name = " ".join(v.lower().split())
            return _TYPE_ALIASES.get(name, name)
        return v


class RecordConversionError(ValueError):
    """A present value could not be converted to its column type."""

    def __init__(self, column: RecordColumn, value: str, cause: ValidationError):
        self.column = column
        self.value = value
        super().__init__(
            f"Column '{column.name}' ({column.type}): cannot convert {value!r}: "
            f"{cause.errors()[0]['msg']}"
        )


def parse_columns(spec: str) -> list[RecordColumn]:
    """Parse a column definition list such as `source text, status int`."""
    out: list[RecordColumn] = []
    for part in spec.split(","):
        if not part.strip():
            continue
        m = _COLUMN_RE.match(part)
        if not m:
            raise ValueError(
                f"Invalid column definition '{part.strip()}'. "
                "Expected '<name> <type>' (e.g., 'status int')."
            )
        name = m.group("quoted") or m.group("name")
        try:
            out.append(RecordColumn(name=name, type=m.group("type")))
        except ValidationError as e:
            raise ValueError(f"Invalid column definition '{part.strip()}': {e.errors()[0]['msg']}") from e
    if not out:
        raise ValueError("At least one column must be provided")
    return out


def to_object(fields: Fields | None) -> dict[str, str | None] | None:
    """Return a plain dict where absent values are None (JSON null)."""
    if fields is None:
        return None
    return dict(fields)


def to_json(
    line: str,
    *,
    policy: ValuelessKeyPolicy = ValuelessKeyPolicy.REQUIRE_EQUALS,
) -> str | None:
    """Decode a line and serialize it as a JSON object, or None."""
    obj = to_object(decode(line, policy=policy))
    if obj is None:
        return None
    return json.dumps(obj, ensure_ascii=False)


def iter_keys(
    line: str,
    *,
    policy: ValuelessKeyPolicy = ValuelessKeyPolicy.REQUIRE_EQUALS,
) -> Iterator[str]:
    """Yield keys in first-seen order; nothing for non-logfmt lines."""
    fields = decode(line, policy=policy)
    if fields is None:
        return
    yield from fields


def keys_array(
    line: str,
    *,
    policy: ValuelessKeyPolicy = ValuelessKeyPolicy.REQUIRE_EQUALS,
) -> list[str] | None:
    """Return keys in first-seen order, or None for non-logfmt lines."""
    fields = decode(line, policy=policy)
    if fields is None:
        return None
    return list(fields)


def convert_value(column: RecordColumn, value: str | None) -> Any:
    """Convert one value to the column type; None stays None."""
    if value is None:
        return None
    try:
        return _ADAPTERS[column.type].validate_python(value)
    except ValidationError as e:
        raise RecordConversionError(column, value, e) from e


def project_fields(fields: Fields | None, columns: Sequence[RecordColumn]) -> tuple[Any, ...]:
    """Look up each column in decoded fields and convert it."""
    fields = fields or {}
    return tuple(convert_value(col, fields.get(col.name)) for col in columns)


def to_record(
    line: str,
    columns: Sequence[RecordColumn] | str,
    *,
    policy: ValuelessKeyPolicy = ValuelessKeyPolicy.REQUIRE_EQUALS,
) -> tuple[Any, ...]:
    """Decode a line and project it onto a fixed list of columns.

    Missing keys, absent values and non-logfmt lines all yield None.
    """
    if isinstance(columns, str):
        columns = parse_columns(columns)
    return project_fields(decode(line, policy=policy), columns)
