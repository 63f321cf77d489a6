"""Core data models for logfmt extraction."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

Fields = dict[str, str | None]


class ValueKind(str, Enum):
    """How a value was written in the source line."""

    ABSENT = "absent"
    BARE = "bare"
    QUOTED = "quoted"


class ValuelessKeyPolicy(str, Enum):
    """What to do with a bare word (no `=`) after the first pair."""

    REQUIRE_EQUALS = "require_equals"  # stop tokenizing at the bare word
    ALLOW_BARE = "allow_bare"  # record the word as a key with no value


@dataclass(frozen=True, slots=True)
class Value:
    """Tagged pair value; `text` is None only for ABSENT."""

    kind: ValueKind
    text: str | None = None

    def collapse(self) -> str | None:
        return self.text if self.kind is not ValueKind.ABSENT else None


ABSENT = Value(ValueKind.ABSENT)


@dataclass(frozen=True, slots=True)
class Pair:
    """One decoded key/value unit."""

    key: str
    value: Value


@dataclass(frozen=True, slots=True)
class LogfmtRecord:
    """Decoded fields of one log line."""

    line_no: int
    fields: Fields
    raw: str | None = None  # original decoded line

    @property
    def keys(self) -> list[str]:
        return list(self.fields)
