"""Ordered aggregation of decoded pairs."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import Fields, Pair


@dataclass(slots=True)
class Aggregator:
    """Collect pairs; a repeated key keeps its first position and takes the last value."""

    fields: Fields = field(default_factory=dict)

    def add(self, pair: Pair) -> None:
        self.fields[pair.key] = pair.value.collapse()

    def result(self) -> Fields | None:
        """Return the mapping, or None when nothing was added."""
        return self.fields or None
