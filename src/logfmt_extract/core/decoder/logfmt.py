"""Logfmt decoder entry points."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import Fields, LogfmtRecord, ValuelessKeyPolicy
from .aggregator import Aggregator
from .base import DecoderConfig
from .scanner import scan_prefix
from .tokenizer import iter_pairs


def decode(
    line: str,
    *,
    policy: ValuelessKeyPolicy = ValuelessKeyPolicy.REQUIRE_EQUALS,
) -> Fields | None:
    """Decode the logfmt suffix of a line.

    Anything before the first `key=` token is discarded. Returns None when the
    line holds no logfmt pair at all; otherwise a non-empty dict in first-seen
    key order, where None marks a key without a value.
    """
    start = scan_prefix(line)
    if start is None:
        return None

    agg = Aggregator()
    for pair in iter_pairs(line, start, policy=policy):
        agg.add(pair)
    return agg.result()


@dataclass(frozen=True, slots=True)
class LogfmtDecoder:
    """Decode logfmt lines with a fixed configuration."""

    config: DecoderConfig = field(default_factory=DecoderConfig)

    def decode(self, line: str) -> Fields | None:
        return decode(line, policy=self.config.policy)

    def parse(self, line_no: int, line: str) -> LogfmtRecord | None:
        """Parse a logfmt line into a LogfmtRecord."""
        fields = self.decode(line)
        if fields is None:
            return None
        return LogfmtRecord(line_no=line_no, fields=fields, raw=line)
