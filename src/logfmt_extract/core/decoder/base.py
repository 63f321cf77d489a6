"""Decoder interfaces and configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Protocol

from ..models import LogfmtRecord, ValuelessKeyPolicy

BARE_KEYS_ENV = "LOGFMT_EXTRACT_BARE_KEYS"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


class RecordParser(Protocol):
    """Parser interface: return LogfmtRecord if line holds logfmt, else None."""

    def parse(self, line_no: int, line: str) -> LogfmtRecord | None:
        """Parse a log line into a LogfmtRecord if recognized."""
        ...


@dataclass(frozen=True, slots=True)
class DecoderConfig:
    """Decoding options."""

    policy: ValuelessKeyPolicy = ValuelessKeyPolicy.REQUIRE_EQUALS


def resolve_decoder_config(cfg: DecoderConfig | None = None) -> DecoderConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = DecoderConfig()

    env = os.getenv(BARE_KEYS_ENV)
    if env is None or env == "":
        return cfg

    value = env.strip().lower()
    if value in _TRUE:
        policy = ValuelessKeyPolicy.ALLOW_BARE
    elif value in _FALSE:
        policy = ValuelessKeyPolicy.REQUIRE_EQUALS
    else:
        raise ValueError(f"{BARE_KEYS_ENV} must be one of: {', '.join(_TRUE + _FALSE)}")

    if policy is cfg.policy:
        return cfg
    return replace(cfg, policy=policy)
