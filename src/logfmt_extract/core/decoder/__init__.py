"""Logfmt decoding.

Scanner -> tokenizer -> value decoder -> aggregator, composed by `decode`.
"""

from __future__ import annotations

from .aggregator import Aggregator
from .base import DecoderConfig, RecordParser, resolve_decoder_config
from .logfmt import LogfmtDecoder, decode
from .scanner import scan_prefix
from .tokenizer import iter_pairs
from .values import decode_quoted, decode_value

__all__ = [
    "Aggregator",
    "DecoderConfig",
    "LogfmtDecoder",
    "RecordParser",
    "decode",
    "decode_quoted",
    "decode_value",
    "iter_pairs",
    "resolve_decoder_config",
    "scan_prefix",
]
