"""Postgres write-ahead log positions."""

from __future__ import annotations

import re
from dataclasses import dataclass

_HEX = re.compile(r"[0-9A-Fa-f]+")
_U32_MAX = 0xFFFFFFFF
_U64_LIMIT = 1 << 64


@dataclass(frozen=True, order=True)
class PgLsn:
    """A log sequence number, written as two hexadecimal halves ``HI/LO``."""

    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value < _U64_LIMIT:
            raise ValueError(f"LSN out of range: {self.value}")

    @classmethod
    def parse(cls, text: str) -> PgLsn:
        """Parse the textual ``HI/LO`` form; raises ValueError if malformed."""
        high, sep, low = text.partition("/")
        if not sep:
            raise ValueError(f"invalid LSN {text!r}: missing '/'")
        halves = []
        for part in (high, low):
            if not _HEX.fullmatch(part):
                raise ValueError(f"invalid LSN {text!r}")
            half = int(part, 16)
            if half > _U32_MAX:
                raise ValueError(f"invalid LSN {text!r}: half out of range")
            halves.append(half)
        return cls((halves[0] << 32) | halves[1])

    def __str__(self) -> str:
        return f"{self.value >> 32:X}/{self.value & _U32_MAX:X}"

    def __int__(self) -> int:
        return self.value