from __future__ import annotations

import zlib
from dataclasses import dataclass
from typing import Tuple

from .constants import DEFAULT_DEFLATE_LEVEL, METHOD_DEFLATE, METHOD_STORE


@dataclass(frozen=True)
class CompressionStrategy:
    """How entry content is encoded. Subclasses pick the ZIP method."""

    name = "abstract"
    method = -1

    @property
    def label(self) -> str:
        """Name that tells apart two configurations of one strategy."""
        return self.name

    def compress(self, data: bytes) -> Tuple[int, bytes]:
        """Return (method code actually used, payload bytes)."""
        raise NotImplementedError


@dataclass(frozen=True)
class Store(CompressionStrategy):
    name = "store"
    method = METHOD_STORE

    def compress(self, data: bytes) -> Tuple[int, bytes]:
        return METHOD_STORE, bytes(data)


@dataclass(frozen=True)
class Deflate(CompressionStrategy):
    level: int = DEFAULT_DEFLATE_LEVEL

    name = "deflate"
    method = METHOD_DEFLATE

    def __post_init__(self) -> None:
        if not 0 <= self.level <= 9:
            raise ValueError(f"deflate level must be 0..9, got {self.level}")

    @property
    def label(self) -> str:
        if self.level == DEFAULT_DEFLATE_LEVEL:
            return self.name
        return f"{self.name}-{self.level}"

    def compress(self, data: bytes) -> Tuple[int, bytes]:
        # Raw deflate stream (negative wbits: no zlib header or trailer)
        co = zlib.compressobj(self.level, zlib.DEFLATED, -15)
        packed = co.compress(data) + co.flush()
        if len(packed) < len(data):
            return METHOD_DEFLATE, packed
        return METHOD_STORE, bytes(data)


_STRATEGIES = {
    "store": Store,
    "deflate": Deflate,
}

STRATEGY_NAMES = tuple(_STRATEGIES)


def get_strategy(name: str) -> CompressionStrategy:
    try:
        return _STRATEGIES[name.lower()]()
    except KeyError:
        raise ValueError(f"unknown compression strategy: {name}") from None
