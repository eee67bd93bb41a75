"""
CRC-32 (IEEE 802.3, reflected) for entry headers, plus archive fingerprints.

crc32() is the zlib routine used by the encoder. crc32_portable() is a
separate table-driven implementation so that verification does not check
the encoder's checksums with the encoder's own code.
"""

import zlib

from Cryptodome.Hash import BLAKE2s, MD5, SHA256, SHA512


_POLY = 0xEDB88320


def _table_entry(n: int) -> int:
    # eight shift/xor rounds per byte value, LSB first
    for _ in range(8):
        n = (n >> 1) ^ (_POLY if n & 1 else 0)
    return n


_TABLE = tuple(_table_entry(n) for n in range(256))


def crc32(data: bytes, crc: int = 0) -> int:
    return zlib.crc32(data, crc) & 0xFFFFFFFF


def crc32_portable(data: bytes, crc: int = 0) -> int:
    """Byte-at-a-time CRC-32. Slow; used only to cross-check stored CRCs."""
    c = (~crc) & 0xFFFFFFFF
    for b in data:
        c = _TABLE[(c ^ b) & 0xFF] ^ (c >> 8)
    return (~c) & 0xFFFFFFFF


_HASHES = {
    "sha256": lambda data: SHA256.new(data),
    "sha512": lambda data: SHA512.new(data),
    "blake2s": lambda data: BLAKE2s.new(data=data, digest_bytes=32),
    "md5": lambda data: MD5.new(data),
}

FINGERPRINT_ALGORITHMS = tuple(sorted(_HASHES))


def fingerprint(data: bytes, algorithm: str = "sha256") -> str:
    try:
        factory = _HASHES[algorithm.lower()]
    except KeyError:
        raise ValueError(f"unsupported fingerprint algorithm: {algorithm}") from None
    return factory(data).hexdigest()
