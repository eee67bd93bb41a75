from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .codec import CompressionStrategy
from .constants import (
    CENTRAL_HEADER_SIGNATURE,
    END_OF_CENTRAL_DIR_SIGNATURE,
    EXTERNAL_ATTR,
    FLAG_UTF8_NAME,
    LOCAL_HEADER_SIGNATURE,
    MAX_UINT16,
    MAX_UINT32,
    VERSION_MADE_BY,
    VERSION_NEEDED,
)
from .crc import crc32
from .dostime import PackedDateTime
from .errors import ArchiveTooLarge
from .pathutil import check_path


# Local file header (fixed 30 bytes), little endian:
#  signature u32, version_needed u16, flags u16, method u16,
#  mod_time u16, mod_date u16, crc32 u32, compressed_size u32,
#  uncompressed_size u32, name_len u16, extra_len u16
_LOCAL_HDR_STRUCT = struct.Struct("<IHHHHHIIIHH")

# Central directory header (fixed 46 bytes):
#  signature u32, version_made_by u16, version_needed u16, flags u16,
#  method u16, mod_time u16, mod_date u16, crc32 u32, compressed_size u32,
#  uncompressed_size u32, name_len u16, extra_len u16, comment_len u16,
#  disk_start u16, internal_attr u16, external_attr u32, local_offset u32
_CENTRAL_HDR_STRUCT = struct.Struct("<IHHHHHHIIIHHHHHII")

# End of central directory (fixed 22 bytes):
#  signature u32, disk u16, cd_disk u16, disk_entries u16, total_entries u16,
#  cd_size u32, cd_offset u32, comment_len u16
_EOCD_STRUCT = struct.Struct("<IHHHHIIH")

LOCAL_HEADER_SIZE = _LOCAL_HDR_STRUCT.size
CENTRAL_HEADER_SIZE = _CENTRAL_HDR_STRUCT.size
EOCD_SIZE = _EOCD_STRUCT.size


@dataclass(frozen=True)
class InputEntry:
    path: str
    content: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.content, bytes):
            object.__setattr__(self, "content", bytes(self.content))


@dataclass(frozen=True)
class EncodedEntry:
    path: str
    packed: PackedDateTime
    crc32: int
    uncompressed_size: int
    compressed_size: int
    method: int
    flags: int = 0
    local_header_offset: int = 0


@dataclass(frozen=True)
class EncodedRecord:
    local_record: bytes
    entry: EncodedEntry


def entries_from_pairs(pairs: Iterable[Tuple[str, bytes]]) -> List[InputEntry]:
    return [InputEntry(path, content) for path, content in pairs]


def encode_entry(entry: InputEntry, packed: PackedDateTime, strategy: CompressionStrategy) -> EncodedRecord:
    """Encode one file as a local header record plus its central directory fields.

    The returned entry carries offset 0; the assembler places it.
    """
    name = check_path(entry.path)
    flags = 0 if entry.path.isascii() else FLAG_UTF8_NAME
    size = len(entry.content)
    if size > MAX_UINT32:
        raise ArchiveTooLarge(f"{entry.path}: {size} bytes needs ZIP64")
    crc = crc32(entry.content)
    method, payload = strategy.compress(entry.content)
    header = _LOCAL_HDR_STRUCT.pack(
        LOCAL_HEADER_SIGNATURE,
        VERSION_NEEDED,
        flags,
        method,
        packed.time,
        packed.date,
        crc,
        len(payload),
        size,
        len(name),
        0,  # extra_len
    )
    encoded = EncodedEntry(
        path=entry.path,
        packed=packed,
        crc32=crc,
        uncompressed_size=size,
        compressed_size=len(payload),
        method=method,
        flags=flags,
    )
    return EncodedRecord(local_record=header + name + payload, entry=encoded)


def pack_central_record(entry: EncodedEntry) -> bytes:
    name = entry.path.encode("utf-8")
    return _CENTRAL_HDR_STRUCT.pack(
        CENTRAL_HEADER_SIGNATURE,
        VERSION_MADE_BY,
        VERSION_NEEDED,
        entry.flags,
        entry.method,
        entry.packed.time,
        entry.packed.date,
        entry.crc32,
        entry.compressed_size,
        entry.uncompressed_size,
        len(name),
        0,  # extra_len
        0,  # comment_len
        0,  # disk_start
        0,  # internal_attr
        EXTERNAL_ATTR,
        entry.local_header_offset,
    ) + name


def pack_end_of_central_directory(count: int, cd_size: int, cd_offset: int, comment: bytes = b"") -> bytes:
    if count > MAX_UINT16:
        raise ArchiveTooLarge(f"{count} entries needs ZIP64")
    if cd_size > MAX_UINT32 or cd_offset > MAX_UINT32:
        raise ArchiveTooLarge("central directory beyond 4 GiB needs ZIP64")
    if len(comment) > MAX_UINT16:
        raise ValueError("archive comment longer than 65535 bytes")
    return _EOCD_STRUCT.pack(
        END_OF_CENTRAL_DIR_SIGNATURE,
        0,
        0,
        count,
        count,
        cd_size,
        cd_offset,
        len(comment),
    ) + comment


def parse_end_of_central_directory(buf: bytes) -> Tuple[int, int, int, bytes]:
    """
    Returns: (entry_count, cd_size, cd_offset, comment)

    Scans backwards for the signature so a trailing comment is tolerated.
    """
    sig = struct.pack("<I", END_OF_CENTRAL_DIR_SIGNATURE)
    pos = buf.rfind(sig, max(0, len(buf) - EOCD_SIZE - MAX_UINT16))
    if pos < 0 or pos + EOCD_SIZE > len(buf):
        raise ValueError("End of central directory record not found")
    _sig, _disk, _cd_disk, _n_disk, total, cd_size, cd_offset, clen = _EOCD_STRUCT.unpack_from(buf, pos)
    comment = buf[pos + EOCD_SIZE : pos + EOCD_SIZE + clen]
    return total, cd_size, cd_offset, comment


def parse_central_directory(buf: bytes) -> List[EncodedEntry]:
    total, cd_size, cd_offset, _comment = parse_end_of_central_directory(buf)
    if cd_offset + cd_size > len(buf):
        raise ValueError("Central directory extends past end of buffer")
    out: List[EncodedEntry] = []
    pos = cd_offset
    for _ in range(total):
        if pos + CENTRAL_HEADER_SIZE > cd_offset + cd_size:
            raise ValueError("Central directory truncated")
        (
            sig,
            _made_by,
            _needed,
            flags,
            method,
            mtime,
            mdate,
            crc,
            csize,
            usize,
            name_len,
            extra_len,
            comment_len,
            _disk,
            _iattr,
            _eattr,
            offset,
        ) = _CENTRAL_HDR_STRUCT.unpack_from(buf, pos)
        if sig != CENTRAL_HEADER_SIGNATURE:
            raise ValueError(f"Bad central directory signature at offset {pos}")
        pos += CENTRAL_HEADER_SIZE
        name = buf[pos : pos + name_len]
        pos += name_len + extra_len + comment_len
        out.append(
            EncodedEntry(
                path=name.decode("utf-8" if flags & FLAG_UTF8_NAME else "cp437"),
                packed=PackedDateTime(date=mdate, time=mtime),
                crc32=crc,
                uncompressed_size=usize,
                compressed_size=csize,
                method=method,
                flags=flags,
                local_header_offset=offset,
            )
        )
    return out
