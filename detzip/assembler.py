from __future__ import annotations

import concurrent.futures as _fut
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Union

from .codec import CompressionStrategy
from .constants import MAX_ENTRIES, MAX_UINT32
from .dostime import ArchiveTimestamp, PackedDateTime
from .errors import ArchiveTooLarge, DuplicatePath, EmptyArchive
from .records import (
    EncodedEntry,
    EncodedRecord,
    InputEntry,
    encode_entry,
    pack_central_record,
    pack_end_of_central_directory,
    parse_central_directory,
)


def check_unique_paths(entries: Iterable[InputEntry]) -> None:
    seen = set()
    for e in entries:
        if e.path in seen:
            raise DuplicatePath(e.path)
        seen.add(e.path)


def _encode_all(
    entries: Sequence[InputEntry],
    packed: PackedDateTime,
    strategy: CompressionStrategy,
    workers: Optional[int],
) -> List[EncodedRecord]:
    if not workers or workers <= 1 or len(entries) <= 1:
        return [encode_entry(e, packed, strategy) for e in entries]
    # Executor.map yields in submission order regardless of completion order
    with _fut.ThreadPoolExecutor(max_workers=workers) as ex:
        return list(ex.map(lambda e: encode_entry(e, packed, strategy), entries))


def assemble(
    entries: Sequence[InputEntry],
    timestamp: Union[ArchiveTimestamp, PackedDateTime],
    strategy: CompressionStrategy,
    *,
    require_entries: bool = False,
    comment: bytes = b"",
    workers: Optional[int] = None,
) -> bytes:
    """Build a complete ZIP archive in memory.

    Entries are written in the order given; sort them first if the order of
    the source is not already stable. Every entry carries the same packed
    timestamp. The call either returns the whole buffer or raises.

    Args:
        entries: Files to store, in archive order.
        timestamp: Modification time applied to every entry.
        strategy: Store or Deflate.
        require_entries: Raise EmptyArchive instead of emitting an
            entry-less archive.
        comment: Optional archive comment (raw bytes).
        workers: When > 1, compress entries on that many threads.
    """
    entries = list(entries)
    if not entries and require_entries:
        raise EmptyArchive("Archive would contain no entries")
    if len(entries) > MAX_ENTRIES:
        raise ArchiveTooLarge(f"{len(entries)} entries needs ZIP64")
    check_unique_paths(entries)

    packed = timestamp.pack() if isinstance(timestamp, ArchiveTimestamp) else timestamp
    records = _encode_all(entries, packed, strategy, workers)

    buf = bytearray()
    placed: List[EncodedEntry] = []
    for rec in records:
        offset = len(buf)
        if offset > MAX_UINT32:
            raise ArchiveTooLarge(f"{rec.entry.path}: local header beyond 4 GiB needs ZIP64")
        placed.append(replace(rec.entry, local_header_offset=offset))
        buf += rec.local_record

    cd_offset = len(buf)
    for e in placed:
        buf += pack_central_record(e)
    cd_size = len(buf) - cd_offset
    buf += pack_end_of_central_directory(len(placed), cd_size, cd_offset, comment)
    return bytes(buf)


def list_entries(buf: bytes) -> List[EncodedEntry]:
    """Central directory view of an assembled buffer."""
    return parse_central_directory(buf)
