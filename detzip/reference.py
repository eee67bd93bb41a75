"""
Second, independent ZIP encoder built on the standard library zipfile writer.

It is configured with the same metadata the native encoder writes (Unix
host, regular 0644 file attributes, no extra fields) so that Store output
is expected to match the native encoder byte for byte. Deflate output is
only expected to decode to the same content.
"""

from __future__ import annotations

import io
import zipfile
from typing import Sequence

from .assembler import check_unique_paths
from .codec import CompressionStrategy, Deflate, Store
from .constants import CREATOR_UNIX, EXTERNAL_ATTR
from .dostime import ArchiveTimestamp
from .errors import EmptyArchive
from .pathutil import check_path
from .records import InputEntry


def _zip_method(strategy: CompressionStrategy) -> int:
    if isinstance(strategy, Store):
        return zipfile.ZIP_STORED
    if isinstance(strategy, Deflate):
        return zipfile.ZIP_DEFLATED
    raise ValueError(f"zipfile backend does not support strategy: {strategy.name}")


def assemble_reference(
    entries: Sequence[InputEntry],
    timestamp: ArchiveTimestamp,
    strategy: CompressionStrategy,
    *,
    require_entries: bool = False,
) -> bytes:
    entries = list(entries)
    if not entries and require_entries:
        raise EmptyArchive("Archive would contain no entries")
    check_unique_paths(entries)
    for e in entries:
        check_path(e.path)

    method = _zip_method(strategy)
    level = strategy.level if isinstance(strategy, Deflate) else None
    out = io.BytesIO()
    with zipfile.ZipFile(out, "w", compression=method, allowZip64=False) as zf:
        for e in entries:
            zi = zipfile.ZipInfo(filename=e.path, date_time=timestamp.as_tuple())
            zi.compress_type = method
            zi.create_system = CREATOR_UNIX
            zi.external_attr = EXTERNAL_ATTR
            zf.writestr(zi, e.content, compresslevel=level)
    return out.getvalue()
