from __future__ import annotations

from .constants import MAX_PATH_BYTES
from .errors import InvalidPath, PathTooLong


def check_path(p: str) -> bytes:
    """Validate an archive path and return its UTF-8 encoding.

    Rules:
    - Forward-slash separators only (no backslashes)
    - No NUL bytes
    - Not absolute, no trailing slash (directories are not entries)
    - No empty, '.' or '..' segments
    - At most 65535 bytes once encoded
    """
    if not isinstance(p, str) or not p:
        raise InvalidPath("Archive path must be a non-empty string")
    if "\x00" in p:
        raise InvalidPath(f"Path contains NUL byte: {p!r}")
    if "\\" in p:
        raise InvalidPath(f"Path contains backslash (use / separator): {p}")
    if p.startswith("/"):
        raise InvalidPath(f"Path must be relative: {p}")
    if p.endswith("/"):
        raise InvalidPath(f"Path names a directory: {p}")
    for q in p.split("/"):
        if q in ("", ".", ".."):
            raise InvalidPath(f"Path has an empty, '.' or '..' segment: {p}")
    try:
        raw = p.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidPath(f"Path is not encodable as UTF-8: {p!r}") from None
    if len(raw) > MAX_PATH_BYTES:
        raise PathTooLong(f"Path is {len(raw)} bytes; limit is {MAX_PATH_BYTES}")
    return raw
