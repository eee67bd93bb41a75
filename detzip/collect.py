from __future__ import annotations

import unicodedata
from pathlib import Path
from typing import Dict, Iterable, List

from .records import InputEntry


def _arc_path(root: Path, p: Path) -> str:
    rel = p.relative_to(root).as_posix()
    return unicodedata.normalize("NFC", rel)


def collect_entries(root: str | Path, patterns: Iterable[str]) -> List[InputEntry]:
    """Read files matching glob patterns under root, sorted by archive path.

    Args:
        root: Directory the patterns and archive paths are relative to.
        patterns: Glob patterns such as "*.ts" or "src/**/*.py".

    Returns:
        InputEntry values in lexicographic path order, one per file.
    """
    patterns = list(patterns)
    for pattern in patterns:
        if not pattern or Path(pattern).is_absolute() or Path(pattern).anchor:
            raise ValueError(f"Glob pattern must be relative to the input root: {pattern!r}")
    base = Path(root)
    if not base.is_dir():
        raise FileNotFoundError(f"Input root not found: {root}")
    base = base.resolve()
    found: Dict[str, Path] = {}
    for pattern in patterns:
        for p in base.glob(pattern):
            if p.is_symlink() or not p.is_file():
                continue
            found.setdefault(_arc_path(base, p), p)
    if not found:
        raise ValueError(f"No files under {root} match {patterns}")
    return [InputEntry(arc, found[arc].read_bytes()) for arc in sorted(found)]
