"""
Cross-encoder equivalence checks.

verify() builds the same logical input through every requested backend and
compression strategy, fingerprints each buffer, and proves that:

- repeated builds of one target are byte-identical (determinism),
- every Store target agrees on one fingerprint, whichever backend built it,
- every buffer, compressed or not, decodes back to the exact input content
  with a stored CRC that an independent CRC routine reproduces.

A failure of any of these raises Divergence; nothing is retried since the
inputs are fixed.
"""

from __future__ import annotations

import io
import zipfile
import zlib
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .assembler import assemble
from .codec import CompressionStrategy, Store
from .constants import DEFAULT_ARCHIVE_NAME, DEFAULT_FINGERPRINT, DEFAULT_RUNS
from .crc import crc32_portable, fingerprint
from .dostime import ArchiveTimestamp
from .errors import Divergence
from .records import InputEntry
from .reference import assemble_reference


STATUS_MATCH = "match"
STATUS_STRUCTURAL_MATCH = "structural-match"

Builder = Callable[[Sequence[InputEntry], ArchiveTimestamp, CompressionStrategy], bytes]

BACKENDS: Dict[str, Builder] = {
    "native": assemble,
    "zipfile": assemble_reference,
}


@dataclass(frozen=True)
class Artifact:
    name: str
    data: bytes


@dataclass
class StrategyRecord:
    name: str
    strategy: str
    backend: str
    fingerprint: str
    byte_length: int
    status: str


@dataclass
class VerificationReport:
    algorithm: str
    records: List[StrategyRecord] = field(default_factory=list)

    def by_name(self, name: str) -> StrategyRecord:
        for r in self.records:
            if r.name == name:
                return r
        raise KeyError(name)

    def to_dict(self) -> Dict:
        return {"algorithm": self.algorithm, "records": [asdict(r) for r in self.records]}

    def format_lines(self) -> List[str]:
        return [
            f"{r.name}\t{r.status}\t{r.byte_length}\t{self.algorithm}:{r.fingerprint}"
            for r in self.records
        ]


def _check_structure(name: str, buf: bytes, entries: Sequence[InputEntry]) -> None:
    """Decode buf with the standard zipfile reader and compare to the input."""
    try:
        with zipfile.ZipFile(io.BytesIO(buf), "r") as zf:
            infos = zf.infolist()
            names = [i.filename for i in infos]
            expected = [e.path for e in entries]
            if names != expected:
                raise Divergence(name, "input", f"entry order {names} != {expected}")
            for info, e in zip(infos, entries):
                data = zf.read(info)
                if data != e.content:
                    raise Divergence(name, "input", f"content of {e.path} differs after decoding")
                if info.CRC != crc32_portable(e.content):
                    raise Divergence(name, "input", f"stored CRC of {e.path} is wrong")
    except (zipfile.BadZipFile, EOFError, zlib.error) as exc:
        raise Divergence(name, "input", f"archive does not decode: {exc}") from None


def _targets(strategies: Iterable[CompressionStrategy], backends: Iterable[str]):
    for backend in backends:
        if backend not in BACKENDS:
            raise ValueError(f"unknown backend: {backend}")
        for strategy in strategies:
            yield f"{backend}-{strategy.label}", backend, strategy


def verify(
    entries: Sequence[InputEntry],
    timestamp: ArchiveTimestamp,
    strategies: Iterable[CompressionStrategy],
    *,
    backends: Sequence[str] = ("native",),
    runs: int = DEFAULT_RUNS,
    algorithm: str = DEFAULT_FINGERPRINT,
    sink: Optional[Callable[[Artifact], None]] = None,
    prefix: str = DEFAULT_ARCHIVE_NAME,
) -> VerificationReport:
    """Build every backend x strategy target and compare the results.

    Args:
        entries: Input files in archive order.
        timestamp: Timestamp applied to every entry.
        strategies: Compression strategies to exercise.
        backends: Encoder implementations to exercise ("native", "zipfile").
        runs: Builds per target; all must be byte-identical.
        algorithm: Fingerprint hash name.
        sink: Receives one Artifact per target, named
            "{prefix}_{backend}_{label}.zip", where label is "deflate-N"
            for a non-default deflate level.
        prefix: Artifact name prefix.

    Returns:
        A VerificationReport with one record per target.

    Raises:
        Divergence: when a determinism or content check fails.
    """
    if runs < 1:
        raise ValueError("runs must be >= 1")
    entries = list(entries)
    strategies = list(dict.fromkeys(strategies))
    if not strategies:
        raise ValueError("at least one strategy is required")
    report = VerificationReport(algorithm=algorithm)
    store_anchor: Optional[StrategyRecord] = None

    for name, backend, strategy in _targets(strategies, backends):
        build = BACKENDS[backend]
        buf = build(entries, timestamp, strategy)
        fp = fingerprint(buf, algorithm)
        for _ in range(runs - 1):
            again = fingerprint(build(entries, timestamp, strategy), algorithm)
            if again != fp:
                raise Divergence(name, name, f"repeated build changed fingerprint {fp} -> {again}")
        _check_structure(name, buf, entries)

        if isinstance(strategy, Store):
            if store_anchor is not None and store_anchor.fingerprint != fp:
                raise Divergence(
                    store_anchor.name,
                    name,
                    f"stored archives differ ({store_anchor.fingerprint} != {fp})",
                )
            status = STATUS_MATCH
        else:
            status = STATUS_STRUCTURAL_MATCH

        record = StrategyRecord(
            name=name,
            strategy=strategy.name,
            backend=backend,
            fingerprint=fp,
            byte_length=len(buf),
            status=status,
        )
        if isinstance(strategy, Store) and store_anchor is None:
            store_anchor = record
        report.records.append(record)
        if sink is not None:
            sink(Artifact(name=f"{prefix}_{backend}_{strategy.label}.zip", data=buf))
    return report
