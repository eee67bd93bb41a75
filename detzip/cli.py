from __future__ import annotations

import sys
import argparse
import json as _json

from pathlib import Path
from typing import List, Optional

from detzip.assembler import assemble
from detzip.codec import Deflate, STRATEGY_NAMES, Store, get_strategy
from detzip.collect import collect_entries
from detzip.constants import (
    DEFAULT_ARCHIVE_NAME,
    DEFAULT_DEFLATE_LEVEL,
    DEFAULT_FINGERPRINT,
    DEFAULT_RUNS,
)
from detzip.crc import FINGERPRINT_ALGORITHMS, fingerprint
from detzip.dostime import ArchiveTimestamp
from detzip.errors import DetZipError, Divergence
from detzip.verifier import BACKENDS, Artifact, verify


def _strategy(name: str, level: int):
    if name == "deflate":
        return Deflate(level=level)
    return get_strategy(name)


def _write_artifact(outdir: Path, artifact: Artifact) -> Path:
    outdir.mkdir(parents=True, exist_ok=True)
    dst = outdir / artifact.name
    with open(dst, "wb") as fh:
        fh.write(artifact.data)
    return dst


def cmd_build(
    root: str,
    patterns: List[str],
    *,
    date: str,
    method: str = "store",
    level: int = DEFAULT_DEFLATE_LEVEL,
    outdir: str = ".",
    name: str = DEFAULT_ARCHIVE_NAME,
    jobs: int = 1,
) -> Path:
    """Build one archive from files on disk and write it.

    Args:
        root: Directory the patterns and archive paths are relative to.
        patterns: Glob patterns selecting the input files.
        date: ISO-8601 timestamp with explicit offset applied to every entry.
        method: "store" or "deflate".
        outdir: Directory receiving "<name>.zip".
        jobs: Compression threads.
    """
    ts = ArchiveTimestamp.parse(date)
    entries = collect_entries(root, patterns)
    buf = assemble(entries, ts, _strategy(method, level), workers=jobs)
    dst = _write_artifact(Path(outdir), Artifact(name=f"{name}.zip", data=buf))
    print(f"{dst} {fingerprint(buf, DEFAULT_FINGERPRINT)}")
    return dst


def cmd_verify(
    root: str,
    patterns: List[str],
    *,
    date: str,
    strategies: Optional[List[str]] = None,
    backends: Optional[List[str]] = None,
    level: int = DEFAULT_DEFLATE_LEVEL,
    runs: int = DEFAULT_RUNS,
    algorithm: str = DEFAULT_FINGERPRINT,
    outdir: Optional[str] = None,
    name: str = DEFAULT_ARCHIVE_NAME,
    as_json: bool = False,
) -> bool:
    """Build the inputs with every strategy/backend pair and compare.

    Raises Divergence on the first mismatch; prints the report otherwise.
    """
    ts = ArchiveTimestamp.parse(date)
    entries = collect_entries(root, patterns)
    chosen = [_strategy(s, level) for s in (strategies or ["store", "deflate"])]

    written: List[Path] = []
    sink = None
    if outdir:
        out = Path(outdir)

        def sink(artifact: Artifact) -> None:
            written.append(_write_artifact(out, artifact))

    report = verify(
        entries,
        ts,
        chosen,
        backends=backends or ["native"],
        runs=runs,
        algorithm=algorithm,
        sink=sink,
        prefix=name,
    )
    if as_json:
        doc = report.to_dict()
        doc["entries"] = len(entries)
        doc["written"] = [str(p) for p in written]
        print(_json.dumps(doc))
    else:
        for line in report.format_lines():
            print(line)
        for p in written:
            print(f"     wrote: {p}")
        print(f"OK: {len(report.records)} target(s), {len(entries)} file(s)")
    return True


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="detzip", description="Deterministic ZIP builder and cross-encoder verifier")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_build = sub.add_parser("build", help="Build one deterministic archive")
    ap_build.add_argument("root", help="Input root directory")
    ap_build.add_argument("patterns", nargs="+", help="Glob patterns relative to root")
    ap_build.add_argument("--date", required=True, help="Entry timestamp, ISO-8601 with offset (e.g. 1986-01-01T03:00:00Z)")
    ap_build.add_argument("--method", choices=list(STRATEGY_NAMES), default=Store.name, help="Compression strategy (default store)")
    ap_build.add_argument("--level", type=int, default=DEFAULT_DEFLATE_LEVEL, help="Deflate level 0-9 (default 6)")
    ap_build.add_argument("--outdir", default=".", help="Output directory")
    ap_build.add_argument("--name", default=DEFAULT_ARCHIVE_NAME, help="Archive base name (default 'result')")
    ap_build.add_argument("--jobs", "-j", type=int, default=1, help="Compression threads (default 1)")

    ap_verify = sub.add_parser("verify", help="Check that every encoder produces equivalent archives")
    ap_verify.add_argument("root", help="Input root directory")
    ap_verify.add_argument("patterns", nargs="+", help="Glob patterns relative to root")
    ap_verify.add_argument("--date", required=True, help="Entry timestamp, ISO-8601 with offset")
    ap_verify.add_argument(
        "--strategy",
        action="append",
        choices=list(STRATEGY_NAMES),
        help="Strategy to exercise; repeatable (default: store and deflate)",
    )
    ap_verify.add_argument(
        "--backend",
        action="append",
        choices=sorted(BACKENDS),
        help="Encoder to exercise; repeatable (default: native)",
    )
    ap_verify.add_argument("--level", type=int, default=DEFAULT_DEFLATE_LEVEL, help="Deflate level 0-9 (default 6)")
    ap_verify.add_argument("--runs", type=int, default=DEFAULT_RUNS, help="Builds per target (default 2)")
    ap_verify.add_argument("--hash", choices=list(FINGERPRINT_ALGORITHMS), default=DEFAULT_FINGERPRINT, help="Fingerprint algorithm")
    ap_verify.add_argument("--outdir", help="Write every built archive here")
    ap_verify.add_argument("--name", default=DEFAULT_ARCHIVE_NAME, help="Artifact name prefix (default 'result')")
    ap_verify.add_argument("--json", action="store_true", help="Emit JSON report")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "build":
            cmd_build(
                args.root,
                args.patterns,
                date=args.date,
                method=args.method,
                level=args.level,
                outdir=args.outdir,
                name=args.name,
                jobs=args.jobs,
            )
        elif args.cmd == "verify":
            cmd_verify(
                args.root,
                args.patterns,
                date=args.date,
                strategies=args.strategy,
                backends=args.backend,
                level=args.level,
                runs=args.runs,
                algorithm=args.hash,
                outdir=args.outdir,
                name=args.name,
                as_json=args.json,
            )
        else:
            raise RuntimeError("Unknown command")
    except Divergence as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (DetZipError, ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
