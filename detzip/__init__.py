"""
detzip: byte-reproducible ZIP archives

This package builds ZIP archives whose bytes depend only on the input
(path, content) pairs, their order, the compression strategy and one
explicit timestamp. Current implementation includes:

- Packed DOS date/time codec with explicit range and calendar checks
- CRC-32 entry checksums and cryptographic archive fingerprints
- Local header / central directory / end record encoder (Store, Deflate)
- An independent encoder on top of the standard zipfile writer
- A verifier proving that repeated builds and independent encoders agree
- A small CLI (build, verify)

ZIP64, encryption and directory entries are not produced.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "errors",
    "pathutil",
    "dostime",
    "crc",
    "codec",
    "records",
    "assembler",
    "reference",
    "verifier",
    "collect",
    "cli",
]

# Programmatic API: detzip.assembler.assemble and detzip.verifier.verify;
# the CLI functions in detzip.cli (cmd_build/cmd_verify) take normal parameters.
