"""Raw and compressed size measurement of build artifacts."""

import logging
import os
import zlib
from pathlib import Path
from typing import Iterable

from .record import FileRecord, Snapshot
from ..utils.glob import resolve_patterns

logger = logging.getLogger(__name__)

GZIP_LEVEL = 9
_CHUNK_SIZE = 1024 * 1024


def compute_gzip_size(path: Path) -> int:
    """Return the exact number of bytes gzip produces for the file at the given level.

    The gzip header written by zlib carries no file name and a zero mtime, so the result
    depends on the file content only.
    """
    # wbits=31 selects the gzip container
    compressor = zlib.compressobj(GZIP_LEVEL, zlib.DEFLATED, 31)
    total = 0
    with open(path, 'rb') as f:
        while chunk := f.read(_CHUNK_SIZE):
            total += len(compressor.compress(chunk))
    total += len(compressor.flush())
    return total


def measure_file(root: Path, path: Path) -> FileRecord:
    full = Path(os.path.abspath(path))
    name = full.relative_to(root).as_posix()
    return FileRecord(
        name=name,
        relative=f"./{name}",
        full=str(full),
        size=full.stat().st_size,
        compressed_size=compute_gzip_size(full),
    )


def measure_files(root: Path, paths: Iterable[Path]) -> Snapshot:
    """Measure every path and collect the records into a snapshot ordered by name.

    Args:
        root: Directory that record names are made relative to. Every path must be under it.
        paths: Files to measure

    Raises:
        ValueError: If a path is not under root
    """
    root = Path(os.path.abspath(root))
    records = []
    for path in paths:
        logger.info(f"Starting size computation for: {path}")
        record = measure_file(root, Path(path))
        logger.info(f"Completed size computation for: {path} (size={record.size}, gzip={record.compressed_size})")
        records.append(record)

    records.sort(key=lambda r: r.name)
    return Snapshot(records)


def measure(root: Path, patterns: str | Iterable[str]) -> Snapshot:
    """Resolve glob patterns under root and measure the matched files."""
    files = resolve_patterns(root, patterns)
    logger.debug(f"Patterns resolved to: {[str(f) for f in files]}")
    snapshot = measure_files(root, files)
    logger.debug(f"Files resolved to sizes: {snapshot.to_list()}")
    return snapshot
