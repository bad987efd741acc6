"""Measurement of the current build output and persistence of its snapshot."""

import logging
from pathlib import Path
from typing import NamedTuple

from ..snapshot.record import Snapshot
from ..snapshot.sizer import measure
from ..snapshot.store import SnapshotStore, snapshot_name

logger = logging.getLogger(__name__)


class MeasureArgs(NamedTuple):
    """Arguments for the measure operation."""
    root: Path  # Directory patterns are resolved against and record names are relative to
    patterns: list[str]  # Glob patterns selecting the build artifacts
    sha: str  # Commit the snapshot is stored under


async def do_measure(store: SnapshotStore, args: MeasureArgs) -> Snapshot:
    """Measure the files selected by the patterns and store the snapshot under the commit."""
    logger.info(f"Starting measurement for commit: {args.sha}")
    snapshot = measure(args.root, args.patterns)
    total = snapshot.total()
    logger.info(f"Measured {len(snapshot)} files: size={total.size} gzip={total.compressed_size}")

    await store.save(args.sha, snapshot)
    logger.info(f"Completed measurement: {snapshot_name(args.sha)}")
    return snapshot
