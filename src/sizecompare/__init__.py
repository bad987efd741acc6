from .errors import (
    SizeCompareError,
    ConfigurationError,
    InvalidKeyPattern,
    SnapshotExists,
    SnapshotExpired,
    SnapshotNotFound,
    RefNotFound,
)
from .workspace import Workspace
from .settings import Settings
from .snapshot.record import AggregateSize, FileRecord, Snapshot
from .snapshot.key import KeyPattern, annotate
from .snapshot.sizer import measure, measure_files
from .snapshot.store import SnapshotStore, MemorySnapshotStore, LevelDBSnapshotStore
from .report.diff import ChangeRow, Report, diff, difference_percentage
from .report.render import SIZE_COMPARE_HEADING, render
