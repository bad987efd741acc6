"""Reconciliation of a base and a head snapshot into a size report."""

from dataclasses import dataclass, field

from ..snapshot.record import AggregateSize, FileRecord, Snapshot

TOTAL_LABEL = 'Total'


def difference_percentage(a: int, b: int) -> float:
    """Signed relative change from a to b in percent.

    Positive when b grew, negative when it shrank. Defined as 0 when a is 0, so the result
    is always a finite number.
    """
    if a == 0 or a == b:
        return 0.0
    sign = 1 if b > a else -1
    return abs(a - b) / a * sign * 100


@dataclass(frozen=True)
class ChangeRow:
    """One row of a report: the Total aggregate or one correlated file pair.

    Attributes:
        label: 'Total', or the file name (head's name when the file exists in head)
        base: Sizes at the base commit, None when the file only exists in head
        head: Sizes at the head commit, None when the file only exists in base
    """
    label: str
    base: AggregateSize | None
    head: AggregateSize | None

    @property
    def is_added(self) -> bool:
        return self.base is None and self.head is not None

    @property
    def is_removed(self) -> bool:
        return self.head is None and self.base is not None

    @property
    def base_or_zero(self) -> AggregateSize:
        return self.base if self.base is not None else AggregateSize()

    @property
    def head_or_zero(self) -> AggregateSize:
        return self.head if self.head is not None else AggregateSize()

    @property
    def size_delta(self) -> int:
        return self.head_or_zero.size - self.base_or_zero.size

    @property
    def compressed_size_delta(self) -> int:
        return self.head_or_zero.compressed_size - self.base_or_zero.compressed_size

    @property
    def size_percentage(self) -> float:
        return difference_percentage(self.base_or_zero.size, self.head_or_zero.size)

    @property
    def compressed_size_percentage(self) -> float:
        return difference_percentage(self.base_or_zero.compressed_size, self.head_or_zero.compressed_size)


@dataclass(frozen=True)
class Report:
    """Ordered change rows, starting with the Total row.

    Attributes:
        rows: Total row followed by per-file rows in first-seen order (base first, then head)
        base_sha: Commit the base snapshot belongs to, if known
        head_sha: Commit the head snapshot belongs to, if known
    """
    rows: tuple[ChangeRow, ...]
    base_sha: str | None = None
    head_sha: str | None = None

    @property
    def total(self) -> ChangeRow:
        return self.rows[0]

    @property
    def files(self) -> tuple[ChangeRow, ...]:
        return self.rows[1:]


@dataclass
class _Group:
    base: list[FileRecord] = field(default_factory=list)
    head: list[FileRecord] = field(default_factory=list)


def _group_of(record: FileRecord) -> tuple[str, str]:
    # Records without a key are singletons identified by name and never merged with keyed groups
    if record.key is None:
        return 'name', record.name
    return 'key', record.key


def _sum(records: list[FileRecord]) -> AggregateSize | None:
    if not records:
        return None
    result = AggregateSize()
    for record in records:
        result += record.sizes
    return result


def diff(base: Snapshot, head: Snapshot, *, base_sha: str | None = None, head_sha: str | None = None) -> Report:
    """Reconcile two key-annotated snapshots into a report.

    Files are matched by correlation key, falling back to the file name for records without a
    key. When several records of one snapshot share a key their sizes are summed. Rows whose
    raw size is identical on both sides are dropped; the Total row is always present.

    Args:
        base: Snapshot of the base commit, empty if it could not be loaded
        head: Snapshot of the head commit, empty if it could not be loaded
        base_sha: Base commit, carried into the report for linking
        head_sha: Head commit, carried into the report for linking

    Returns:
        Report whose first row is the Total row
    """
    rows = [ChangeRow(TOTAL_LABEL, base.total(), head.total())]

    groups: dict[tuple[str, str], _Group] = {}
    for record in base:
        groups.setdefault(_group_of(record), _Group()).base.append(record)
    for record in head:
        groups.setdefault(_group_of(record), _Group()).head.append(record)

    for group in groups.values():
        base_size = _sum(group.base)
        head_size = _sum(group.head)
        if base_size is not None and head_size is not None and base_size.size == head_size.size:
            continue
        label = group.head[0].name if group.head else group.base[0].name
        rows.append(ChangeRow(label, base_size, head_size))

    return Report(tuple(rows), base_sha=base_sha, head_sha=head_sha)
