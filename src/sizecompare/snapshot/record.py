"""File records, snapshots and aggregate sizes."""

from dataclasses import dataclass, replace
from typing import Any, Iterable, Iterator

import msgpack


@dataclass(frozen=True)
class AggregateSize:
    """Raw and compressed byte counts of one file or a whole snapshot."""
    size: int = 0
    compressed_size: int = 0

    def __add__(self, other: "AggregateSize") -> "AggregateSize":
        return AggregateSize(self.size + other.size, self.compressed_size + other.compressed_size)


@dataclass(frozen=True)
class FileRecord:
    """Size information for one build artifact.

    Attributes:
        name: Path relative to the measured root, with POSIX separators
        relative: The same path prefixed with "./"
        full: Absolute path of the file at measurement time
        size: Raw size in bytes
        compressed_size: Size in bytes after gzip compression at level 9
        key: Correlation key derived from ``full``, or None if the key pattern did not match
             (or no pattern was configured). Never persisted.
    """
    name: str
    relative: str
    full: str
    size: int
    compressed_size: int
    key: str | None = None

    @property
    def sizes(self) -> AggregateSize:
        return AggregateSize(self.size, self.compressed_size)

    def with_key(self, key: str | None) -> "FileRecord":
        return replace(self, key=key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted field layout (name, relative, full, size, gzip)."""
        return {
            'name': self.name,
            'relative': self.relative,
            'full': self.full,
            'size': self.size,
            'gzip': self.compressed_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileRecord":
        return cls(
            name=data['name'],
            relative=data['relative'],
            full=data['full'],
            size=int(data['size']),
            compressed_size=int(data['gzip']),
        )


class Snapshot:
    """Ordered, immutable collection of file records captured for one commit.

    No two records may share the same name. Order does not affect diff results but
    determines the order of rows in the rendered report.
    """

    def __init__(self, records: Iterable[FileRecord] = ()):
        self._records: tuple[FileRecord, ...] = tuple(records)

        seen: set[str] = set()
        for record in self._records:
            if record.name in seen:
                raise ValueError(f"Duplicate file name in snapshot: {record.name}")
            seen.add(record.name)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"Snapshot({len(self._records)} files, {self.total().size} bytes)"

    @property
    def records(self) -> tuple[FileRecord, ...]:
        return self._records

    def total(self) -> AggregateSize:
        """Sum the sizes of all records."""
        result = AggregateSize()
        for record in self._records:
            result += record.sizes
        return result

    def to_list(self) -> list[dict[str, Any]]:
        return [record.to_dict() for record in self._records]

    @classmethod
    def from_list(cls, data: list[dict[str, Any]]) -> "Snapshot":
        return cls(FileRecord.from_dict(item) for item in data)

    def to_msgpack(self) -> bytes:
        """Serialize to msgpack format for storage.

        Returns:
            Msgpack-encoded bytes containing a list of maps with keys name, relative, full, size, gzip
        """
        result = msgpack.dumps(self.to_list())
        assert isinstance(result, bytes)
        return result

    @classmethod
    def from_msgpack(cls, data: bytes) -> "Snapshot":
        decoded = msgpack.loads(data)
        assert isinstance(decoded, list)
        return cls.from_list(decoded)
