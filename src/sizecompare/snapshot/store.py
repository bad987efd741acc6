"""Persistence of snapshots keyed by commit SHA."""

import datetime
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Iterator

import msgpack
import plyvel

from .record import Snapshot
from ..errors import SnapshotExists, SnapshotExpired, SnapshotNotFound

logger = logging.getLogger(__name__)


def snapshot_name(sha: str) -> str:
    """Identifier a snapshot is stored under, e.g. '<sha>-file_sizes'."""
    return f"{sha}-file_sizes"


class SnapshotStore(ABC):
    """Write-once storage of one snapshot per commit.

    Implementations never delete or rewrite snapshots; retention is the store's own concern.
    """

    @abstractmethod
    async def save(self, sha: str, snapshot: Snapshot) -> None:
        """Persist the snapshot for a commit.

        Raises:
            SnapshotExists: A different snapshot is already stored for the commit
        """

    @abstractmethod
    async def load(self, sha: str) -> Snapshot:
        """Retrieve the snapshot stored for a commit.

        Raises:
            SnapshotNotFound: Nothing was ever stored for the commit
            SnapshotExpired: A snapshot was stored but is no longer available
        """

    async def load_or_empty(self, sha: str) -> Snapshot:
        """Retrieve the snapshot for a commit, treating a miss as an empty snapshot.

        SnapshotExpired still propagates, since it means data was lost rather than never built.
        """
        try:
            return await self.load(sha)
        except SnapshotNotFound:
            logger.info(f"No snapshot found for commit: {sha}")
            return Snapshot()


class MemorySnapshotStore(SnapshotStore):
    """Snapshot store held in process memory."""

    def __init__(self) -> None:
        self._payloads: dict[str, bytes] = {}

    async def save(self, sha: str, snapshot: Snapshot) -> None:
        name = snapshot_name(sha)
        payload = snapshot.to_msgpack()
        existing = self._payloads.get(name)
        if existing is not None and existing != payload:
            raise SnapshotExists(sha)
        self._payloads[name] = payload

    async def load(self, sha: str) -> Snapshot:
        payload = self._payloads.get(snapshot_name(sha))
        if payload is None:
            raise SnapshotNotFound(sha)
        return Snapshot.from_msgpack(payload)


class LevelDBSnapshotStore(SnapshotStore):
    """Snapshot store backed by a LevelDB database.

    Layout:
        snapshot/<sha>-file_sizes -> msgpack list of {name, relative, full, size, gzip}
        created/<sha>-file_sizes  -> msgpack integer, seconds since the epoch when saved

    Snapshots older than the retention period are reported as expired on load. They are
    kept in the database; cleaning them up is left to whoever manages the store directory.
    """

    SNAPSHOT_PREFIX = b'snapshot/'
    CREATED_PREFIX = b'created/'

    def __init__(self, path: Path, *, retention: datetime.timedelta | None = None,
                 clock: Callable[[], float] = time.time, create_if_missing: bool = True):
        """Open the database at path.

        Args:
            path: Database directory
            retention: How long a snapshot stays loadable, or None to keep snapshots forever
            clock: Source of the current time in seconds since the epoch
            create_if_missing: Create the database directory if it doesn't exist. If False,
                               raise FileNotFoundError instead.
        """
        self.path = Path(path)
        self._retention = retention
        self._clock = clock

        if create_if_missing:
            self.path.mkdir(parents=True, exist_ok=True)
        elif not self.path.exists():
            raise FileNotFoundError(f"Snapshot store not found: {self.path}")

        self._database: plyvel.DB | None = plyvel.DB(str(self.path), create_if_missing=create_if_missing)
        self._snapshots = self._database.prefixed_db(self.SNAPSHOT_PREFIX)
        self._created = self._database.prefixed_db(self.CREATED_PREFIX)

    def __del__(self):
        self.close()

    def __enter__(self) -> "LevelDBSnapshotStore":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        database = getattr(self, '_database', None)
        if database is not None:
            database.close()
            self._database = None

    def _ensure_open(self) -> None:
        if self._database is None:
            raise RuntimeError("Snapshot store is closed")

    async def save(self, sha: str, snapshot: Snapshot) -> None:
        self._ensure_open()
        key = snapshot_name(sha).encode('utf-8')
        payload = snapshot.to_msgpack()

        existing = self._snapshots.get(key)
        if existing is not None:
            if existing != payload:
                raise SnapshotExists(sha)
            logger.info(f"Snapshot already stored: {snapshot_name(sha)}")
            return

        with self._database.write_batch(transaction=True) as batch:
            batch.put(self.SNAPSHOT_PREFIX + key, payload)
            batch.put(self.CREATED_PREFIX + key, msgpack.dumps(int(self._clock())))
        logger.info(f"Stored snapshot: {snapshot_name(sha)} ({len(snapshot)} files)")

    async def load(self, sha: str) -> Snapshot:
        self._ensure_open()
        key = snapshot_name(sha).encode('utf-8')

        payload = self._snapshots.get(key)
        if payload is None:
            raise SnapshotNotFound(sha)

        if self._is_expired(key):
            raise SnapshotExpired(sha)

        logger.info(f"Loaded snapshot: {snapshot_name(sha)}")
        return Snapshot.from_msgpack(payload)

    def _is_expired(self, key: bytes) -> bool:
        if self._retention is None:
            return False
        created = self._created.get(key)
        if created is None:
            return False
        age = self._clock() - msgpack.loads(created)
        return age > self._retention.total_seconds()

    def inspect(self) -> Iterator[str]:
        """Generate one human-readable line per stored snapshot.

        Yields:
            Strings of the form '<name> files=<n> size=<bytes> gzip=<bytes> created=<ISO timestamp>'
        """
        self._ensure_open()
        for key, payload in self._snapshots.iterator():
            snapshot = Snapshot.from_msgpack(payload)
            total = snapshot.total()
            created = self._created.get(key)
            if created is None:
                created_text = '-'
            else:
                created_text = datetime.datetime.fromtimestamp(msgpack.loads(created), tz=datetime.UTC)\
                    .strftime('%Y-%m-%dT%H:%M:%SZ')
            expired = ' expired' if self._is_expired(key) else ''
            yield (f"{key.decode('utf-8')} files={len(snapshot)} size={total.size} "
                   f"gzip={total.compressed_size} created={created_text}{expired}")
