import asyncio
import datetime
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

import httpx

from .commands.compare import CompareArgs, DiffArgs, do_compare, do_diff
from .commands.measure import MeasureArgs, do_measure
from .github.client import DEFAULT_API_URL, GitHubClient
from .settings import (
    DEFAULT_RETENTION_DAYS,
    SETTING_FILES,
    SETTING_KEY_PATTERN,
    SETTING_LOGGING_PATH,
    SETTING_STORE_PATH,
    SETTING_STORE_RETENTION_DAYS,
    Settings,
    get_settings_directory_path,
)
from .snapshot.key import KeyPattern
from .snapshot.record import Snapshot
from .snapshot.store import LevelDBSnapshotStore
from .utils.glob import split_patterns

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class Workspace:
    """High-level workflow orchestration for measuring and comparing build artifact sizes.

    A workspace is a directory holding build output, together with its settings file and a
    snapshot store under .sizecompare/. It provides the user-facing operations:
    - measure(): Size the configured files and store the snapshot for a commit
    - diff(): Render the report comparing two stored commits
    - compare(): Publish reports on every open pull request the commit belongs to

    Contrast with LevelDBSnapshotStore, which only persists snapshots. Workspace resolves
    configuration once, builds the key pattern up front so an invalid pattern fails before any
    work is done, and runs the async command implementations.
    """

    def __init__(self, root: str | os.PathLike, *, files: str | Iterable[str] | None = None,
                 key_pattern: str | None = None, store_path: str | os.PathLike | None = None):
        """Initialize workspace at root.

        Args:
            root: Workspace root directory; patterns and record names are relative to it
            files: Glob patterns overriding the 'files' setting
            key_pattern: Correlation key pattern overriding the 'key_pattern' setting
            store_path: Snapshot store directory overriding the 'store.path' setting

        Raises:
            NotADirectoryError: Root is not a directory
            InvalidKeyPattern: The key pattern does not compile or has no capture group
        """
        self.root = Path(os.path.abspath(root))
        if not self.root.is_dir():
            raise NotADirectoryError(f"Workspace root is not a directory: {self.root}")

        self._settings = Settings(self.root)

        if files is None:
            files = self._settings.get(SETTING_FILES, [])
        self.patterns = split_patterns(files)

        if key_pattern is None:
            key_pattern = self._settings.get(SETTING_KEY_PATTERN)
        self.key_pattern = KeyPattern(key_pattern) if key_pattern else None

        if store_path is not None:
            self.store_path = self.root / store_path
        else:
            self.store_path = self._settings.get_path(
                SETTING_STORE_PATH, get_settings_directory_path(self.root) / 'store')

        retention_days = self._settings.get(SETTING_STORE_RETENTION_DAYS, DEFAULT_RETENTION_DAYS)
        self._retention = datetime.timedelta(days=retention_days) if retention_days else None
        self._store: LevelDBSnapshotStore | None = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the snapshot store if it was opened."""
        if self._store is not None:
            self._store.close()
            self._store = None

    @property
    def store(self) -> LevelDBSnapshotStore:
        if self._store is None:
            self._store = LevelDBSnapshotStore(self.store_path, retention=self._retention)
        return self._store

    def configure_logging_from_settings(self) -> bool:
        """Redirect logging to the file named by the logging.path setting, keeping the current level.

        Returns:
            True if the setting is present and logging was redirected
        """
        log_path = self._settings.get_path(SETTING_LOGGING_PATH)
        if log_path is None:
            return False

        level = logging.root.level or logging.INFO
        logging.basicConfig(filename=log_path, level=level, format=LOG_FORMAT, force=True)
        return True

    def measure(self, sha: str) -> Snapshot:
        """Size the configured files and store the snapshot under the commit.

        Raises:
            SnapshotExists: A different snapshot is already stored for the commit
        """
        return asyncio.run(do_measure(self.store, MeasureArgs(self.root, self.patterns, sha)))

    def diff(self, base_sha: str, head_sha: str, repository_url: str | None = None) -> str:
        """Render the report comparing the snapshots of two commits.

        Raises:
            SnapshotExpired: One of the snapshots is past its retention period
        """
        return asyncio.run(do_diff(self.store, DiffArgs(base_sha, head_sha, self.key_pattern, repository_url)))

    def compare(self, sha: str, event_name: str, token: str, repository: str, *,
                api_url: str = DEFAULT_API_URL, server_url: str = 'https://github.com',
                transport: httpx.AsyncBaseTransport | None = None) -> int:
        """Publish size reports on the open pull requests the commit is the base or head of.

        On 'push' events the configured files are measured and stored first.

        Args:
            sha: Commit the workflow runs for
            event_name: Triggering event name
            token: GitHub token
            repository: Repository in 'owner/name' form
            api_url: Base URL of the GitHub REST API
            server_url: Base web URL, used for comparison links
            transport: Optional httpx transport for the GitHub client

        Returns:
            Number of pull requests whose report was written
        """
        repository_url = f"{server_url.rstrip('/')}/{repository}"
        args = CompareArgs(self.root, self.patterns, sha, event_name, self.key_pattern, repository_url)

        async def run():
            async with GitHubClient(token, repository, api_url=api_url, transport=transport) as client:
                return await do_compare(self.store, client, args)

        return asyncio.run(run())

    def inspect(self) -> Iterator[str]:
        """Generate human-readable lines describing the stored snapshots."""
        yield from self.store.inspect()
