"""Comparison of stored snapshots and publication of the report on open pull requests."""

import logging
from pathlib import Path
from typing import NamedTuple

from .measure import MeasureArgs, do_measure
from ..github.client import GitHubClient, PullRequest
from ..github.comments import upsert_comment
from ..report.diff import Report, diff
from ..report.render import render
from ..snapshot.key import KeyPattern, annotate
from ..snapshot.record import Snapshot
from ..snapshot.store import SnapshotStore

logger = logging.getLogger(__name__)


async def compare_snapshots(
        store: SnapshotStore,
        base_sha: str,
        head_sha: str,
        key_pattern: KeyPattern | None,
        known: dict[str, Snapshot] | None = None) -> Report:
    """Load the snapshots of two commits and reconcile them.

    A commit without a stored snapshot contributes an empty snapshot.

    Args:
        store: Store to load snapshots from
        base_sha: Base commit
        head_sha: Head commit
        key_pattern: Pattern deriving correlation keys, or None to match by name
        known: Snapshots already at hand, by commit, which are used instead of loading

    Raises:
        SnapshotExpired: A snapshot existed but is no longer available
    """
    known = known or {}

    async def snapshot_for(sha: str) -> Snapshot:
        if sha in known:
            return known[sha]
        return await store.load_or_empty(sha)

    base = annotate(await snapshot_for(base_sha), key_pattern)
    head = annotate(await snapshot_for(head_sha), key_pattern)
    return diff(base, head, base_sha=base_sha, head_sha=head_sha)


class DiffArgs(NamedTuple):
    """Arguments for the diff operation."""
    base_sha: str
    head_sha: str
    key_pattern: KeyPattern | None
    repository_url: str | None  # Web URL used for the comparison link, or None to omit it


async def do_diff(store: SnapshotStore, args: DiffArgs) -> str:
    """Render the report comparing two stored commits."""
    report = await compare_snapshots(store, args.base_sha, args.head_sha, args.key_pattern)
    return render(report, repository_url=args.repository_url)


class CompareArgs(NamedTuple):
    """Arguments for the compare operation."""
    root: Path  # Directory patterns are resolved against
    patterns: list[str]  # Glob patterns selecting the build artifacts; empty disables processing
    sha: str  # Commit the workflow runs for
    event_name: str  # Triggering event; the current build is only measured on 'push'
    key_pattern: KeyPattern | None
    repository_url: str | None


class CompareProcessor:
    """Processor for compare operations that encapsulates state and logic."""

    def __init__(self, store: SnapshotStore, client: GitHubClient, args: CompareArgs):
        self._store = store
        self._client = client
        self._args = args
        self._current: Snapshot | None = None

    async def run(self) -> int:
        """Execute the compare operation.

        Returns:
            Number of pull requests whose report was written
        """
        if not self._args.patterns:
            logger.info("No file patterns configured, skipping")
            return 0

        if self._args.event_name == 'push':
            self._current = await do_measure(
                self._store, MeasureArgs(self._args.root, self._args.patterns, self._args.sha))
        else:
            self._current = await self._store.load_or_empty(self._args.sha)

        pull_requests = await self._client.list_pull_requests()
        if not pull_requests:
            logger.info("No pull requests found")
            return 0

        written = 0
        for pull_request in pull_requests:
            if await self._handle_pull_request(pull_request):
                written += 1
        return written

    async def _handle_pull_request(self, pull_request: PullRequest) -> bool:
        if pull_request.draft:
            logger.debug(f"Skipping draft PR: #{pull_request.number}")
            return False

        base_sha = await self._client.latest_commit_sha(pull_request.base_ref)
        head_sha = await self._client.latest_commit_sha(pull_request.head_ref)

        if self._args.sha not in (base_sha, head_sha):
            logger.info(f"Skipping PR #{pull_request.number}: commit {self._args.sha} is neither its base "
                        f"({base_sha}) nor its head ({head_sha})")
            return False

        logger.info(f"Updating PR #{pull_request.number}: base={base_sha} head={head_sha}")
        report = await compare_snapshots(
            self._store, base_sha, head_sha, self._args.key_pattern, {self._args.sha: self._current})
        logger.debug(f"Report for PR #{pull_request.number}: {report}")

        body = render(report, repository_url=self._args.repository_url)
        return await upsert_comment(self._client, pull_request.number, body)


async def do_compare(store: SnapshotStore, client: GitHubClient, args: CompareArgs) -> int:
    """Async implementation of the compare operation."""
    processor = CompareProcessor(store, client, args)
    return await processor.run()
