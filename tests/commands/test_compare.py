"""Tests for the compare and diff commands."""
import asyncio
import tempfile
import unittest
from pathlib import Path

from sizecompare.commands.compare import CompareArgs, DiffArgs, do_compare, do_diff
from sizecompare.errors import SnapshotExpired
from sizecompare.github.client import GitHubClient
from sizecompare.report.render import SIZE_COMPARE_HEADING
from sizecompare.snapshot.key import KeyPattern
from sizecompare.snapshot.record import Snapshot
from sizecompare.snapshot.store import MemorySnapshotStore

from test_utils import FakeGitHub, make_record, write_file


class ExpiringStore(MemorySnapshotStore):
    """Memory store that reports some commits as expired."""

    def __init__(self, expired: set[str]):
        super().__init__()
        self._expired = expired

    async def load(self, sha: str) -> Snapshot:
        if sha in self._expired:
            raise SnapshotExpired(sha)
        return await super().load(sha)


class CompareTest(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self._tmpdir.name)
        write_file(self.root / 'dist' / 'chunk.def456.js', b'x' * 120)
        write_file(self.root / 'dist' / 'index.html', b'<html></html>')

        self.github = FakeGitHub()
        self.store = MemorySnapshotStore()
        self.key_pattern = KeyPattern(r'/(\w+)\.[0-9a-f]+\.js$')

    def tearDown(self):
        self._tmpdir.cleanup()

    def compare(self, sha='head1', event_name='push', patterns=None, store=None) -> int:
        if patterns is None:
            patterns = ['dist/**']
        args = CompareArgs(self.root, patterns, sha, event_name, self.key_pattern, 'https://github.com/owner/repo')

        async def run():
            async with GitHubClient('token', 'owner/repo', transport=self.github.transport()) as client:
                return await do_compare(store or self.store, client, args)

        return asyncio.run(run())

    def save(self, sha, *records):
        asyncio.run(self.store.save(sha, Snapshot(records)))

    def test_push_to_head_branch_reports_key_matched_change(self):
        self.save('base1', make_record('dist/chunk.abc123.js', 100, 100), make_record('dist/index.html', 13, 13))
        self.github.branches.update({'main': 'base1', 'feature': 'head1'})
        self.github.add_pull(1, 'main', 'feature')

        written = self.compare()

        self.assertEqual(1, written)
        # the current build was stored under its commit
        self.assertEqual(['dist/chunk.def456.js', 'dist/index.html'],
                         [r.name for r in asyncio.run(self.store.load('head1'))])

        body = self.github.comments[1][0]['body']
        lines = body.split('\n')
        self.assertEqual(SIZE_COMPARE_HEADING, lines[0])
        self.assertIn('/compare/base1...head1', lines[2])
        self.assertEqual(8, len(lines))
        self.assertTrue(lines[7].startswith('| dist/chunk.def456.js | +20.00% (+20 B) |'))
        self.assertNotIn('chunk.abc123', body)
        self.assertNotIn('index.html', body)

    def test_push_to_base_branch_updates_report(self):
        self.save('feature1', make_record('dist/chunk.abc123.js', 150))
        self.github.branches.update({'main': 'head1', 'feature': 'feature1'})
        self.github.add_pull(1, 'main', 'feature')
        self.github.add_comment(1, f'{SIZE_COMPARE_HEADING}\n\nstale report')

        self.assertEqual(1, self.compare())

        comments = self.github.comments[1]
        self.assertEqual(1, len(comments))
        self.assertIn('/compare/head1...feature1', comments[0]['body'])
        self.assertNotIn('stale report', comments[0]['body'])

    def test_missing_base_snapshot_shows_everything_new(self):
        self.github.branches.update({'main': 'base1', 'feature': 'head1'})
        self.github.add_pull(1, 'main', 'feature')

        self.compare()

        body = self.github.comments[1][0]['body']
        self.assertIn('| dist/chunk.def456.js | +100.00% (+120 B) |', body)
        self.assertIn('| dist/index.html      | +100.00% (+13 B)  |', body)

    def test_expired_snapshot_is_fatal(self):
        store = ExpiringStore({'base1'})
        self.github.branches.update({'main': 'base1', 'feature': 'head1'})
        self.github.add_pull(1, 'main', 'feature')

        with self.assertRaises(SnapshotExpired):
            self.compare(store=store)

        self.assertNotIn(1, self.github.comments)

    def test_draft_and_stale_pull_requests_skipped(self):
        self.github.branches.update({'main': 'base1', 'feature': 'head1', 'draft': 'head1', 'other': 'other1'})
        self.github.add_pull(1, 'main', 'draft', draft=True)
        self.github.add_pull(2, 'main', 'other')
        self.github.add_pull(3, 'main', 'feature')

        self.assertEqual(1, self.compare())

        self.assertEqual([3], list(self.github.comments))

    def test_permission_failure_does_not_stop_other_pull_requests(self):
        self.github.branches.update({'main': 'base1', 'fork': 'head1', 'feature': 'head1'})
        self.github.add_pull(1, 'main', 'fork')
        self.github.add_pull(2, 'main', 'feature')
        self.github.forbidden_issues.add(1)

        with self.assertLogs('sizecompare.github.comments', level='WARNING'):
            written = self.compare()

        self.assertEqual(1, written)
        self.assertEqual([2], list(self.github.comments))

    def test_connection_failure_does_not_stop_other_pull_requests(self):
        self.github.branches.update({'main': 'base1', 'feature-a': 'head1', 'feature-b': 'head1'})
        self.github.add_pull(1, 'main', 'feature-a')
        self.github.add_pull(2, 'main', 'feature-b')
        self.github.unreachable_issues.add(1)

        with self.assertLogs('sizecompare.github.comments', level='WARNING') as logs:
            written = self.compare()

        self.assertEqual(1, written)
        self.assertEqual([2], list(self.github.comments))
        self.assertIn('PR #1', logs.output[0])

    def test_no_patterns_skips_everything(self):
        self.github.branches.update({'main': 'base1', 'feature': 'head1'})
        self.github.add_pull(1, 'main', 'feature')

        self.assertEqual(0, self.compare(patterns=[]))

        self.assertEqual([], self.github.requests)
        self.assertEqual(Snapshot(), asyncio.run(self.store.load_or_empty('head1')))

    def test_no_pull_requests(self):
        self.assertEqual(0, self.compare())
        # the snapshot is still stored for later comparisons
        self.assertEqual(2, len(asyncio.run(self.store.load('head1'))))

    def test_non_push_event_uses_stored_snapshot(self):
        self.save('head1', make_record('dist/chunk.aaaaaa.js', 500))
        self.github.branches.update({'main': 'base1', 'feature': 'head1'})
        self.github.add_pull(1, 'main', 'feature')

        self.compare(event_name='workflow_dispatch')

        body = self.github.comments[1][0]['body']
        self.assertIn('dist/chunk.aaaaaa.js', body)
        self.assertNotIn('index.html', body)

    def test_rerun_is_idempotent(self):
        self.save('base1', make_record('dist/chunk.abc123.js', 100))
        self.github.branches.update({'main': 'base1', 'feature': 'head1'})
        self.github.add_pull(1, 'main', 'feature')

        self.compare()
        first = self.github.comments[1][0]['body']
        self.compare()

        self.assertEqual(1, len(self.github.comments[1]))
        self.assertEqual(first, self.github.comments[1][0]['body'])


class DiffCommandTest(unittest.TestCase):
    def test_diff_two_stored_commits(self):
        store = MemorySnapshotStore()
        asyncio.run(store.save('aaa', Snapshot([make_record('a.js', 1000, key=None)])))
        asyncio.run(store.save('bbb', Snapshot([make_record('a.js', 1000), make_record('b.js', 500)])))

        text = asyncio.run(do_diff(store, DiffArgs('aaa', 'bbb', None, None)))

        lines = text.split('\n')
        self.assertEqual(SIZE_COMPARE_HEADING, lines[0])
        self.assertEqual(6, len(lines))
        self.assertIn('+50.00% (+500 B)', lines[4])
        self.assertTrue(lines[5].startswith('| b.js '))

    def test_diff_unknown_commits(self):
        text = asyncio.run(do_diff(MemorySnapshotStore(), DiffArgs('aaa', 'bbb', None, 'https://github.com/o/r')))
        self.assertIn('= (0 B)', text)
        self.assertIn('[Compare aaa...bbb](https://github.com/o/r/compare/aaa...bbb)', text)


if __name__ == '__main__':
    unittest.main()
