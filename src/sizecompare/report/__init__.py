"""Report module for size comparison results.

This package contains:
- diff: ChangeRow, Report and the snapshot reconciliation in diff()
- render: Markdown rendering of reports under a fixed heading
"""
