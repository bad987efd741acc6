"""Snapshot module for measuring, keying and storing build artifact sizes.

This package contains:
- record: FileRecord, Snapshot and AggregateSize
- sizer: Raw and gzip size measurement of files
- key: KeyPattern and annotation of snapshots with correlation keys
- store: SnapshotStore and its in-memory and LevelDB implementations
"""
