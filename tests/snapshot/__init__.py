"""Tests for snapshot module.

Test Files and Coverage:
========================

| Test File        | Test Classes        | Tested Constructs                        | Tested Functionalities                       |
|------------------|---------------------|------------------------------------------|----------------------------------------------|
| test_record.py   | SnapshotTest        | FileRecord, Snapshot, AggregateSize      | Name invariant, totals, persisted layout     |
| test_key.py      | KeyPatternTest      | KeyPattern, annotate()                   | Validation, group concatenation, no match    |
| test_sizer.py    | SizerTest           | measure(), measure_files()               | Raw/gzip sizes, relative names, empty input  |
| test_store.py    | LevelDBStoreTest    | LevelDBSnapshotStore                     | Round trip, miss, expiry, write-once         |
|                  | MemoryStoreTest     | MemorySnapshotStore, load_or_empty()     | Miss as empty snapshot                       |
"""
