"""Tests for command implementation modules.

Test Files and Coverage:
========================

| Test File          | Test Classes         | Tested Constructs                   | Tested Functionalities                              |
|--------------------|----------------------|-------------------------------------|-----------------------------------------------------|
| test_measure.py    | MeasureTest          | do_measure()                        | Snapshot stored under commit, write-once            |
| test_compare.py    | CompareTest          | do_compare(), CompareProcessor      | Push flow, stale/draft skip, misses, expiry, forks  |
|                    | DiffCommandTest      | do_diff(), compare_snapshots()      | Report text for two stored commits                  |
"""
