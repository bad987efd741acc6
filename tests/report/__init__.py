"""Tests for report module.

Test Files and Coverage:
========================

| Test File        | Test Classes              | Tested Constructs                     | Tested Functionalities                          |
|------------------|---------------------------|---------------------------------------|-------------------------------------------------|
| test_diff.py     | DifferencePercentageTest  | difference_percentage()               | Sign, zero base, equality                       |
|                  | DiffTest                  | diff(), ChangeRow, Report             | Key matching, unchanged filter, new/removed     |
| test_render.py   | FormatTest                | format_size(), signed_fixed_percent() | Units, signs, '=' for zero                      |
|                  | RenderTest                | render()                              | Heading, link, table cells, determinism         |
"""
