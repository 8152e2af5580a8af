"""Tests for command implementation modules.

Test Files and Coverage:
========================

| Test File              | Test Classes            | Tested Constructs                 | Tested Functionalities                   |
|------------------------|-------------------------|-----------------------------------|------------------------------------------|
| test_summary.py        | SummaryTest             | summarize(), do_summary()         | Summary line, missing report, CI output  |

Note: The scan command is exercised end to end in tests/test_scanner.py and tests/test_cli.py
"""
