"""Tests for report module.

Test Files and Coverage:
========================

| Test File              | Test Classes            | Tested Constructs                 | Tested Functionalities                   |
|------------------------|-------------------------|-----------------------------------|------------------------------------------|
| test_analysis.py       | AnalyzeTest             | analyze(), assess_severity()      | Grouping by real path, severity tiers    |
|                        | GroupIdTest             | compute_group_id()                | Stable identifiers per real path         |
| test_report_store.py   | BuildReportTest         | build_report()                    | Match order, flagged count               |
|                        | ReportSerializationTest | Report, MatchEntry                | JSON key names, from_dict validation     |
|                        | WriteReportTest         | write_report(), read_report()     | Atomic write, failures, file mode        |
"""
