"""Report module for duplicate detection and reporting.

This package contains:
- analysis: ResolutionRecord, DuplicationGroup, and severity assessment
- store: Report, MatchEntry, and JSON persistence
"""
