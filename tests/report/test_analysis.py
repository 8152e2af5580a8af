"""Tests for grouping and severity assessment."""
import unittest
from pathlib import Path

from singlecopy.report.analysis import (
    ResolutionRecord,
    Severity,
    analyze,
    compute_group_id,
)
from singlecopy.resolution.resolver import ResolutionFailureKind
from singlecopy.workspace.walker import Consumer

COPY_A = Path('/ws/node_modules/.pnpm/yjs@13.6.0/node_modules/yjs/index.js')
COPY_B = Path('/ws/node_modules/.pnpm/yjs@13.6.0_peer/node_modules/yjs/index.js')
COPY_C = Path('/ws/node_modules/.pnpm/yjs@13.5.0/node_modules/yjs/index.js')


def record(name: str, real_path: Path | None, version: str | None = '13.6.0') -> ResolutionRecord:
    consumer = Consumer(Path('/ws/apps') / name, name)
    if real_path is None:
        return ResolutionRecord(consumer, None, None, ResolutionFailureKind.NOT_INSTALLED)
    return ResolutionRecord(consumer, real_path, version)


class AnalyzeTest(unittest.TestCase):

    def test_no_records(self):
        analysis = analyze([])

        self.assertEqual([], analysis.groups)
        self.assertEqual(0, analysis.flagged_count)
        self.assertEqual(Severity.NONE, analysis.severity)

    def test_single_copy_is_clean(self):
        analysis = analyze([record('web', COPY_A), record('editor', COPY_A), record('api', COPY_A)])

        self.assertEqual(1, len(analysis.groups))
        self.assertEqual(3, len(analysis.groups[0]))
        self.assertEqual(0, analysis.flagged_count)
        self.assertEqual(Severity.NONE, analysis.severity)

    def test_failed_records_are_ignored(self):
        analysis = analyze([record('web', COPY_A), record('docs', None), record('editor', COPY_B)])

        self.assertEqual(2, len(analysis.groups))
        self.assertEqual(2, analysis.flagged_count)

    def test_two_copies_same_version_is_warning(self):
        """Test that distinct files with identical versions are still a duplication."""
        analysis = analyze([record('web', COPY_A), record('editor', COPY_B), record('api', COPY_A)])

        self.assertEqual(Severity.WARNING, analysis.severity)
        self.assertEqual(3, analysis.flagged_count)

    def test_two_copies_different_versions_is_error(self):
        analysis = analyze([record('web', COPY_A), record('editor', COPY_C, '13.5.0')])

        self.assertEqual(Severity.ERROR, analysis.severity)
        self.assertEqual(2, analysis.flagged_count)

    def test_unknown_version_is_not_identical(self):
        analysis = analyze([record('web', COPY_A), record('editor', COPY_B, None)])

        self.assertEqual(Severity.ERROR, analysis.severity)

    def test_three_copies_is_error_even_with_same_version(self):
        analysis = analyze([record('web', COPY_A), record('editor', COPY_B), record('api', COPY_C, '13.6.0')])

        self.assertEqual(Severity.ERROR, analysis.severity)
        self.assertEqual(3, analysis.flagged_count)

    def test_groups_in_first_appearance_order(self):
        analysis = analyze([record('a', COPY_B), record('b', COPY_A), record('c', COPY_B)])

        self.assertEqual([COPY_B, COPY_A], [g.real_path for g in analysis.groups])
        self.assertEqual(['a', 'c'], [c.name for c in analysis.groups[0].consumers])

    def test_group_for(self):
        analysis = analyze([record('web', COPY_A)])

        self.assertIs(analysis.groups[0], analysis.group_for(COPY_A))
        self.assertIsNone(analysis.group_for(COPY_B))
        self.assertIsNone(analysis.group_for(None))


class GroupIdTest(unittest.TestCase):

    def test_stable_and_distinct(self):
        self.assertEqual(compute_group_id(COPY_A), compute_group_id(Path(str(COPY_A))))
        self.assertNotEqual(compute_group_id(COPY_A), compute_group_id(COPY_B))
        self.assertEqual(32, len(compute_group_id(COPY_A)))


if __name__ == '__main__':
    unittest.main()
