"""Tests for consumer enumeration."""
import os
import tempfile
import unittest
from pathlib import Path

from singlecopy.workspace.walker import (
    Consumer,
    StoreSweep,
    WorkspaceError,
    compile_store_pattern,
    enumerate_consumers,
    sweep_store,
)

from ..test_utils import make_consumer, store_copy

PNPM_SWEEP = StoreSweep(('node_modules/.pnpm',), '^{name}@')


class EnumerateConsumersTest(unittest.TestCase):

    def test_areas_in_order_children_sorted(self):
        """Test that areas keep their configured order and children are sorted by name."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            for area, name in [('apps', 'web'), ('apps', 'api'), ('packages', 'editor'), ('packages', 'core')]:
                make_consumer(root, area, name)

            consumers = enumerate_consumers(root, ['packages', 'apps'], package_name='yjs')

            self.assertEqual(
                [root / 'packages' / 'core', root / 'packages' / 'editor', root / 'apps' / 'api', root / 'apps' / 'web'],
                [c.path for c in consumers])
            self.assertEqual('@demo/core', consumers[0].name)
            self.assertFalse(any(c.synthetic for c in consumers))

    def test_directory_without_manifest_is_consumer(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / 'apps' / 'bare').mkdir(parents=True)
            (root / 'apps' / 'README.md').write_text('not a package')

            consumers = enumerate_consumers(root, ['apps'], package_name='yjs')

            self.assertEqual([Consumer(root / 'apps' / 'bare', None)], consumers)

    def test_missing_area_is_skipped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            make_consumer(root, 'apps', 'web')

            consumers = enumerate_consumers(root, ['apps', 'packages'], package_name='yjs')

            self.assertEqual([root / 'apps' / 'web'], [c.path for c in consumers])

    def test_empty_workspace(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            self.assertEqual([], enumerate_consumers(Path(tmpdir), ['apps'], package_name='yjs',
                                                     store_sweep=PNPM_SWEEP))

    @unittest.skipIf(hasattr(os, 'geteuid') and os.geteuid() == 0, 'root can list unreadable directories')
    def test_unreadable_area_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            make_consumer(root, 'apps', 'web')
            os.chmod(root / 'apps', 0o000)
            try:
                with self.assertRaises(WorkspaceError):
                    enumerate_consumers(root, ['apps'], package_name='yjs')
            finally:
                os.chmod(root / 'apps', 0o755)

    def test_sweep_findings_follow_workspace_packages(self):
        """Test that store copies are appended after all workspace packages."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            copy_dir = store_copy(root, 'yjs@13.6.0')
            make_consumer(root, 'apps', 'web', copy_dir)
            make_consumer(root, 'packages', 'editor', copy_dir)

            consumers = enumerate_consumers(root, ['apps', 'packages'], package_name='yjs', store_sweep=PNPM_SWEEP)

            self.assertEqual(3, len(consumers))
            self.assertEqual(Consumer(copy_dir, 'yjs', synthetic=True), consumers[-1])

    def test_allowlist_skips_matching_consumers(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            copy_dir = store_copy(root, 'yjs@13.6.0')
            make_consumer(root, 'apps', 'web', copy_dir)
            make_consumer(root, 'apps', 'legacy', copy_dir)

            consumers = enumerate_consumers(root, ['apps'], package_name='yjs', store_sweep=PNPM_SWEEP,
                                            allowlist=['apps/legacy', '.pnpm'])

            self.assertEqual([root / 'apps' / 'web'], [c.path for c in consumers])


class SweepStoreTest(unittest.TestCase):

    def test_matches_only_target_package(self):
        """Test that folders of other packages, including ones with similar names, are ignored."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            first = store_copy(root, 'yjs@13.6.0')
            second = store_copy(root, 'yjs@13.5.0_y-protocols@1.0.6', version='13.5.0')
            store_copy(root, 'y-protocols@1.0.6_yjs@13.6.0', name='y-protocols', version='1.0.6')
            store_copy(root, 'yjs-utils@1.0.0', name='yjs-utils', version='1.0.0')

            consumers = sweep_store(root, 'yjs', PNPM_SWEEP)

            self.assertEqual([second, first], [c.path for c in consumers])
            self.assertTrue(all(c.synthetic for c in consumers))

    def test_matching_folder_without_copy_is_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / 'node_modules' / '.pnpm' / 'yjs@13.6.0' / 'node_modules').mkdir(parents=True)

            self.assertEqual([], sweep_store(root, 'yjs', PNPM_SWEEP))

    def test_unknown_store_convention_yields_nothing(self):
        """Test that a missing store directory is not an error."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            store_copy(root, 'yjs@13.6.0')

            sweep = StoreSweep(('node_modules/.store',), '^{name}@npm-')
            self.assertEqual([], sweep_store(root, 'yjs', sweep))

    def test_custom_pattern_and_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            copy_dir = root / 'node_modules' / '.store' / 'yjs@npm-13.6.0-abc123' / 'node_modules' / 'yjs'
            copy_dir.mkdir(parents=True)

            sweep = StoreSweep(('node_modules/.store',), '^{name}@npm-')
            self.assertEqual([copy_dir], [c.path for c in sweep_store(root, 'yjs', sweep)])

    def test_scoped_package_name_encoding(self):
        pattern = compile_store_pattern('^{name}@', '@scope/doc')

        self.assertIsNotNone(pattern.search('@scope+doc@1.0.0'))
        self.assertIsNone(pattern.search('@scope+docs@1.0.0'))


if __name__ == '__main__':
    unittest.main()
