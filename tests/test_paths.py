"""
Unit tests for artifact path helpers
"""

import unittest
import tempfile
import os
import sys
import shutil
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from oreclient.paths import artifact_stem, clean_directory, create_partial_file, find_available_path


class TestFindAvailablePath(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix='ore_test_'))

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_free_target_is_returned_unchanged(self):
        target = self.test_dir / "foo.jar"
        self.assertEqual(find_available_path("foo", target), target)

    def test_lowest_unused_disambiguator(self):
        (self.test_dir / "foo.jar").touch()
        (self.test_dir / "foo (1).jar").touch()
        (self.test_dir / "foo (2).jar").touch()

        path = find_available_path("foo", self.test_dir / "foo.jar")

        self.assertEqual(path, self.test_dir / "foo (3).jar")
        self.assertFalse(path.exists())

    def test_never_returns_existing_path(self):
        for n in range(5):
            path = find_available_path("bar", self.test_dir / "bar.jar")
            self.assertFalse(path.exists())
            path.touch()
        self.assertEqual(len(os.listdir(self.test_dir)), 5)
        self.assertTrue((self.test_dir / "bar (4).jar").exists())


class TestPathHelpers(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix='ore_test_'))

    def tearDown(self):
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_artifact_stem(self):
        self.assertEqual(artifact_stem(Path("/mods/Nucleus-1.1.0.jar")), "Nucleus-1.1.0")
        self.assertEqual(artifact_stem(Path("plain")), "plain")

    def test_partial_file_is_hidden_from_jar_scans(self):
        partial = create_partial_file(self.test_dir)
        self.assertTrue(partial.exists())
        self.assertFalse(partial.name.endswith(".jar"))

    def test_clean_directory_keeps_directory(self):
        (self.test_dir / "a.jar").touch()
        (self.test_dir / "nested").mkdir()
        (self.test_dir / "nested" / "b.jar").touch()
        clean_directory(self.test_dir)
        self.assertTrue(self.test_dir.is_dir())
        self.assertEqual(os.listdir(self.test_dir), [])

    def test_clean_missing_directory(self):
        clean_directory(self.test_dir / "missing")


if __name__ == '__main__':
    unittest.main()
