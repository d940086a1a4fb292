"""
Unit tests for the installed plugin metadata scanner
"""

import unittest
import tempfile
import os
import sys
import shutil
import json
import zipfile
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from oreclient.metadata import PluginMetadataScanner, find_artifact, parse_plugin_ids
from tests.fakes import write_jar


class TestParsePluginIds(unittest.TestCase):

    def test_list_form(self):
        raw = json.dumps([{"modid": "nucleus"}, {"modid": "nucleus-api"}]).encode()
        self.assertEqual(parse_plugin_ids(raw), {"nucleus", "nucleus-api"})

    def test_mod_list_form(self):
        raw = json.dumps({"modListVersion": 2, "modList": [{"modid": "worldedit"}]}).encode()
        self.assertEqual(parse_plugin_ids(raw), {"worldedit"})

    def test_entries_without_id_are_ignored(self):
        raw = json.dumps([{"name": "nameless"}, "junk"]).encode()
        self.assertEqual(parse_plugin_ids(raw), set())

    def test_invalid_json(self):
        with self.assertRaises(ValueError):
            parse_plugin_ids(b"{not json")


class TestPluginMetadataScanner(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix='ore_test_'))

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_scan_maps_paths_to_declared_ids(self):
        nucleus = write_jar(self.test_dir / "Nucleus-1.0.jar", ["nucleus", "nucleus-api"])
        renamed = write_jar(self.test_dir / "my favourite plugin (1).jar", ["bar"])

        metadata = PluginMetadataScanner(self.test_dir).scan()

        self.assertEqual(metadata, {nucleus: {"nucleus", "nucleus-api"}, renamed: {"bar"}})
        self.assertEqual(find_artifact(metadata, "bar"), renamed)
        self.assertIsNone(find_artifact(metadata, "baz"))

    def test_jar_without_descriptor_is_left_out(self):
        with zipfile.ZipFile(self.test_dir / "library.jar", 'w') as jar:
            jar.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
        self.assertEqual(PluginMetadataScanner(self.test_dir).scan(), {})

    def test_unreadable_and_foreign_files_are_skipped(self):
        (self.test_dir / "broken.jar").write_bytes(b"not a zip")
        (self.test_dir / "notes.txt").write_text("hello")
        write_jar(self.test_dir / "staged.part", ["foo"])
        good = write_jar(self.test_dir / "good.jar", ["good"])

        self.assertEqual(PluginMetadataScanner(self.test_dir).scan(), {good: {"good"}})

    def test_missing_directory(self):
        self.assertEqual(PluginMetadataScanner(self.test_dir / "missing").scan(), {})


if __name__ == '__main__':
    unittest.main()
