"""
Unit tests for the update and removal applier
"""

import unittest
import os
import sys
import zipfile
from unittest.mock import patch

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from oreclient.applier import UpdateApplier
from tests.fakes import write_jar
from tests.test_client import ClientTestCase


def declared_payload(path):
    with zipfile.ZipFile(path) as jar:
        return jar.read("payload.txt").decode()


class TestApplyUpdates(ClientTestCase):

    def test_update_replaces_artifact_declaring_plugin(self):
        # The active artifact was renamed by the operator, only its metadata identifies it
        old = self.activate("bar", "1.0", file_name="Bar Plugin (custom).jar")
        other = self.activate("other", "3.0")
        self.repository.add_project("bar", ["1.0", "1.1"])
        self.client.update_plugin("bar")

        report = UpdateApplier(self.client).apply_updates()

        self.assertTrue(report.ok)
        self.assertFalse(old.exists())
        self.assertTrue(other.exists())
        self.assertEqual(report.updated["bar"], self.mods_dir / "bar.jar")
        self.assertEqual(declared_payload(self.mods_dir / "bar.jar"), "1.1")
        self.assertEqual(os.listdir(self.updates_dir), [])
        self.assertFalse(self.client.has_pending_updates())

    def test_moved_update_avoids_name_collision(self):
        self.activate("bar", "1.0", file_name="bar-old.jar")
        unrelated = write_jar(self.mods_dir / "bar.jar", ["unrelated"])
        self.repository.add_project("bar", ["1.0", "1.1"])
        self.client.update_plugin("bar")

        report = UpdateApplier(self.client).apply_updates()

        self.assertEqual(report.updated["bar"], self.mods_dir / "bar (1).jar")
        self.assertTrue(unrelated.exists())
        self.assertFalse((self.mods_dir / "bar-old.jar").exists())

    def test_creates_missing_mods_dir(self):
        self.host.activate("bar", "1.0", None)
        self.repository.add_project("bar", ["1.0", "1.1"])
        self.client.update_plugin("bar")
        os.rmdir(self.mods_dir)

        report = UpdateApplier(self.client).apply_updates()

        self.assertTrue(report.ok)
        self.assertTrue((self.mods_dir / "bar.jar").exists())

    def test_orphans_in_updates_dir_are_cleared(self):
        self.updates_dir.mkdir()
        (self.updates_dir / "orphan (3).jar").write_bytes(b"left behind")
        UpdateApplier(self.client).apply()
        self.assertEqual(os.listdir(self.updates_dir), [])

    def test_one_failure_does_not_stop_the_queue(self):
        bar_active = self.activate("bar", "1.0")
        self.activate("baz", "1.0")
        self.repository.add_project("bar", ["1.0", "1.1"])
        self.repository.add_project("baz", ["1.0", "1.1"])
        bar_update = self.client.update_plugin("bar")
        self.client.update_plugin("baz")
        os.remove(bar_update.path)

        report = UpdateApplier(self.client).apply_updates()

        self.assertIn("bar", report.failures)
        self.assertIsInstance(report.failures["bar"], OSError)
        self.assertIn("baz", report.updated)
        self.assertTrue(bar_active.exists())
        self.assertFalse(report.ok)
        self.assertEqual(os.listdir(self.updates_dir), [])
        self.assertFalse(self.client.has_pending_updates())


class TestCompleteUninstallations(ClientTestCase):

    def test_removal_deletes_active_artifact(self):
        path = self.activate("baz", "1.0")
        self.client.uninstall_plugin("baz")
        self.assertTrue(path.exists())

        report = UpdateApplier(self.client).complete_uninstallations()

        self.assertEqual(report.removed, ["baz"])
        self.assertFalse(path.exists())
        self.assertFalse(self.client.has_pending_uninstallations())

    def test_missing_path_is_tolerated(self):
        path = self.activate("baz", "1.0")
        self.client.uninstall_plugin("baz")
        os.remove(path)
        self.host.activate("gone", "1.0", None)
        self.client.uninstall_plugin("gone")

        report = UpdateApplier(self.client).complete_uninstallations()

        self.assertTrue(report.ok)
        self.assertEqual(sorted(report.removed), ["baz", "gone"])

    def test_failed_removal_is_reported(self):
        self.activate("baz", "1.0")
        keep = self.activate("keep", "1.0")
        self.activate("zed", "1.0")
        self.client.uninstall_plugin("baz")
        self.client.uninstall_plugin("zed")

        real_remove = os.remove

        def remove(path):
            if str(path).endswith("baz.jar"):
                raise PermissionError("locked")
            real_remove(path)

        with patch("oreclient.applier.os.remove", side_effect=remove):
            report = UpdateApplier(self.client).complete_uninstallations()

        self.assertIn("baz", report.failures)
        self.assertEqual(report.removed, ["zed"])
        self.assertTrue(keep.exists())
        self.assertEqual(self.client.snapshot().pending_removals, frozenset({"baz"}))


class TestFullApply(ClientTestCase):

    def test_apply_resolves_every_staged_state(self):
        self.activate("bar", "1.0")
        baz = self.activate("baz", "1.0")
        self.repository.add_project("bar", ["1.0", "1.1"])
        self.repository.add_project("foo", ["1.2"])
        self.client.update_plugin("bar")
        self.client.uninstall_plugin("baz")
        self.client.install_plugin("foo")

        report = UpdateApplier(self.client).apply()

        self.assertTrue(report.ok)
        self.assertIn("bar", report.updated)
        self.assertEqual(report.removed, ["baz"])
        self.assertEqual(report.activated, ["foo"])
        self.assertFalse(baz.exists())
        self.assertTrue((self.mods_dir / "foo.jar").exists())
        snapshot = self.client.snapshot()
        self.assertEqual(snapshot.new_installs, {})
        self.assertEqual(snapshot.pending_updates, {})
        self.assertEqual(snapshot.pending_removals, frozenset())


if __name__ == '__main__':
    unittest.main()
