"""
Unit tests for install confirmation
"""

import unittest
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from oreclient.confirmation import ConfirmationRegistry, InstallStatus
from oreclient.exceptions import ErrorKind
from tests.test_client import ClientTestCase


class TestConfirmationRegistry(ClientTestCase):

    def setUp(self):
        super().setUp()
        self.registry = ConfirmationRegistry(self.client)
        self.repository.add_project("legacy", ["1.0"], dependencies={"1.0": [("spongeapi", "5.0.0")]})

    def test_compatible_install_needs_no_confirmation(self):
        self.repository.add_project("foo", ["1.2"], dependencies={"1.2": [("spongeapi", "7.0.0")]})

        outcome = self.registry.request_install("foo")

        self.assertIs(outcome.status, InstallStatus.INSTALLED)
        self.assertFalse(outcome.requires_confirmation)
        self.assertEqual(outcome.installation.version, "1.2")

    def test_incompatible_install_is_parked(self):
        outcome = self.registry.request_install("legacy")

        self.assertTrue(outcome.requires_confirmation)
        self.assertEqual(outcome.required, "5.0.0")
        self.assertEqual(outcome.current, "7.1.0")
        self.assertIsNotNone(outcome.token)
        self.assertEqual(self.registry.pending(outcome.token).plugin_id, "legacy")
        self.assertFalse(self.client.is_installed("legacy"))
        self.assertEqual(self.repository.downloads, [])

    def test_confirm_installs_with_override(self):
        token = self.registry.request_install("legacy").token

        outcome = self.registry.confirm(token)

        self.assertIs(outcome.status, InstallStatus.INSTALLED)
        self.assertTrue(self.client.is_installed("legacy"))
        self.assertIsNone(self.registry.pending(token))

    def test_decline_drops_request(self):
        token = self.registry.request_install("legacy").token

        outcome = self.registry.confirm(token, accept=False)

        self.assertIs(outcome.status, InstallStatus.DECLINED)
        self.assertFalse(self.client.is_installed("legacy"))
        self.assertOreError(ErrorKind.NO_PENDING_CONFIRMATION, self.registry.confirm, token)

    def test_unknown_token(self):
        self.assertOreError(ErrorKind.NO_PENDING_CONFIRMATION, self.registry.confirm, "nope")

    def test_other_errors_propagate(self):
        self.assertOreError(ErrorKind.PLUGIN_NOT_FOUND, self.registry.request_install, "ghost")


if __name__ == '__main__':
    unittest.main()
