"""Tests for entity listing."""

import unittest

from orgadmin_cli.errors import PreconditionError, UsageError
from orgadmin_cli.inventory import Inventory
from orgadmin_cli.storage import MemoryStorage


class TestInventory(unittest.TestCase):
    """Test organization and member listings."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self.storage = MemoryStorage(dirs=[
            "/data/orgs/acme/groups/dev",
            "/data/orgs/acme/groups/ops",
            "/data/orgs/acme/users/alice",
            "/data/orgs/globex/groups",
            "/data/orgs/globex/users",
        ])
        self.storage.create_file("/data/orgs/globex/suspended")
        self.storage.create_file("/data/orgs/acme/users/alice/suspended")
        self.inventory = Inventory(self.storage, "/data")

    def test_organizations(self) -> None:
        """Test rows are sorted with counts and state."""
        self.assertEqual(self.inventory.organizations(), [
            {'kind': 'organization', 'name': 'acme', 'state': 'active', 'groups': 2, 'users': 1},
            {'kind': 'organization', 'name': 'globex', 'state': 'suspended', 'groups': 0, 'users': 0},
        ])

    def test_no_orgs_dir(self) -> None:
        """Test an uninitialized root lists nothing."""
        self.assertEqual(Inventory(MemoryStorage(dirs=["/empty"]), "/empty").organizations(), [])

    def test_members(self) -> None:
        """Test groups come before users."""
        self.assertEqual(self.inventory.members("acme"), [
            {'kind': 'group', 'name': 'dev', 'state': 'active'},
            {'kind': 'group', 'name': 'ops', 'state': 'active'},
            {'kind': 'user', 'name': 'alice', 'state': 'suspended'},
        ])

    def test_members_missing_org(self) -> None:
        """Test an absent organization."""
        with self.assertRaises(PreconditionError):
            self.inventory.members("initech")

    def test_members_invalid_name(self) -> None:
        """Test an invalid organization name."""
        with self.assertRaises(UsageError):
            self.inventory.members("../etc")


if __name__ == '__main__':
    unittest.main()
