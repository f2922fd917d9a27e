"""Tests for configuration parsing, loading and root initialization."""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from orgadmin_cli.config import (
    AdminConfig,
    format_config_text,
    parse_bool,
    parse_config_text,
    parse_overrides,
)
from orgadmin_cli.errors import ConfigurationError, OperationError, PreconditionError, UsageError
from orgadmin_cli.storage import FilesystemStorage, MemoryStorage


class TestConfigText(unittest.TestCase):
    """Test the name=value file format."""

    def test_parse(self) -> None:
        """Test comments, blanks and values containing '='."""
        text = "# server settings\n\nverbose = 1\naudit=0\nnote=a=b\nbroken\n"
        self.assertEqual(
            parse_config_text(text),
            {'verbose': '1', 'audit': '0', 'note': 'a=b'},
        )

    def test_format(self) -> None:
        """Test keys are sorted and booleans written as 1/0."""
        self.assertEqual(
            format_config_text({'verbose': False, 'audit': True, 'key': 'abc'}),
            "audit=1\nkey=abc\nverbose=0\n",
        )

    def test_parse_bool(self) -> None:
        """Test accepted spellings of true."""
        for raw in ["1", "true", "Yes", " on ", "T"]:
            with self.subTest(raw=raw):
                self.assertTrue(parse_bool(raw))
        for raw in ["0", "false", "off", ""]:
            with self.subTest(raw=raw):
                self.assertFalse(parse_bool(raw))


class TestParseOverrides(unittest.TestCase):
    """Test --set parsing."""

    def test_valid(self) -> None:
        """Test names and values are split on the first '='."""
        self.assertEqual(
            parse_overrides(["verbose=1", " audit = off ", "x=a=b"]),
            {'verbose': '1', 'audit': 'off', 'x': 'a=b'},
        )

    def test_missing_equals(self) -> None:
        """Test an assignment without '=' is a usage error."""
        with self.assertRaises(UsageError):
            parse_overrides(["verbose"])

    def test_empty_name(self) -> None:
        """Test an assignment with an empty name is a usage error."""
        with self.assertRaises(UsageError):
            parse_overrides(["=1"])


class TestAdminConfig(unittest.TestCase):
    """Test settings resolution."""

    def test_defaults(self) -> None:
        """Test schema defaults."""
        config = AdminConfig(root="/srv/data")
        self.assertEqual(config.root, "/srv/data")
        self.assertFalse(config.verbose)
        self.assertTrue(config.audit)
        self.assertIsNone(config.get('missing'))

    def test_coercion(self) -> None:
        """Test string values are coerced to the schema type."""
        config = AdminConfig(root="/r", verbose="yes", audit="0", unknown="x")
        self.assertIs(config.verbose, True)
        self.assertIs(config.audit, False)
        self.assertNotIn('unknown', config.values)

    def test_bad_type(self) -> None:
        """Test values that cannot be coerced."""
        with self.assertRaises(ConfigurationError):
            AdminConfig(root="/r", verbose=3)

    def test_load_precedence(self) -> None:
        """Test file < overrides < verbose flag."""
        storage = MemoryStorage(dirs=["/srv/data"])
        storage.write_text("/srv/data/config", "verbose=1\naudit=0\nroot=/elsewhere\n")

        config = AdminConfig.load(root="/srv/data", storage=storage)
        self.assertEqual(config.root, "/srv/data")
        self.assertTrue(config.verbose)
        self.assertFalse(config.audit)

        config = AdminConfig.load(root="/srv/data", overrides={'verbose': '0'}, storage=storage)
        self.assertFalse(config.verbose)

        config = AdminConfig.load(root="/srv/data", overrides={'verbose': '0'},
                                  verbose=True, storage=storage)
        self.assertTrue(config.verbose)

    def test_load_without_config_file(self) -> None:
        """Test a root without a config file uses the defaults."""
        config = AdminConfig.load(root="/srv/data", storage=MemoryStorage(dirs=["/srv/data"]))
        self.assertFalse(config.verbose)
        self.assertTrue(config.audit)

    def test_load_from_environment(self) -> None:
        """Test the root falls back to $ORGADMIN_DATA."""
        with patch.dict(os.environ, {'ORGADMIN_DATA': '/from/env'}):
            config = AdminConfig.load(storage=MemoryStorage())
        self.assertEqual(config.root, "/from/env")

    def test_load_no_root(self) -> None:
        """Test an unset root stays empty rather than failing early."""
        with patch.dict(os.environ, {}, clear=True):
            config = AdminConfig.load(storage=MemoryStorage())
        self.assertEqual(config.root, "")


class TestValidateRoot(unittest.TestCase):
    """Test data root validation."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self.storage = MemoryStorage(dirs=["/srv/data"])

    def test_missing_option(self) -> None:
        """Test an empty root."""
        with self.assertRaises(ConfigurationError) as cm:
            AdminConfig(root="").validate_root(self.storage)
        self.assertEqual(cm.exception.message, "The '--data' option is required.")

    def test_missing_directory(self) -> None:
        """Test a root that is not a directory."""
        self.storage.create_file("/srv/file")
        for root in ["/nowhere", "/srv/file"]:
            with self.subTest(root=root):
                with self.assertRaises(ConfigurationError) as cm:
                    AdminConfig(root=root).validate_root(self.storage)
                self.assertEqual(cm.exception.message, "The '--data' path does not exist.")

    def test_valid(self) -> None:
        """Test an existing directory is returned as a path."""
        self.assertEqual(AdminConfig(root="/srv/data").validate_root(self.storage), Path("/srv/data"))


class TestInitialize(unittest.TestCase):
    """Test data root initialization on disk."""

    def setUp(self) -> None:
        """Set up test fixtures."""
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.storage = FilesystemStorage()

    def tearDown(self) -> None:
        """Clean up the temporary root."""
        self.tmp.cleanup()

    def test_initialize(self) -> None:
        """Test orgs/ and the default config file are created."""
        config = AdminConfig(root=str(self.root))
        self.assertEqual(config.initialize(self.storage), self.root)
        self.assertTrue((self.root / "orgs").is_dir())
        self.assertEqual((self.root / "config").read_text(), "audit=1\nverbose=0\n")

    def test_already_initialized(self) -> None:
        """Test a second initialization is refused."""
        config = AdminConfig(root=str(self.root))
        config.initialize(self.storage)
        with self.assertRaises(PreconditionError):
            config.initialize(self.storage)

    def test_missing_root(self) -> None:
        """Test the root must already exist."""
        with self.assertRaises(ConfigurationError):
            AdminConfig(root=str(self.root / "missing")).initialize(self.storage)

    def test_write_failure(self) -> None:
        """Test a failed write is an operation error."""
        with patch.object(self.storage, "write_text", return_value=False):
            with self.assertRaises(OperationError):
                AdminConfig(root=str(self.root)).initialize(self.storage)


if __name__ == '__main__':
    unittest.main()
