"""Unit tests for regpush.catalog."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from regpush.catalog import (
    Catalogs,
    CatalogError,
    CredentialEntry,
    RegistryEntry,
    from_file,
)
from regpush.catalog.static import StaticCatalog
from regpush.catalog.yamlfile import YamlCatalog

from conftest import SAMPLE_CATALOG, make_credential, make_registry


class TestStaticCatalog(unittest.TestCase):
    """Tests for StaticCatalog."""

    def test_empty(self):
        self.assertEqual(StaticCatalog().list(), [])

    def test_lists_entries_in_order(self):
        a = make_registry(id="a")
        b = make_registry(id="b")
        self.assertEqual(StaticCatalog([a, b]).list(), [a, b])

    def test_list_returns_copy(self):
        cat = StaticCatalog([make_registry()])
        cat.list().clear()
        self.assertEqual(len(cat.list()), 1)


class TestEntries(unittest.TestCase):
    """Tests for the entry dataclasses."""

    def test_registry_entry_frozen(self):
        entry = make_registry()
        with self.assertRaises(AttributeError):
            entry.id = "other"

    def test_credential_repr_hides_secret(self):
        entry = make_credential(secret_value="topsecret")
        self.assertNotIn("topsecret", repr(entry))
        self.assertIn("deploy", repr(entry))


class TestYamlCatalog(unittest.TestCase):
    """Tests for YamlCatalog."""

    def setUp(self):
        self._dir = tempfile.TemporaryDirectory()
        self.base = Path(self._dir.name)
        self.path = self.base / "registries.yaml"

    def tearDown(self):
        self._dir.cleanup()

    def _write(self, text: str) -> Path:
        self.path.write_text(text)
        return self.path

    def test_registries(self):
        self._write(SAMPLE_CATALOG)
        result = YamlCatalog(self.path, "registries").list()
        self.assertEqual(result, [
            RegistryEntry(id="1sr1", server_address="registry.example.com:5000"),
            RegistryEntry(id="1sr2", server_address="index.docker.io"),
        ])

    def test_credentials(self):
        self._write(SAMPLE_CATALOG)
        result = YamlCatalog(self.path, "credentials").list()
        self.assertEqual(result, [
            CredentialEntry(registry_id="1sr1", public_value="deploy", secret_value="s3cret"),
        ])

    def test_numeric_ids_become_strings(self):
        self._write(
            "registries:\n"
            "  - id: 42\n"
            "    server_address: r.example.com\n"
        )
        self.assertEqual(YamlCatalog(self.path, "registries").list()[0].id, "42")

    def test_missing_section_is_empty(self):
        self._write("registries: []\n")
        self.assertEqual(YamlCatalog(self.path, "credentials").list(), [])

    def test_empty_file_is_empty(self):
        self._write("")
        self.assertEqual(YamlCatalog(self.path, "registries").list(), [])

    def test_secret_from_env(self):
        self._write(
            "credentials:\n"
            "  - registry_id: 1sr1\n"
            "    public_value: deploy\n"
            "    secret_value_env: REGPUSH_TEST_TOKEN\n"
        )
        with patch.dict(os.environ, {"REGPUSH_TEST_TOKEN": "from-env"}):
            result = YamlCatalog(self.path, "credentials").list()
        self.assertEqual(result[0].secret_value, "from-env")

    def test_secret_env_unset_warns(self):
        self._write(
            "credentials:\n"
            "  - registry_id: 1sr1\n"
            "    public_value: deploy\n"
            "    secret_value_env: REGPUSH_TEST_UNSET\n"
        )
        env = {k: v for k, v in os.environ.items() if k != "REGPUSH_TEST_UNSET"}
        with patch.dict(os.environ, env, clear=True), \
                patch("regpush.catalog.yamlfile.log") as mock_log:
            result = YamlCatalog(self.path, "credentials").list()
        self.assertEqual(result[0].secret_value, "")
        mock_log.warn.assert_called_once()

    def test_reread_on_every_list(self):
        self._write("registries: []\n")
        cat = YamlCatalog(self.path, "registries")
        self.assertEqual(cat.list(), [])
        self._write(SAMPLE_CATALOG)
        self.assertEqual(len(cat.list()), 2)

    def test_missing_file_raises(self):
        with self.assertRaises(CatalogError):
            YamlCatalog(self.base / "nope.yaml", "registries").list()

    def test_invalid_yaml_raises(self):
        self._write("registries: [\n")
        with self.assertRaises(CatalogError):
            YamlCatalog(self.path, "registries").list()

    def test_non_mapping_document_raises(self):
        self._write("- a\n- b\n")
        with self.assertRaises(CatalogError):
            YamlCatalog(self.path, "registries").list()

    def test_section_not_list_raises(self):
        self._write("registries: {id: x}\n")
        with self.assertRaises(CatalogError):
            YamlCatalog(self.path, "registries").list()

    def test_missing_key_raises(self):
        self._write("registries:\n  - id: x\n")
        with self.assertRaises(CatalogError) as ctx:
            YamlCatalog(self.path, "registries").list()
        self.assertIn("server_address", str(ctx.exception))

    def test_entry_not_mapping_raises(self):
        self._write("credentials:\n  - just-a-string\n")
        with self.assertRaises(CatalogError):
            YamlCatalog(self.path, "credentials").list()

    def test_unknown_section(self):
        with self.assertRaises(ValueError):
            YamlCatalog(self.path, "users")


class TestFromFile(unittest.TestCase):
    """Tests for the from_file() factory."""

    def test_returns_yaml_catalogs(self):
        cats = from_file("/tmp/registries.yaml")
        self.assertIsInstance(cats, Catalogs)
        self.assertIsInstance(cats.registries, YamlCatalog)
        self.assertIsInstance(cats.credentials, YamlCatalog)
        self.assertEqual(cats.registries.section, "registries")
        self.assertEqual(cats.credentials.section, "credentials")
        self.assertEqual(cats.registries.path, Path("/tmp/registries.yaml"))


if __name__ == "__main__":
    unittest.main()
