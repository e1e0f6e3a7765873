"""Tests for core/yamlio.py YAML helpers."""

import tempfile
import unittest
from pathlib import Path

from core.cli_errors import ConfigError
from core.yamlio import load_mapping


class TestLoadMapping(unittest.TestCase):
    """Tests for load_mapping function."""

    def test_load_valid_yaml(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("key: value\nnumber: 42\n", encoding="utf-8")
            self.assertEqual(load_mapping(str(path)), {"key": "value", "number": 42})

    def test_load_missing_file_returns_empty(self):
        self.assertEqual(load_mapping("/nonexistent/path/config.yaml"), {})

    def test_load_none_or_empty_path_returns_empty(self):
        self.assertEqual(load_mapping(None), {})
        self.assertEqual(load_mapping(""), {})

    def test_load_whitespace_only_file_returns_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "whitespace.yaml"
            path.write_text("   \n\n  \t  ", encoding="utf-8")
            self.assertEqual(load_mapping(str(path)), {})

    def test_invalid_yaml_raises_config_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.yaml"
            path.write_text("key: [unclosed\n", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_mapping(str(path))

    def test_non_mapping_root_raises_config_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "list.yaml"
            path.write_text("- a\n- b\n", encoding="utf-8")
            with self.assertRaises(ConfigError) as ctx:
                load_mapping(str(path))
            self.assertIn("list", str(ctx.exception))


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
