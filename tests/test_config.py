"""
Tests for regindex configuration loading.
"""

import json
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from regindex.config import (
    ConfigError,
    apply_env_overrides,
    configure_logging,
    get_config_path,
    get_default_config,
    load_config,
    merge_configs,
)


class TestConfig(unittest.TestCase):
    """Test configuration defaults, files and environment overrides."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {}, clear=True)
        self.env.start()

    def tearDown(self):
        import shutil
        self.env.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, name, content):
        path = Path(self.temp_dir) / name
        path.write_text(content)
        return path

    def test_defaults(self):
        config = get_default_config()
        self.assertEqual(config['storage']['rootdirectory'], '~/.regindex')
        self.assertEqual(config['server']['port'], 5001)
        self.assertEqual(config['logging']['level'], 'INFO')

    def test_config_path_from_env(self):
        os.environ['REGINDEX_CONFIG'] = '/etc/regindex/config.yaml'
        self.assertEqual(get_config_path(), Path('/etc/regindex/config.yaml'))

    def test_load_json(self):
        path = self._write('config.json', json.dumps({'storage': {'rootdirectory': '/data'}}))
        config = load_config(path)
        self.assertEqual(config['storage']['rootdirectory'], '/data')
        self.assertEqual(config['server']['port'], 5001)

    def test_load_yaml(self):
        path = self._write('config.yaml', "server:\n  port: 8080\n  host: 0.0.0.0\n")
        config = load_config(path)
        self.assertEqual(config['server']['port'], 8080)
        self.assertEqual(config['server']['host'], '0.0.0.0')

    def test_load_toml(self):
        path = self._write('config.toml', '[logging]\nlevel = "DEBUG"\n')
        config = load_config(path)
        self.assertEqual(config['logging']['level'], 'DEBUG')

    def test_empty_yaml_uses_defaults(self):
        path = self._write('config.yml', "")
        self.assertEqual(load_config(path), get_default_config())

    def test_invalid_file_raises(self):
        path = self._write('config.json', "{broken")
        with self.assertRaises(ConfigError):
            load_config(path)

    def test_non_mapping_raises(self):
        path = self._write('config.yaml', "- a\n- b\n")
        with self.assertRaises(ConfigError):
            load_config(path)

    def test_missing_explicit_file_raises(self):
        with self.assertRaises(ConfigError):
            load_config(Path(self.temp_dir) / 'absent.json')

    def test_missing_default_file_uses_defaults(self):
        os.environ['REGINDEX_CONFIG'] = str(Path(self.temp_dir) / 'absent.json')
        self.assertEqual(load_config(), get_default_config())

    def test_env_overrides(self):
        os.environ['REGINDEX_STORAGE_ROOTDIRECTORY'] = '/var/lib/registry'
        os.environ['REGINDEX_SERVER_PORT'] = '9000'
        os.environ['REGINDEX_SERVER_CORS_ORIGINS'] = 'https://ui.example.com'

        config = apply_env_overrides(get_default_config())

        self.assertEqual(config['storage']['rootdirectory'], '/var/lib/registry')
        self.assertEqual(config['server']['port'], 9000)
        self.assertEqual(config['server']['cors_origins'], 'https://ui.example.com')

    def test_unknown_env_keys_are_ignored(self):
        os.environ['REGINDEX_DB'] = '/tmp/x.sqlite3'
        os.environ['REGINDEX_NOPE_VALUE'] = '1'
        self.assertEqual(apply_env_overrides(get_default_config()), get_default_config())

    def test_merge_configs_is_recursive(self):
        merged = merge_configs({'a': {'b': 1, 'c': 2}}, {'a': {'c': 3}, 'd': 4})
        self.assertEqual(merged, {'a': {'b': 1, 'c': 3}, 'd': 4})

    def test_configure_logging(self):
        configure_logging({'logging': {'level': 'debug'}})
        self.assertEqual(logging.getLogger().level, logging.DEBUG)
        configure_logging(get_default_config())
        self.assertEqual(logging.getLogger().level, logging.INFO)


if __name__ == '__main__':
    unittest.main()
