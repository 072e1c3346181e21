"""Tests for configuration loading, validation and CLI merging."""

import argparse
import os
import tempfile
import unittest
from unittest import mock

from config_loader import ConfigLoader, DEFAULT_CONFIG, get_nested


class TestConfigLoader(unittest.TestCase):
    def write_config(self, text: str) -> str:
        handle = tempfile.NamedTemporaryFile('w', suffix='.yaml', delete=False, encoding='utf-8')
        handle.write(text)
        handle.close()
        self.addCleanup(os.unlink, handle.name)
        return handle.name

    def test_defaults_without_file(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            config = ConfigLoader.load()

        self.assertEqual(get_nested(config, 'export.file_extension'), '.paper')
        self.assertEqual(get_nested(config, 'export.request_delay'), 0.1)
        self.assertEqual(ConfigLoader.resolve_token(config), '')

    def test_file_values_override_defaults_per_key(self):
        path = self.write_config("export:\n  use_zip: true\n")

        config = ConfigLoader.load(path)

        self.assertTrue(config['export']['use_zip'])
        self.assertEqual(config['export']['output_directory'], './paper-export')
        self.assertFalse(DEFAULT_CONFIG['export']['use_zip'])

    def test_env_token_substitution(self):
        with mock.patch.dict(os.environ, {'DROPBOX_ACCESS_TOKEN': 'sl.secret'}):
            config = ConfigLoader.load()
        self.assertEqual(ConfigLoader.resolve_token(config), 'sl.secret')

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            ConfigLoader.load('/nonexistent/config.yaml')

    def test_non_mapping_file_is_rejected(self):
        path = self.write_config("- just\n- a list\n")
        with self.assertRaises(ValueError):
            ConfigLoader.load(path)

    def test_validate_accepts_defaults(self):
        ConfigLoader.validate(ConfigLoader.load())

    def test_validate_rejects_bad_values(self):
        cases = {
            'dropbox.root_path': 'Work',
            'export.use_zip': 'yes',
            'export.file_extension': 'paper',
            'export.request_delay': -1,
            'advanced.request_timeout': 0,
            'logging.level': 'LOUD',
        }
        for dotted, value in cases.items():
            with self.subTest(field=dotted):
                config = ConfigLoader.load()
                section, key = dotted.split('.')
                config[section][key] = value
                with self.assertRaises(ValueError):
                    ConfigLoader.validate(config)

    def test_merge_with_args_prefers_cli(self):
        args = argparse.Namespace(
            token='cli-token', root_path='/Work', output_dir='./out', zip=True,
            delay=0.5, log_file='export.log', verbose=2
        )

        merged = ConfigLoader.merge_with_args(ConfigLoader.load(), args)

        self.assertEqual(ConfigLoader.resolve_token(merged), 'cli-token')
        self.assertEqual(merged['dropbox']['root_path'], '/Work')
        self.assertEqual(merged['export']['output_directory'], './out')
        self.assertTrue(merged['export']['use_zip'])
        self.assertEqual(merged['export']['request_delay'], 0.5)
        self.assertEqual(merged['logging'], {'level': 'DEBUG', 'file': 'export.log'})

    def test_merge_keeps_config_when_flags_absent(self):
        args = argparse.Namespace(token=None, root_path=None, output_dir=None, zip=None,
                                  delay=None, log_file=None, verbose=0)
        config = ConfigLoader.load()

        self.assertEqual(ConfigLoader.merge_with_args(config, args), config)


if __name__ == '__main__':
    unittest.main()
