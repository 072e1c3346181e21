"""Tests for CLI argument handling and the console view."""

import io
import os
import tempfile
import unittest
from unittest import mock

from models import ProgressSnapshot, StatusLevel
from paper_export import create_argument_parser, main, resolve_config_path
from views import ConsoleView


class TestArgumentParser(unittest.TestCase):
    def test_defaults_leave_config_untouched(self):
        args = create_argument_parser().parse_args([])
        self.assertIsNone(args.zip)
        self.assertIsNone(args.delay)
        self.assertIsNone(args.root_path)
        self.assertEqual(args.verbose, 0)

    def test_zip_flags(self):
        parser = create_argument_parser()
        self.assertTrue(parser.parse_args(['--zip']).zip)
        self.assertFalse(parser.parse_args(['--no-zip']).zip)

    def test_explicit_config_path_wins(self):
        args = create_argument_parser().parse_args(['--config', 'custom.yaml'])
        self.assertEqual(resolve_config_path(args), 'custom.yaml')

    def test_no_config_file_falls_back_to_defaults(self):
        args = create_argument_parser().parse_args([])
        with tempfile.TemporaryDirectory() as tmp:
            cwd = os.getcwd()
            os.chdir(tmp)
            try:
                self.assertIsNone(resolve_config_path(args))
            finally:
                os.chdir(cwd)


class TestMain(unittest.TestCase):
    def test_invalid_config_exits_with_2(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'config.yaml')
            with open(path, 'w', encoding='utf-8') as f:
                f.write("export:\n  use_zip: false\n")
            argv = ['paper-export', '--config', path, '--root-path', 'relative']
            with mock.patch('sys.argv', argv), mock.patch('sys.stderr', new_callable=io.StringIO) as err:
                self.assertEqual(main(), 2)

        self.assertIn("root_path", err.getvalue())

    def test_missing_config_file_exits_with_2(self):
        argv = ['paper-export', '--config', '/nonexistent.yaml']
        with mock.patch('sys.argv', argv), mock.patch('sys.stderr', new_callable=io.StringIO):
            self.assertEqual(main(), 2)


class TestConsoleView(unittest.TestCase):
    def test_status_lines_are_timestamped(self):
        view = ConsoleView(show_progress=False)
        with mock.patch('views.tqdm.write') as write:
            view.update_status("Exported: Doc.md")
            view.update_status("Doc not found: /Gone.paper", StatusLevel.ERROR)

        first, second = write.call_args_list
        self.assertRegex(first.args[0], r'^\d{2}:\d{2}:\d{2}: Exported: Doc.md$')
        self.assertIn('file', second.kwargs)

    def test_progress_without_bar_is_logged(self):
        view = ConsoleView(show_progress=False)
        with self.assertLogs('paper_markdown_exporter.console', level='DEBUG') as logs:
            view.update_progress(ProgressSnapshot(1, 2))
        self.assertIn("Progress: 1/2 files (50%)", logs.output[0])


if __name__ == '__main__':
    unittest.main()
