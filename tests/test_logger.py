"""Tests for logging setup, progress summaries and config redaction."""

import logging
import os
import tempfile
import unittest

from logger import LOGGER_NAME, ProgressTracker, log_config, setup_logging


class TestSetupLogging(unittest.TestCase):
    def tearDown(self):
        setup_logging(console=False)

    def test_file_handler_uses_shared_format(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'export.log')
            logger = setup_logging(level='info', log_file=path, console=False)

            logging.getLogger(f'{LOGGER_NAME}.tests').info("hello from the exporter")
            for handler in logger.handlers:
                handler.flush()

            with open(path, encoding='utf-8') as f:
                contents = f.read()
            setup_logging(console=False)

        self.assertRegex(
            contents,
            r'\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} - paper_markdown_exporter\.tests - INFO - hello from the exporter'
        )

    def test_verbosity_levels(self):
        self.assertEqual(setup_logging(verbosity=0, console=False).level, logging.WARNING)
        self.assertEqual(setup_logging(verbosity=1, console=False).level, logging.INFO)
        self.assertEqual(setup_logging(verbosity=2, console=False).level, logging.DEBUG)

    def test_invalid_level_is_rejected(self):
        with self.assertRaises(ValueError):
            setup_logging(level='LOUD', console=False)

    def test_tui_mode_has_no_console_handler(self):
        logger = setup_logging(console=False)
        self.assertTrue(all(isinstance(h, logging.NullHandler) for h in logger.handlers))


class TestProgressTracker(unittest.TestCase):
    def test_summary_reports_failures_as_warning(self):
        with self.assertLogs(LOGGER_NAME, level='INFO') as logs:
            with ProgressTracker(total_items=2, item_type='documents') as tracker:
                tracker.increment(success=True)
                tracker.increment(success=False)

        self.assertEqual((tracker.successful_items, tracker.failed_items), (1, 1))
        self.assertIn(f"WARNING:{LOGGER_NAME}:Failed: 1", logs.output)


class TestLogConfig(unittest.TestCase):
    def test_token_is_redacted(self):
        config = {'dropbox': {'access_token': 'sl.very-secret', 'root_path': ''}}

        with self.assertLogs(LOGGER_NAME, level='INFO') as logs:
            log_config(config)

        output = "\n".join(logs.output)
        self.assertNotIn('sl.very-secret', output)
        self.assertIn("Access Token: ***REDACTED***", output)


if __name__ == '__main__':
    unittest.main()
