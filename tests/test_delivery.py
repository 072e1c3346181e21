"""Tests for the ZIP archive writer and on-disk delivery."""

import io
import json
import os
import tempfile
import unittest
import zipfile
from pathlib import Path

from exporters import ArchiveWriter, FileDelivery
from models import ExportFailure, FailureKind, RunState
from orchestrator import ExportReport


class TestArchiveWriter(unittest.TestCase):
    def test_entries_keep_insertion_order(self):
        archive = ArchiveWriter()
        archive.add('Doc.md', 'one')
        archive.add('X/Doc2.md', 'two')

        with zipfile.ZipFile(io.BytesIO(archive.to_bytes())) as data:
            self.assertEqual(data.namelist(), ['Doc.md', 'X/Doc2.md'])
            self.assertEqual(data.getinfo('Doc.md').compress_type, zipfile.ZIP_DEFLATED)

    def test_duplicate_path_last_write_wins(self):
        archive = ArchiveWriter()
        archive.add('Doc.md', 'first')

        with self.assertLogs('paper_markdown_exporter.exporters.archive', level='WARNING'):
            archive.add('Doc.md', 'second')

        self.assertEqual(len(archive), 1)
        with zipfile.ZipFile(io.BytesIO(archive.to_bytes())) as data:
            self.assertEqual(data.read('Doc.md'), b'second')

    def test_empty_archive_is_valid(self):
        with zipfile.ZipFile(io.BytesIO(ArchiveWriter().to_bytes())) as data:
            self.assertEqual(data.namelist(), [])


class TestFileDelivery(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.output = Path(self.tmp.name) / 'exports'

    def test_creates_directory_and_writes_text(self):
        target = FileDelivery(self.output).save('# Título\n', 'A ___ Doc.md')

        self.assertEqual(target, self.output / 'A ___ Doc.md')
        self.assertEqual(target.read_text(encoding='utf-8'), '# Título\n')
        self.assertEqual(os.listdir(self.output), ['A ___ Doc.md'])

    def test_overwrites_existing_file(self):
        delivery = FileDelivery(self.output)
        delivery.save(b'old', 'out.zip')
        delivery.save(b'new', 'out.zip')
        self.assertEqual((self.output / 'out.zip').read_bytes(), b'new')

    def test_unwritable_target_raises(self):
        self.output.mkdir(parents=True)
        (self.output / 'taken').mkdir()

        with self.assertRaises(OSError):
            FileDelivery(self.output).save('x', 'taken')
        self.assertFalse((self.output / 'taken.part').exists())


class TestExportReport(unittest.TestCase):
    def make_report(self):
        return ExportReport(
            total=4,
            attempted=2,
            exported=1,
            outcome=RunState.STOPPED,
            failures=[ExportFailure('/Gone.paper', FailureKind.NOT_FOUND, 'path/not_found/...')]
        )

    def test_summary_counts(self):
        summary = self.make_report().to_dict()['summary']

        self.assertEqual(summary['outcome'], 'stopped')
        self.assertEqual(summary['skipped'], 2)
        self.assertEqual(summary['not_found'], 1)

    def test_console_report_lists_failures(self):
        text = self.make_report().format_console_report()
        self.assertIn("Skipped:   2", text)
        self.assertIn("[not_found] /Gone.paper: path/not_found/...", text)

    def test_json_report(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'reports', 'run.json')
            self.make_report().export_json_report(path)
            with open(path, encoding='utf-8') as f:
                data = json.load(f)

        self.assertEqual(data['failures'][0]['path'], '/Gone.paper')


if __name__ == '__main__':
    unittest.main()
