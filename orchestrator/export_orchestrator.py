"""
Batch orchestrator that exports every discovered Paper document in order.

A run is strictly sequential: one export call at a time, a short courtesy
pause between items, and a cancellation check at every item boundary.
"""

import logging
import time
from typing import Any, Dict, Optional

from config_loader import get_nested
from exporters import ArchiveWriter, FileDelivery, PaperExporter
from logger import ProgressTracker
from models import ExportRun, RunState
from views import ExportView
from .export_report import ExportReport

ARCHIVE_FILENAME = 'dropbox-paper-exports.zip'
DEFAULT_REQUEST_DELAY = 0.1


class ExportOrchestrator:
    """Sequences the export of a file list and finalizes the run."""

    def __init__(
        self,
        exporter: PaperExporter,
        view: ExportView,
        delivery: FileDelivery,
        config: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize export orchestrator.

        Args:
            exporter: Exports a single document
            view: Surface receiving status and progress updates
            delivery: Saves the final archive
            config: Configuration dictionary
            logger: Optional logger instance
        """
        self.exporter = exporter
        self.view = view
        self.delivery = delivery
        self.request_delay = get_nested(config or {}, 'export.request_delay', DEFAULT_REQUEST_DELAY)
        self.logger = logger or logging.getLogger('paper_markdown_exporter.orchestrator')

    def run(self, export_run: ExportRun) -> ExportReport:
        """
        Export every file of the run, once each, in enumeration order.

        Args:
            export_run: Files, archive mode and cancellation token of the run

        Returns:
            Report describing the run; ``outcome`` is COMPLETED or STOPPED
        """
        start_time = time.time()
        archive = ArchiveWriter(logger=self.logger) if export_run.use_zip else None
        failures_before = len(self.exporter.failures)
        archive_path = None

        self.logger.info(
            f"Exporting {export_run.total} documents (ZIP: {export_run.use_zip}, "
            f"delay: {self.request_delay}s)"
        )

        try:
            with ProgressTracker(total_items=export_run.total, item_type='documents') as tracker:
                for entry in export_run.files:
                    if export_run.cancel_token.cancelled:
                        break

                    exported = self.exporter.export_document(entry, archive)
                    snapshot = export_run.record(exported)
                    tracker.increment(success=bool(exported))
                    self.view.update_progress(snapshot)

                    export_run.cancel_token.wait(self.request_delay)

            if export_run.cancel_token.cancelled:
                export_run.outcome = RunState.STOPPED
                self.logger.warning(
                    f"Export stopped by user after {export_run.index}/{export_run.total} documents"
                )
                self.view.update_status("Export stopped by user.")
            else:
                archive_path = self._finalize(export_run, archive)
                export_run.outcome = RunState.COMPLETED
        finally:
            self.view.reset_progress()

        return ExportReport(
            total=export_run.total,
            attempted=export_run.index,
            exported=export_run.exported_count,
            outcome=export_run.outcome,
            use_zip=export_run.use_zip,
            failures=list(self.exporter.failures[failures_before:]),
            archive_path=archive_path,
            duration_seconds=time.time() - start_time
        )

    def _finalize(self, export_run: ExportRun, archive: Optional[ArchiveWriter]) -> Optional[str]:
        """Deliver the archive, or report the individual tally."""
        if archive is None:
            self.view.update_status(f"Exported {export_run.exported_count} Paper docs individually!")
            return None

        saved = self.delivery.save(archive.to_bytes(), ARCHIVE_FILENAME)
        self.logger.info(f"Archive with {len(archive)} entries written to {saved}")
        self.view.update_status(f"ZIP downloaded: {export_run.exported_count} files included!")
        return str(saved)


__all__ = ['ARCHIVE_FILENAME', 'ExportOrchestrator']
