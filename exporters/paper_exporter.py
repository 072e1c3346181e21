"""Export single Paper documents to Markdown and deliver them."""

import logging
from typing import List, Optional

from dropbox_client import DropboxApiError
from models import ExportFailure, FailureKind, FileEntry, StatusLevel
from views import ExportView
from .archive_writer import ArchiveWriter
from .file_delivery import FileDelivery
from .path_normalizer import flatten_download_name, get_relative_path


class ExportError(Exception):
    """A single document could not be exported."""

    def __init__(self, kind: FailureKind, message: str):
        super().__init__(message)
        self.kind = kind


class PaperExporter:
    """
    Converts one Paper document to Markdown through the export endpoint.

    Delivery depends on whether an archive is supplied:
    - archive: the document is stored at ``dir/name`` inside it
    - no archive: the document is saved on its own under a flattened name
      that encodes its folders (``A ___ B ___ Doc.md``)

    Failures never propagate. They are reported to the view, recorded in
    ``failures`` and counted as zero.
    """

    def __init__(
        self,
        client,
        view: ExportView,
        delivery: FileDelivery,
        export_format: str = 'markdown',
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the exporter.

        Args:
            client: DropboxClient (or anything exposing ``export_file``)
            view: Surface receiving status messages
            delivery: Writes standalone documents to disk
            export_format: Export format passed to the provider
            logger: Logger instance
        """
        self.client = client
        self.view = view
        self.delivery = delivery
        self.export_format = export_format
        self.logger = logger or logging.getLogger('paper_markdown_exporter.exporters.paper_exporter')
        self.failures: List[ExportFailure] = []

    def export_document(self, entry: FileEntry, archive: Optional[ArchiveWriter] = None) -> int:
        """
        Export and deliver one document.

        Args:
            entry: Document to export
            archive: Archive collecting the run's documents, if any

        Returns:
            1 if the document was delivered, 0 otherwise
        """
        try:
            content = self._fetch_markdown(entry)

            if archive is not None:
                archive_path = get_relative_path(entry).archive_path
                archive.add(archive_path, content)
                self.view.update_status(f"Added to ZIP: {archive_path}")
            else:
                download_name = flatten_download_name(entry)
                self._deliver(content, download_name)
                self.view.update_status(f"Exported: {download_name}")

            return 1

        except ExportError as e:
            self.failures.append(ExportFailure(entry.path_display, e.kind, str(e)))
            if e.kind is FailureKind.NOT_FOUND:
                self.view.update_status(f"Doc not found: {entry.path_display}", StatusLevel.ERROR)
            else:
                self.view.update_status(f"Export error for {entry.path_display}: {e}", StatusLevel.ERROR)
            return 0

    def _fetch_markdown(self, entry: FileEntry) -> str:
        self.logger.debug(f"Exporting {entry.path_display} as {self.export_format}")
        try:
            return self.client.export_file(entry.path_lower, export_format=self.export_format)
        except DropboxApiError as e:
            self.logger.debug(f"Export error details for {entry.path_display}: {e.error}")
            kind = FailureKind.NOT_FOUND if e.is_not_found else FailureKind.GENERIC
            raise ExportError(kind, e.summary) from e
        except UnicodeDecodeError as e:
            raise ExportError(FailureKind.GENERIC, f"Exported content is not valid UTF-8: {e}") from e

    def _deliver(self, content: str, download_name: str) -> None:
        try:
            self.delivery.save(content, download_name)
        except OSError as e:
            raise ExportError(FailureKind.GENERIC, f"Could not save {download_name}: {e.strerror or e}") from e


__all__ = ['ExportError', 'PaperExporter']
