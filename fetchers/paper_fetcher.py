"""Enumerate Paper documents through the paginated Dropbox listing API."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from config_loader import get_nested
from dropbox_client import DropboxApiError
from models import FileEntry

GENERIC_LISTING_ERROR = "unknown error while listing files"


class FetcherError(Exception):
    """Base exception for fetcher-related errors."""
    pass


class EnumerationError(FetcherError):
    """A listing page could not be retrieved."""

    def __init__(self, summary: str):
        super().__init__(f"Failed to list files: {summary}")
        self.summary = summary


class PaperFetcher:
    """Walks the account recursively and collects documents by extension."""

    def __init__(self, client, config: Optional[Dict[str, Any]] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize fetcher.

        Args:
            client: DropboxClient (or anything exposing ``list_folder`` and
                ``list_folder_continue``)
            config: Configuration dictionary
            logger: Logger instance (optional, uses module logger if not provided)
        """
        config = config or {}
        self.client = client
        self.extension = get_nested(config, 'export.file_extension', '.paper').lower()
        self.root_path = get_nested(config, 'dropbox.root_path', '') or ''
        self.logger = logger or logging.getLogger('paper_markdown_exporter.fetcher')

    def collect_paper_files(self) -> List[FileEntry]:
        """
        Collect every matching document, following the listing cursor until
        no pages remain.

        Returns:
            Matching entries in listing order

        Raises:
            EnumerationError: If any listing page fails
        """
        files: List[FileEntry] = []
        pages = 0

        try:
            result = self.client.list_folder(path=self.root_path, recursive=True)
            pages += 1
            files.extend(self._matching_entries(result.get('entries', [])))

            while result.get('has_more'):
                result = self.client.list_folder_continue(result['cursor'])
                pages += 1
                files.extend(self._matching_entries(result.get('entries', [])))
                self.logger.debug(f"Listed {pages} pages, {len(files)} matching files so far...")

        except DropboxApiError as e:
            self.logger.error(f"Listing failed after {pages} pages: {e.summary}")
            raise EnumerationError(e.error_summary or str(e) or GENERIC_LISTING_ERROR) from e
        except (KeyError, AttributeError) as e:
            raise EnumerationError(f"malformed listing response ({e})") from e

        self.logger.info(f"Found {len(files)} {self.extension} files across {pages} listing pages")
        return files

    def _matching_entries(self, entries: Iterable[Dict[str, Any]]) -> List[FileEntry]:
        return [
            FileEntry.from_metadata(entry)
            for entry in entries
            if entry.get('.tag') == 'file'
            and entry.get('name', '').lower().endswith(self.extension)
        ]


__all__ = ['EnumerationError', 'FetcherError', 'PaperFetcher']
