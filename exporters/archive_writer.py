"""In-memory ZIP archive that collects exported Markdown documents."""

import io
import logging
import zipfile
from typing import Dict, List, Optional


class ArchiveWriter:
    """
    Accumulates named text entries and serializes them to one ZIP blob.

    Entries are kept in insertion order. Adding a path that already exists
    replaces the earlier content (last write wins).
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('paper_markdown_exporter.exporters.archive')
        self._entries: Dict[str, str] = {}

    def add(self, path: str, content: str) -> None:
        if path in self._entries:
            self.logger.warning(f"Archive path '{path}' already exists - replacing earlier document")
        self._entries[path] = content

    def names(self) -> List[str]:
        return list(self._entries)

    def to_bytes(self) -> bytes:
        """Serialize all entries into a deflate-compressed ZIP archive."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
            for path, content in self._entries.items():
                archive.writestr(path, content.encode('utf-8'))

        data = buffer.getvalue()
        buffer.close()
        self.logger.debug(f"Serialized {len(self._entries)} entries into {len(data)} bytes")
        return data

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ['ArchiveWriter']
