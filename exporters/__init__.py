"""Markdown export package for the Dropbox Paper export pipeline.

Package Structure:
- path_normalizer: Sanitized relative and flattened paths for documents
- paper_exporter: Exports one document and delivers it
- archive_writer: In-memory ZIP collecting a run's documents
- file_delivery: Writes payloads to the output directory
"""

from .archive_writer import ArchiveWriter
from .file_delivery import FileDelivery
from .paper_exporter import ExportError, PaperExporter
from .path_normalizer import (
    flatten_download_name,
    get_relative_path,
    markdown_filename,
    sanitize_filename
)

__all__ = [
    'ArchiveWriter',
    'ExportError',
    'FileDelivery',
    'PaperExporter',
    'flatten_download_name',
    'get_relative_path',
    'markdown_filename',
    'sanitize_filename'
]
