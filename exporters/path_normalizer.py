"""Derive sanitized local paths for exported Paper documents."""

import re
from typing import List

from models import FileEntry, RelativePath

ILLEGAL_CHARS_PATTERN = re.compile(r'[<>:"/\\|?*]')
PAPER_SUFFIX_PATTERN = re.compile(r'\.paper$', re.IGNORECASE)

MARKDOWN_EXTENSION = '.md'
FLATTEN_SEPARATOR = ' ___ '


def sanitize_filename(filename: str) -> str:
    """Strip characters that are illegal in common filesystems."""
    return ILLEGAL_CHARS_PATTERN.sub('', filename)


def markdown_filename(name: str) -> str:
    """
    Turn a document name into its Markdown filename.

    ``Notes.paper`` becomes ``Notes.md``; names without the Paper extension
    keep their full name and gain ``.md``.
    """
    stem = PAPER_SUFFIX_PATTERN.sub('', name)
    return sanitize_filename(stem + MARKDOWN_EXTENSION)


def folder_segments(entry: FileEntry) -> List[str]:
    """Sanitized folder names between the account root and the document."""
    parts = [part for part in entry.path_display.split('/') if part]
    return [sanitize_filename(part) for part in parts[:-1]]


def get_relative_path(entry: FileEntry) -> RelativePath:
    """
    Derive the relative folder and Markdown filename for an entry.

    Args:
        entry: File entry from the listing API

    Returns:
        RelativePath with ``dir`` empty for documents at the root
    """
    return RelativePath(
        dir='/'.join(folder_segments(entry)),
        name=markdown_filename(entry.name)
    )


def flatten_download_name(entry: FileEntry) -> str:
    """
    Build a single filename that still shows the folder structure.

    ``/A/B/Doc.paper`` becomes ``A ___ B ___ Doc.md``.
    """
    parts = folder_segments(entry) + [markdown_filename(entry.name)]
    return sanitize_filename(FLATTEN_SEPARATOR.join(parts))


__all__ = [
    'FLATTEN_SEPARATOR',
    'flatten_download_name',
    'folder_segments',
    'get_relative_path',
    'markdown_filename',
    'sanitize_filename'
]
