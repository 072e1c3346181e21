"""
Orchestration package for running a Paper export batch.

Sequences the per-document exports of one run, reports progress, honours
cancellation and finalizes the run (archive delivery or tally).
"""

from .export_orchestrator import ARCHIVE_FILENAME, ExportOrchestrator
from .export_report import ExportReport

__all__ = [
    'ARCHIVE_FILENAME',
    'ExportOrchestrator',
    'ExportReport'
]
