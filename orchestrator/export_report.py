"""
Run report for a Paper export.

Aggregates the outcome of one run for console display and JSON export.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from models import ExportFailure, FailureKind, RunState

logger = logging.getLogger('paper_markdown_exporter.orchestrator.report')


@dataclass
class ExportReport:
    """Outcome of one export run."""

    total: int
    attempted: int
    exported: int
    outcome: RunState
    use_zip: bool = False
    failures: List[ExportFailure] = field(default_factory=list)
    archive_path: Optional[str] = None
    duration_seconds: float = 0.0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def stopped(self) -> bool:
        return self.outcome is RunState.STOPPED

    @property
    def skipped(self) -> int:
        """Documents never attempted because the run was stopped."""
        return self.total - self.attempted

    def to_dict(self) -> Dict[str, Any]:
        not_found = sum(1 for f in self.failures if f.kind is FailureKind.NOT_FOUND)
        return {
            'summary': {
                'outcome': self.outcome.value,
                'total': self.total,
                'attempted': self.attempted,
                'exported': self.exported,
                'failed': len(self.failures),
                'not_found': not_found,
                'skipped': self.skipped,
                'use_zip': self.use_zip,
                'archive_path': self.archive_path,
                'duration_seconds': round(self.duration_seconds, 3)
            },
            'failures': [failure.to_dict() for failure in self.failures],
            'timestamp': self.timestamp
        }

    def format_console_report(self) -> str:
        """Format the report for terminal output."""
        lines = []
        lines.append("=" * 60)
        lines.append("PAPER EXPORT REPORT")
        lines.append("=" * 60)
        lines.append(f"Outcome:   {self.outcome.value}")
        lines.append(f"Documents: {self.total}")
        lines.append(f"Attempted: {self.attempted}")
        lines.append(f"Exported:  {self.exported}")
        lines.append(f"Failed:    {len(self.failures)}")
        if self.skipped:
            lines.append(f"Skipped:   {self.skipped}")
        if self.archive_path:
            lines.append(f"Archive:   {self.archive_path}")
        lines.append(f"Duration:  {self.duration_seconds:.1f}s")

        if self.failures:
            lines.append("")
            lines.append("Failures:")
            lines.append("-" * 60)
            for failure in self.failures:
                lines.append(f"  [{failure.kind.value}] {failure.path_display}: {failure.message}")

        lines.append("=" * 60)
        return "\n".join(lines)

    def export_json_report(self, output_path: str) -> None:
        """
        Write the report as JSON.

        Args:
            output_path: Destination file
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Export report saved to {path}")


__all__ = ['ExportReport']
