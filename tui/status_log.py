"""Scrolling status log widget."""

from rich.markup import escape
from textual.widgets import RichLog

from models import StatusLevel, StatusMessage


class StatusLog(RichLog):
    """Timestamped status lines, errors highlighted in red."""

    def __init__(self, **kwargs) -> None:
        super().__init__(markup=True, wrap=True, **kwargs)

    def add_status(self, status: StatusMessage) -> None:
        line = escape(status.format())
        if status.level is StatusLevel.ERROR:
            line = f"[bold red]{line}[/bold red]"
        self.write(line)
