"""Progress panel widget showing the current/total text of a run."""

from textual.reactive import reactive
from textual.widgets import Static

from models import ProgressSnapshot


class ProgressPanel(Static):
    """Text line under the progress bar."""

    message: reactive[str] = reactive("")

    def render(self) -> str:
        if not self.message:
            return "[dim]Idle[/dim]"
        return self.message

    def show_snapshot(self, snapshot: ProgressSnapshot) -> None:
        self.message = snapshot.text

    def clear(self) -> None:
        self.message = ""

    def watch_message(self, old: str, new: str) -> None:
        """React to message changes."""
        self.refresh()
