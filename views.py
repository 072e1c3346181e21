"""Host UI surface contract and the console implementation used by the CLI."""

import logging
import sys
from abc import ABC, abstractmethod
from typing import Optional

from tqdm import tqdm

from models import ActionBinding, ProgressSnapshot, StatusLevel, StatusMessage


class ExportView(ABC):
    """Surface the export core writes status and progress to."""

    @abstractmethod
    def update_status(self, message: str, level: StatusLevel = StatusLevel.NORMAL) -> None:
        """Append a line to the status log."""
        pass

    @abstractmethod
    def update_progress(self, snapshot: ProgressSnapshot) -> None:
        """Show progress after an item was attempted."""
        pass

    @abstractmethod
    def set_progress_message(self, text: str) -> None:
        """Show free text in the progress area (e.g. before the first item)."""
        pass

    @abstractmethod
    def reset_progress(self) -> None:
        """Clear the progress indicator at the end of a run."""
        pass

    @abstractmethod
    def bind_action(self, binding: ActionBinding) -> None:
        """Re-bind the start/stop control."""
        pass


class ConsoleView(ExportView):
    """Terminal view: timestamped status lines plus a tqdm progress bar."""

    def __init__(self, logger: Optional[logging.Logger] = None, show_progress: bool = True):
        self.logger = logger or logging.getLogger('paper_markdown_exporter.console')
        self.show_progress = show_progress
        self._bar: Optional[tqdm] = None

    def update_status(self, message: str, level: StatusLevel = StatusLevel.NORMAL) -> None:
        status = StatusMessage(message, level)
        self.logger.debug(f"[{level.value}] {message}")
        if level is StatusLevel.ERROR:
            tqdm.write(status.format(), file=sys.stderr)
        else:
            tqdm.write(status.format())

    def update_progress(self, snapshot: ProgressSnapshot) -> None:
        if not self.show_progress:
            self.logger.debug(snapshot.text)
            return

        if self._bar is None:
            self._bar = tqdm(total=snapshot.total, desc="Exporting", unit="doc")
        self._bar.n = snapshot.current
        self._bar.refresh()

    def set_progress_message(self, text: str) -> None:
        tqdm.write(text)

    def reset_progress(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def bind_action(self, binding: ActionBinding) -> None:
        self.logger.debug(f"Action control: {binding.label}")


__all__ = ['ConsoleView', 'ExportView']
