"""Main Textual application for interactive Paper export."""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Checkbox, Footer, Header, Input, Label, ProgressBar

from config_loader import ConfigLoader, get_nested
from models import (
    ActionBinding,
    ActionRole,
    ProgressSnapshot,
    RunState,
    StatusLevel,
    StatusMessage,
    action_binding
)
from session_controller import ExportSession
from views import ExportView
from .progress_panel import ProgressPanel
from .status_log import StatusLog

logger = logging.getLogger('paper_markdown_exporter.tui')


class TextualExportView(ExportView):
    """
    ExportView backed by the app's widgets.

    The session runs in a worker thread, so every update is marshalled onto
    the UI thread with ``call_from_thread``.
    """

    def __init__(self, app: 'PaperExportApp') -> None:
        self.app = app
        self._ui_thread_id = threading.get_ident()

    def _dispatch(self, callback: Callable[..., None], *args: Any) -> None:
        if threading.get_ident() == self._ui_thread_id:
            callback(*args)
        else:
            self.app.call_from_thread(callback, *args)

    def update_status(self, message: str, level: StatusLevel = StatusLevel.NORMAL) -> None:
        log_method = logger.error if level is StatusLevel.ERROR else logger.info
        log_method(message)
        self._dispatch(self.app.show_status, StatusMessage(message, level))

    def update_progress(self, snapshot: ProgressSnapshot) -> None:
        self._dispatch(self.app.show_progress, snapshot)

    def set_progress_message(self, text: str) -> None:
        self._dispatch(self.app.show_progress_message, text)

    def reset_progress(self) -> None:
        self._dispatch(self.app.clear_progress)

    def bind_action(self, binding: ActionBinding) -> None:
        self._dispatch(self.app.apply_action_binding, binding)


class PaperExportApp(App):
    """Token input, ZIP toggle, progress, status log and a start/stop control."""

    TITLE = "Dropbox Paper to Markdown Export"

    CSS = """
    #form {
        height: auto;
        padding: 1 2;
    }
    #token {
        width: 1fr;
    }
    #controls {
        height: auto;
        margin-top: 1;
    }
    #export-btn {
        margin-left: 2;
    }
    #progress-area {
        height: auto;
        padding: 0 2;
    }
    #status {
        border: round $accent;
        margin: 1 2;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "toggle_export", "Start/Stop", key_display="^S"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, config: Dict[str, Any]) -> None:
        """Initialize app with configuration; the token and ZIP flag prefill the form."""
        super().__init__()
        self.config = config
        self.session: Optional[ExportSession] = None
        self.action_role = ActionRole.START

    def compose(self) -> ComposeResult:
        """Compose the UI layout."""
        yield Header()
        yield Vertical(
            Label("Dropbox access token"),
            Input(
                value=ConfigLoader.resolve_token(self.config),
                placeholder="Paste an access token with files.content.read scope",
                password=True,
                id="token"
            ),
            Horizontal(
                Checkbox(
                    "Download as ZIP",
                    value=bool(get_nested(self.config, 'export.use_zip', False)),
                    id="use-zip"
                ),
                Button(action_binding(RunState.IDLE).label, variant="primary", id="export-btn"),
                id="controls"
            ),
            id="form"
        )
        yield Vertical(
            ProgressBar(total=None, show_eta=False, id="progress-bar"),
            ProgressPanel(id="progress-text"),
            id="progress-area"
        )
        yield StatusLog(id="status")
        yield Footer()

    def on_mount(self) -> None:
        """Create the session once widgets exist."""
        self.session = ExportSession(self.config, TextualExportView(self))
        self.query_one("#token", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "export-btn":
            self.action_toggle_export()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "token" and self.action_role is ActionRole.START:
            self.start_export()

    def action_toggle_export(self) -> None:
        """Trigger whatever the action control is currently bound to."""
        if self.action_role is ActionRole.STOP:
            self.stop_export()
        else:
            self.start_export()

    def start_export(self) -> None:
        token = self.query_one("#token", Input).value
        use_zip = self.query_one("#use-zip", Checkbox).value
        session = self.session

        self.run_worker(
            lambda: session.start(token, use_zip),
            name="paper-export",
            group="export",
            exclusive=True,
            thread=True
        )

    def stop_export(self) -> None:
        self.session.stop()
        self.show_status(StatusMessage("Stopping after the current document..."))

    async def action_quit(self) -> None:
        """Stop a running export before leaving."""
        if self.session is not None and self.session.running:
            self.session.stop()
        self.exit()

    def show_status(self, status: StatusMessage) -> None:
        self.query_one(StatusLog).add_status(status)

    def show_progress(self, snapshot: ProgressSnapshot) -> None:
        self.query_one("#progress-bar", ProgressBar).update(total=snapshot.total, progress=snapshot.current)
        self.query_one(ProgressPanel).show_snapshot(snapshot)

    def show_progress_message(self, text: str) -> None:
        self.query_one(ProgressPanel).message = text

    def clear_progress(self) -> None:
        self.query_one("#progress-bar", ProgressBar).update(total=None, progress=0)
        self.query_one(ProgressPanel).clear()

    def apply_action_binding(self, binding: ActionBinding) -> None:
        """Re-bind the action control from the session's current state."""
        self.action_role = binding.role
        button = self.query_one("#export-btn", Button)
        button.label = binding.label
        button.variant = binding.variant

        running = binding.role is ActionRole.STOP
        self.query_one("#token", Input).disabled = running
        self.query_one("#use-zip", Checkbox).disabled = running
