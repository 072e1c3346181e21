"""Session controller owning the client handle and the run/stop lifecycle."""

import logging
from typing import Any, Callable, Dict, List, Optional

from config_loader import get_nested
from dropbox_client import AuthenticationError, DropboxApiError, DropboxClient
from exporters import FileDelivery, PaperExporter
from fetchers import FetcherError, PaperFetcher
from models import (
    CancelToken,
    ExportRun,
    FileEntry,
    RunEvent,
    RunState,
    StatusLevel,
    action_binding,
    transition
)
from orchestrator import ExportOrchestrator, ExportReport
from views import ExportView

ClientFactory = Callable[[str], Any]


class ExportSession:
    """
    Wires the UI surface to authentication, enumeration and the batch run.

    All run state lives on the session: the current ``RunState``, the
    authenticated client and the active ``ExportRun``. ``start`` blocks until
    the run ends and may be called from a worker thread; ``stop`` may be
    called from any thread.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        view: ExportView,
        client_factory: Optional[ClientFactory] = None,
        delivery: Optional[FileDelivery] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the session.

        Args:
            config: Configuration dictionary
            view: Surface receiving status, progress and control bindings
            client_factory: Builds a client from a token (defaults to
                ``DropboxClient.from_config``)
            delivery: Writes exported files (defaults to the configured
                output directory)
            logger: Logger instance
        """
        self.config = config
        self.view = view
        self.client_factory = client_factory or (lambda token: DropboxClient.from_config(config, token))
        self.delivery = delivery or FileDelivery(
            get_nested(config, 'export.output_directory', './paper-export')
        )
        self.logger = logger or logging.getLogger('paper_markdown_exporter.session')

        self.state = RunState.IDLE
        self.client = None
        self.active_run: Optional[ExportRun] = None
        self.last_error: Optional[str] = None

        self.view.bind_action(action_binding(self.state))

    def _apply(self, event: RunEvent) -> None:
        previous = self.state
        self.state = transition(self.state, event)
        self.logger.debug(f"Run state {previous.value} -> {self.state.value} ({event.value})")
        self.view.bind_action(action_binding(self.state))

    @property
    def running(self) -> bool:
        return self.state is RunState.RUNNING

    def start(self, token: str, use_zip: bool = False) -> Optional[ExportReport]:
        """
        Authenticate, enumerate and export every document.

        Args:
            token: Access token typed or configured by the user
            use_zip: Bundle documents into one archive instead of single files

        Returns:
            The run report, or None when the run did not reach the batch
            (missing token, authentication or listing failure, nothing found)
        """
        token = (token or '').strip()
        if not token:
            self.view.update_status('Please enter your access token.', StatusLevel.ERROR)
            return None

        if self.running:
            self.logger.warning("Export already running - ignoring start request")
            return None

        self.last_error = None
        self.active_run = ExportRun(files=[], use_zip=use_zip, cancel_token=CancelToken())
        self._apply(RunEvent.START)

        try:
            self._authenticate(token)
            self.view.update_status(f"Authenticated successfully. (ZIP: {str(use_zip).lower()})")
            files = self._enumerate()

            if not files:
                extension = get_nested(self.config, 'export.file_extension', '.paper')
                self.view.update_status(f"No {extension} files found in your Dropbox.", StatusLevel.ERROR)
                self._apply(RunEvent.ABORT)
                return None

            self.active_run.files = files
            self.view.set_progress_message(f"Found {len(files)} files. Starting export...")

            exporter = PaperExporter(self.client, self.view, self.delivery)
            orchestrator = ExportOrchestrator(exporter, self.view, self.delivery, self.config)
            report = orchestrator.run(self.active_run)

        except (DropboxApiError, FetcherError, OSError) as e:
            self._fail(e)
            return None
        except Exception as e:
            self.logger.exception(f"Unexpected error during export: {str(e)}")
            self._fail(e)
            return None

        self._apply(RunEvent.STOP if report.stopped else RunEvent.COMPLETE)
        return report

    def stop(self) -> None:
        """Request cancellation; observed before the next document."""
        if not self.running or self.active_run is None:
            self.logger.debug("Stop requested while no export is running")
            return

        self.logger.info("Stop requested - finishing current document")
        self.active_run.cancel_token.cancel()

    def discover(self, token: str) -> List[FileEntry]:
        """
        Authenticate and enumerate documents without exporting them.

        Raises:
            AuthenticationError: If the token is missing or rejected
            EnumerationError: If listing fails
        """
        token = (token or '').strip()
        if not token:
            raise AuthenticationError("An access token is required")
        self._authenticate(token)
        return self._enumerate()

    def _authenticate(self, token: str) -> None:
        """Replace the client and verify the token before any listing."""
        if self.client is not None:
            self.client.close()
        self.client = self.client_factory(token)

        try:
            self.client.get_current_account()
        except DropboxApiError as e:
            if isinstance(e, AuthenticationError):
                raise
            raise AuthenticationError(
                f"Token verification failed: {e}",
                status_code=e.status_code,
                error_summary=e.error_summary,
                error=e.error
            ) from e

    def _enumerate(self) -> List[FileEntry]:
        fetcher = PaperFetcher(self.client, self.config)
        return fetcher.collect_paper_files()

    def _fail(self, error: Exception) -> None:
        summary = error.summary if isinstance(error, DropboxApiError) else str(error)
        self.last_error = summary
        self.logger.error(f"Export aborted: {summary}", exc_info=self.logger.isEnabledFor(logging.DEBUG))
        self.view.update_status(f"Error: {summary}. Check the log for details.", StatusLevel.ERROR)
        self.view.reset_progress()
        self._apply(RunEvent.ABORT)


__all__ = ['ExportSession']
