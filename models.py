"""Data models for the Dropbox Paper to Markdown export pipeline."""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class StatusLevel(Enum):
    """Severity tag attached to user-facing status messages."""
    NORMAL = "normal"
    ERROR = "error"


class FailureKind(Enum):
    """Classification of a single document export failure."""
    NOT_FOUND = "not_found"
    GENERIC = "generic"


class RunState(Enum):
    """Lifecycle states of an export session."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"


class RunEvent(Enum):
    """Events that drive the export session state machine."""
    START = "start"
    COMPLETE = "complete"
    STOP = "stop"
    ABORT = "abort"


class ActionRole(Enum):
    """Role currently bound to the start/stop action control."""
    START = "start"
    STOP = "stop"


class InvalidTransitionError(ValueError):
    """Raised when an event is not allowed in the current run state."""
    pass


_RESTARTABLE_STATES = (RunState.IDLE, RunState.COMPLETED, RunState.STOPPED)

_TRANSITIONS = {
    **{(state, RunEvent.START): RunState.RUNNING for state in _RESTARTABLE_STATES},
    (RunState.RUNNING, RunEvent.COMPLETE): RunState.COMPLETED,
    (RunState.RUNNING, RunEvent.STOP): RunState.STOPPED,
    (RunState.RUNNING, RunEvent.ABORT): RunState.IDLE,
}


def transition(state: RunState, event: RunEvent) -> RunState:
    """
    Apply an event to a run state.

    Args:
        state: Current run state
        event: Event to apply

    Returns:
        The resulting run state

    Raises:
        InvalidTransitionError: If the event is not valid in ``state``
    """
    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransitionError(
            f"Cannot apply '{event.value}' while {state.value}"
        ) from None


@dataclass(frozen=True)
class ActionBinding:
    """Describes how the single start/stop control should be presented."""

    role: ActionRole
    label: str
    variant: str


def action_binding(state: RunState) -> ActionBinding:
    """Derive the action control binding from the run state."""
    if state is RunState.RUNNING:
        return ActionBinding(role=ActionRole.STOP, label="Stop Export", variant="error")
    return ActionBinding(role=ActionRole.START, label="Start Export", variant="primary")


@dataclass(frozen=True)
class FileEntry:
    """A file record as reported by the Dropbox listing API."""

    tag: str
    name: str
    path_display: str
    path_lower: str
    id: Optional[str] = None

    @classmethod
    def from_metadata(cls, data: Dict[str, Any]) -> 'FileEntry':
        """Build an entry from a raw ``list_folder`` metadata dictionary."""
        path_display = data.get('path_display') or ''
        return cls(
            tag=data.get('.tag', ''),
            name=data.get('name', ''),
            path_display=path_display,
            path_lower=data.get('path_lower') or path_display.lower(),
            id=data.get('id')
        )


@dataclass(frozen=True)
class RelativePath:
    """Sanitized folder and file name derived from a FileEntry."""

    dir: str
    name: str

    @property
    def archive_path(self) -> str:
        """Path of the entry inside an export archive."""
        return f"{self.dir}/{self.name}" if self.dir else self.name


@dataclass
class StatusMessage:
    """A single line written to the status log."""

    message: str
    level: StatusLevel = StatusLevel.NORMAL
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        return f"{self.timestamp.strftime('%H:%M:%S')}: {self.message}"


@dataclass(frozen=True)
class ProgressSnapshot:
    """Progress of a run after a given number of attempted items."""

    current: int
    total: int

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        # Halves round up
        return int(self.current * 100 / self.total + 0.5)

    @property
    def text(self) -> str:
        return f"Progress: {self.current}/{self.total} files ({self.percent}%)"


class CancelToken:
    """Cooperative cancellation flag polled between export items."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds, waking early on cancellation."""
        if timeout <= 0:
            return self.cancelled
        return self._event.wait(timeout)


@dataclass
class ExportFailure:
    """A document that could not be exported."""

    path_display: str
    kind: FailureKind
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path_display,
            'kind': self.kind.value,
            'message': self.message
        }


@dataclass
class ExportRun:
    """Transient state of one export run."""

    files: List[FileEntry]
    use_zip: bool = False
    cancel_token: CancelToken = field(default_factory=CancelToken)
    index: int = 0
    exported_count: int = 0
    outcome: Optional[RunState] = None

    @property
    def total(self) -> int:
        return len(self.files)

    def record(self, exported: int) -> ProgressSnapshot:
        """Advance the cursor past one attempted item and add to the tally."""
        self.index += 1
        self.exported_count += exported
        return ProgressSnapshot(current=self.index, total=self.total)


__all__ = [
    'ActionBinding',
    'ActionRole',
    'CancelToken',
    'ExportFailure',
    'ExportRun',
    'FailureKind',
    'FileEntry',
    'InvalidTransitionError',
    'ProgressSnapshot',
    'RelativePath',
    'RunEvent',
    'RunState',
    'StatusLevel',
    'StatusMessage',
    'action_binding',
    'transition'
]
