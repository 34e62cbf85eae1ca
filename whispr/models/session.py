"""Session-related data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SessionState(Enum):
    """Lifecycle state of the transcription screen."""
    IDLE = "idle"
    RECORDING = "recording"
    PROCESSING = "processing"
    COMPLETE = "complete"


class NoticeKind(Enum):
    """Kinds of transient error notices shown to the user."""
    PERMISSION_DENIED = "permission_denied"
    ENGINE_FAILURE = "engine_failure"
    EMPTY_CLIPBOARD = "empty_clipboard"


@dataclass(frozen=True)
class Notice:
    """A dismissible error indicator for the presentation layer."""
    kind: NoticeKind
    message: str


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of the controller published to observers."""
    state: SessionState = SessionState.IDLE
    transcript: str = ""
    notice: Optional[Notice] = None

    @property
    def is_recording(self) -> bool:
        return self.state is SessionState.RECORDING

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript)

    @property
    def show_empty_state(self) -> bool:
        """True when the screen should show the 'tap to record' hint."""
        return self.state is SessionState.IDLE and not self.transcript

    @property
    def show_actions(self) -> bool:
        """Copy/paste/share are only offered once there is a transcript."""
        return self.has_transcript
