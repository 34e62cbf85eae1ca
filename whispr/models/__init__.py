"""Data models for the Whispr application."""

from .session import SessionState, SessionSnapshot, Notice, NoticeKind
from .events import TextSegment, EndOfStream, EngineError, EngineEvent
from .transcription import TranscriptionResult

__all__ = [
    "SessionState",
    "SessionSnapshot",
    "Notice",
    "NoticeKind",
    # Engine events
    "TextSegment",
    "EndOfStream",
    "EngineError",
    "EngineEvent",
    "TranscriptionResult",
]
