"""Terminal presentation layer."""

from .transcription_screen import TranscriptionScreen

__all__ = ["TranscriptionScreen"]
