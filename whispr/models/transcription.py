"""Transcription-related data models."""

from dataclasses import dataclass
from datetime import datetime

from .events import TextSegment


@dataclass
class TranscriptionResult:
    """Result of a single recognition call."""
    text: str
    confidence: float
    processing_time: float
    timestamp: datetime
    service: str
    language: str = "en-US"

    def to_segment(self) -> TextSegment:
        return TextSegment(text=self.text, confidence=self.confidence, timestamp=self.timestamp)
