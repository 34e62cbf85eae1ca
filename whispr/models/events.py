"""Event models emitted by speech engines."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union


@dataclass
class TextSegment:
    """A piece of recognised text."""
    text: str
    confidence: float = 1.0
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class EndOfStream:
    """Terminal event: the engine has no more text for this session."""
    segment_count: int = 0
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class EngineError:
    """Engine failed after it was started."""
    error: Exception
    timestamp: datetime = field(default_factory=datetime.now)
    detail: Optional[str] = None

    @property
    def message(self) -> str:
        return self.detail or str(self.error)


EngineEvent = Union[TextSegment, EndOfStream, EngineError]
