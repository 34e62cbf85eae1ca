"""Abstract base class for speech recognition engines."""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..models.events import EngineEvent

logger = logging.getLogger(__name__)


class AbstractSpeechEngine(ABC):
    """Speech engine capability consumed by the session controller.

    Engines report recognised text through event callbacks, possibly from
    their own worker threads. A session ends with either ``EndOfStream`` or
    ``EngineError``.
    """

    def __init__(self, language: str = "en-US"):
        """Initialize engine with language preference."""
        self.language = language
        self.callbacks: List[Callable[[EngineEvent], None]] = []

    def add_event_callback(self, callback: Callable[[EngineEvent], None]) -> None:
        """Register a callback for engine events.

        Args:
            callback: Function that takes a TextSegment, EndOfStream or EngineError
        """
        self.callbacks.append(callback)
        logger.debug(f"Added event callback: {getattr(callback, '__name__', callback)}")

    def remove_event_callback(self, callback: Callable[[EngineEvent], None]) -> None:
        if callback in self.callbacks:
            self.callbacks.remove(callback)

    def _emit(self, event: EngineEvent) -> None:
        """Deliver an event to every registered callback."""
        for callback in list(self.callbacks):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in engine event callback: {e}", exc_info=True)

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize engine resources and verify configuration.

        Returns:
            True if initialization successful, False otherwise
        """
        pass

    @abstractmethod
    def start(self) -> None:
        """Start capturing audio for a new session.

        Raises:
            PermissionDenied: the engine may not capture audio
            EngineFailure: the engine could not start for another reason
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capture; recognised text follows as events."""
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Abort the session; no further events are emitted for it."""
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Clean up engine resources."""
        pass

    def get_display_info(self) -> str:
        """Short description for the status line."""
        return ""
