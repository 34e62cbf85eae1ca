"""Clipboard capability."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class ClipboardService(ABC):
    """Platform clipboard holding a single text value."""

    @abstractmethod
    def write(self, text: str) -> None:
        pass

    @abstractmethod
    def read(self) -> Optional[str]:
        """Return the clipboard text, or None when empty."""
        pass


class InMemoryClipboard(ClipboardService):
    """Process-local clipboard."""

    def __init__(self, initial: Optional[str] = None):
        self._text = initial
        self._lock = threading.Lock()

    def write(self, text: str) -> None:
        with self._lock:
            self._text = text
        logger.debug(f"Clipboard now holds {len(text)} characters")

    def read(self) -> Optional[str]:
        with self._lock:
            return self._text or None
