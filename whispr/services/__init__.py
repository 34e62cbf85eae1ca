"""Services layer for Whispr application logic."""

from .clipboard import ClipboardService, InMemoryClipboard
from .dispatcher import Dispatcher
from .session_controller import SessionController
from .share import ShareService, ConsoleShareService

__all__ = [
    "ClipboardService",
    "InMemoryClipboard",
    "Dispatcher",
    "SessionController",
    "ShareService",
    "ConsoleShareService",
]
