"""Share capability."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

logger = logging.getLogger(__name__)


class ShareService(ABC):
    """Hands text to a system share action."""

    @abstractmethod
    def present(self, text: str) -> None:
        pass


class ConsoleShareService(ShareService):
    """Shows the shared text in a panel on the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.share_count = 0

    def present(self, text: str) -> None:
        self.share_count += 1
        self.console.print(Panel(
            Text(text, style="white"),
            title="📤 Shared transcript",
            border_style="magenta"
        ))
        logger.info(f"Shared transcript ({len(text)} characters)")
