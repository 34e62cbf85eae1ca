"""Scripted speech engine that reveals a fixed phrase word by word."""

import logging
import threading
from typing import List, Optional

from .base import AbstractSpeechEngine
from ..config import DEFAULT_PHRASE
from ..errors import EngineFailure, PermissionDenied
from ..models.events import EndOfStream, TextSegment

logger = logging.getLogger(__name__)


class ScriptedSpeechEngine(AbstractSpeechEngine):
    """Engine stand-in used for demos and tests.

    Once stopped, the phrase is emitted one word per ``word_delay`` seconds
    on a background thread, followed by ``EndOfStream``. A delay of zero
    emits everything synchronously from ``stop()``.
    """

    def __init__(self,
                 phrase: str = DEFAULT_PHRASE,
                 word_delay: float = 0.2,
                 fail_on_start: bool = False,
                 language: str = "en-US"):
        super().__init__(language)
        self.phrase = phrase
        self.word_delay = word_delay
        self.fail_on_start = fail_on_start
        self.is_capturing = False
        self.reveal_thread: Optional[threading.Thread] = None
        self.cancel_event = threading.Event()

    @property
    def words(self) -> List[str]:
        return self.phrase.split()

    def initialize(self) -> bool:
        logger.info(f"Scripted engine ready ({len(self.words)} words, {self.word_delay}s/word)")
        return True

    def start(self) -> None:
        if self.fail_on_start:
            logger.warning("Scripted engine refusing to start (simulated permission denial)")
            raise PermissionDenied("Microphone access was denied")
        if self.is_capturing:
            raise EngineFailure("Capture already in progress")

        self.cancel()
        self.cancel_event = threading.Event()
        self.is_capturing = True
        logger.info("Scripted engine capturing")

    def stop(self) -> None:
        if not self.is_capturing:
            logger.warning("Scripted engine stop() called while not capturing")
            return
        self.is_capturing = False

        if self.word_delay <= 0:
            self._reveal(self.cancel_event)
            return

        self.reveal_thread = threading.Thread(
            target=self._reveal, args=(self.cancel_event,), daemon=True
        )
        self.reveal_thread.name = "ScriptedRevealThread"
        self.reveal_thread.start()

    def _reveal(self, cancel_event: threading.Event) -> None:
        """Emit each word, then end-of-stream, unless cancelled."""
        words = self.words
        for index, word in enumerate(words):
            if index > 0 and self.word_delay > 0 and cancel_event.wait(self.word_delay):
                logger.debug("Scripted reveal cancelled")
                return
            if cancel_event.is_set():
                return
            self._emit(TextSegment(text=word))
        if not cancel_event.is_set():
            self._emit(EndOfStream(segment_count=len(words)))

    def cancel(self) -> None:
        self.is_capturing = False
        self.cancel_event.set()
        thread = self.reveal_thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=1.0)
            if thread.is_alive():
                logger.warning("Scripted reveal thread did not stop cleanly")
        self.reveal_thread = None

    def cleanup(self) -> None:
        self.cancel()

    def get_display_info(self) -> str:
        return " (scripted)"
