"""Session controller: the recording/transcription state machine."""

import logging
from functools import partial
from typing import Callable, Optional

from pubsub import pub

from ..engine.base import AbstractSpeechEngine
from ..errors import EmptyClipboard, EngineFailure, WhisprError
from ..models.events import EndOfStream, EngineError, EngineEvent, TextSegment
from ..models.session import Notice, NoticeKind, SessionSnapshot, SessionState
from .clipboard import ClipboardService
from .dispatcher import Dispatcher
from .share import ShareService

logger = logging.getLogger(__name__)

# States from which a new recording or a paste may start
READY_STATES = (SessionState.IDLE, SessionState.COMPLETE)
ACTIVE_STATES = (SessionState.RECORDING, SessionState.PROCESSING)


class SessionController:
    """Owns the session state and transcript and publishes every change.

    All public methods must be called on the thread that drains
    ``dispatcher``. Engine events arrive on arbitrary threads and are
    queued onto the dispatcher, tagged with the session generation they
    belong to; events from a cancelled or failed session are dropped.

    Observers receive a ``SessionSnapshot`` on the pypubsub topic
    ``<topic>.changed`` under the keyword ``snapshot``.
    """

    def __init__(self,
                 engine: AbstractSpeechEngine,
                 clipboard: ClipboardService,
                 share: ShareService,
                 dispatcher: Optional[Dispatcher] = None,
                 separator: str = " ",
                 topic: str = "whispr.session"):
        """Initialize session controller.

        Args:
            engine: Speech engine capability
            clipboard: Clipboard capability
            share: Share capability
            dispatcher: UI-thread dispatcher (a private one is created if None)
            separator: Appended after every recognised segment
            topic: Pub/sub topic root for snapshots
        """
        self.engine = engine
        self.clipboard = clipboard
        self.share = share
        self.dispatcher = dispatcher or Dispatcher()
        self.separator = separator
        self.topic = topic
        self.changed_topic = f"{topic}.changed"

        self._state = SessionState.IDLE
        self._transcript = ""
        self._notice: Optional[Notice] = None
        self._generation = 0

        self.engine.add_event_callback(self._on_engine_event)
        logger.info(f"SessionController initialized - publishing to {self.changed_topic}")

    # Observable state

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def transcript(self) -> str:
        return self._transcript

    @property
    def notice(self) -> Optional[Notice]:
        return self._notice

    @property
    def is_recording(self) -> bool:
        return self._state is SessionState.RECORDING

    @property
    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(state=self._state, transcript=self._transcript, notice=self._notice)

    def subscribe(self, listener: Callable[[SessionSnapshot], None]) -> Callable[[SessionSnapshot], None]:
        """Subscribe listener(snapshot) to state changes.

        pypubsub holds listeners weakly; the caller must keep a reference.
        """
        pub.subscribe(listener, self.changed_topic)
        logger.debug(f"Subscribed {getattr(listener, '__name__', listener)} to {self.changed_topic}")
        return listener

    def unsubscribe(self, listener: Callable[[SessionSnapshot], None]) -> None:
        pub.unsubscribe(listener, self.changed_topic)

    def _publish(self) -> None:
        snapshot = self.snapshot
        try:
            pub.sendMessage(self.changed_topic, snapshot=snapshot)
        except Exception as e:
            logger.error(f"Error in snapshot listener: {e}", exc_info=True)

    # User actions

    def begin_recording(self) -> bool:
        """Start a new capture session.

        Returns:
            True if recording started
        """
        if self._state not in READY_STATES:
            logger.warning(f"begin_recording ignored in state {self._state.value}")
            return False

        self._generation += 1
        self._transcript = ""
        self._notice = None
        self._state = SessionState.RECORDING

        try:
            self.engine.start()
        except WhisprError as e:
            self._fail(e)
            return False
        except Exception as e:
            logger.error(f"Unexpected error starting engine: {e}", exc_info=True)
            self._fail(EngineFailure(str(e)))
            return False

        logger.info(f"Recording started (session {self._generation})")
        self._publish()
        return True

    def end_recording(self) -> bool:
        """Stop capture and wait for recognised text."""
        if self._state is not SessionState.RECORDING:
            logger.warning(f"end_recording ignored in state {self._state.value}")
            return False

        self._state = SessionState.PROCESSING
        try:
            self.engine.stop()
        except WhisprError as e:
            self._fail(e)
            return False
        except Exception as e:
            logger.error(f"Unexpected error stopping engine: {e}", exc_info=True)
            self._fail(EngineFailure(str(e)))
            return False

        logger.info(f"Recording stopped, processing (session {self._generation})")
        self._publish()
        return True

    def toggle_recording(self) -> bool:
        """The record button: start when ready, stop while recording."""
        if self._state is SessionState.RECORDING:
            return self.end_recording()
        if self._state is SessionState.PROCESSING:
            logger.info("Record button ignored while processing")
            return False
        return self.begin_recording()

    def append_text(self, segment: str) -> bool:
        """Append a recognised segment; only effective while processing."""
        if self._state is not SessionState.PROCESSING:
            logger.debug(f"Dropping segment in state {self._state.value}: '{segment}'")
            return False

        self._transcript += segment + self.separator
        logger.debug(f"Appended segment: '{segment}'")
        self._publish()
        return True

    def finalize_transcription(self) -> bool:
        """Engine reported end of stream."""
        if self._state is not SessionState.PROCESSING:
            logger.debug(f"finalize_transcription ignored in state {self._state.value}")
            return False

        self._state = SessionState.COMPLETE
        logger.info(f"Transcription complete ({len(self._transcript)} characters)")
        self._publish()
        return True

    def paste_text(self, text: Optional[str] = None) -> bool:
        """Replace the transcript with already-transcribed text.

        Args:
            text: Text to paste; read from the clipboard when None

        Returns:
            True if the transcript was replaced
        """
        if self._state not in READY_STATES:
            logger.warning(f"paste_text ignored in state {self._state.value}")
            return False

        if text is None:
            text = self.clipboard.read()

        if not text:
            error = EmptyClipboard("Nothing to paste")
            logger.warning(f"Paste failed: {error}")
            self._notice = Notice(kind=error.notice_kind, message=str(error))
            self._publish()
            return False

        self._transcript = text
        self._notice = None
        self._state = SessionState.COMPLETE
        logger.info(f"Pasted {len(text)} characters")
        self._publish()
        return True

    def copy_transcript(self) -> bool:
        """Write the transcript to the clipboard; no-op when empty."""
        if not self._transcript:
            logger.debug("Nothing to copy")
            return False

        try:
            self.clipboard.write(self._transcript)
        except Exception as e:
            logger.error(f"Error writing clipboard: {e}")
            return False

        logger.info(f"Copied {len(self._transcript)} characters")
        return True

    def share_transcript(self) -> bool:
        """Invoke the share capability; no-op when empty."""
        if not self._transcript:
            logger.debug("Nothing to share")
            return False

        try:
            self.share.present(self._transcript)
        except Exception as e:
            logger.error(f"Error presenting share: {e}")
            return False

        return True

    def cancel(self) -> bool:
        """Abandon the current capture or recognition and return to idle."""
        if self._state not in ACTIVE_STATES:
            logger.debug(f"cancel ignored in state {self._state.value}")
            return False

        try:
            self.engine.cancel()
        except Exception as e:
            logger.error(f"Error cancelling engine: {e}")
        # Bumped after the engine stops so its last events read as stale
        self._generation += 1

        self._transcript = ""
        self._state = SessionState.IDLE
        logger.info("Session cancelled")
        self._publish()
        return True

    def dismiss_notice(self) -> bool:
        if self._notice is None:
            return False
        self._notice = None
        self._publish()
        return True

    # Engine events

    def _on_engine_event(self, event: EngineEvent) -> None:
        """Engine callback; may run on any thread."""
        self.dispatcher.post(partial(self.handle_engine_event, event, self._generation))

    def handle_engine_event(self, event: EngineEvent, generation: Optional[int] = None) -> None:
        """Route an engine event on the UI thread.

        Args:
            event: TextSegment, EndOfStream or EngineError
            generation: Session the event was emitted for (None means current)
        """
        if generation is not None and generation != self._generation:
            logger.debug(f"Discarding stale {type(event).__name__} from session {generation}")
            return

        if isinstance(event, TextSegment):
            self.append_text(event.text)
        elif isinstance(event, EndOfStream):
            self.finalize_transcription()
        elif isinstance(event, EngineError):
            if self._state in ACTIVE_STATES:
                self._fail(event.error)
            else:
                logger.warning(f"Engine error outside a session: {event.message}")
        else:
            logger.warning(f"Unknown engine event: {event!r}")

    def _fail(self, error: Exception) -> None:
        """Recover from an engine failure: back to idle with a notice."""
        kind = getattr(error, "notice_kind", NoticeKind.ENGINE_FAILURE)
        logger.error(f"Engine failure ({kind.value}): {error}")

        try:
            self.engine.cancel()
        except Exception as e:
            logger.error(f"Error cancelling engine after failure: {e}")
        self._generation += 1

        self._transcript = ""
        self._state = SessionState.IDLE
        self._notice = Notice(kind=kind, message=str(error) or kind.value)
        self._publish()

    def close(self) -> None:
        """Detach from the engine and drop queued events."""
        self.engine.remove_event_callback(self._on_engine_event)
        self._generation += 1
        self.dispatcher.clear()
        logger.info("SessionController closed")
