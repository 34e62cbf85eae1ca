"""Google Speech-to-Text engine."""

import time
import logging
import threading
from datetime import datetime
from typing import List, Optional

from .base import AbstractSpeechEngine
from ..errors import EngineFailure, PermissionDenied
from ..models.events import EndOfStream, EngineError
from ..models.transcription import TranscriptionResult

from google.auth import exceptions as auth_exceptions
from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


class GoogleSpeechEngine(AbstractSpeechEngine):
    """Buffers LINEAR16 audio while capturing and recognises it on stop."""

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 sample_rate: int = 16000,
                 language: str = "en-US",
                 use_enhanced: bool = True,
                 enable_automatic_punctuation: bool = True,
                 request_timeout: float = 30.0):
        """Initialize Google Speech engine.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            sample_rate: Sample rate of the fed audio in Hz
            language: Language code (e.g., 'en-US', 'es-ES')
            use_enhanced: Whether to use enhanced model (costs more but better quality)
            enable_automatic_punctuation: Enable automatic punctuation
            request_timeout: Per-request timeout for recognize calls
        """
        super().__init__(language)
        self.credentials_path = credentials_path
        self.sample_rate = sample_rate
        self.use_enhanced = use_enhanced
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.request_timeout = request_timeout
        self.client = None
        self.project_id = None
        self.service_name = "Google Speech-to-Text"

        self.audio_buffer = bytearray()
        self.is_capturing = False
        self.cancel_event = threading.Event()
        # Held while emitting and while cancelling; nothing is emitted once cancel() returns
        self.emit_lock = threading.RLock()
        self.recognize_thread: Optional[threading.Thread] = None

        self.config = speech.RecognitionConfig(
                encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
                sample_rate_hertz=sample_rate,
                language_code=self.language,
                use_enhanced=self.use_enhanced,
                enable_automatic_punctuation=self.enable_automatic_punctuation,
            )

    def initialize(self) -> bool:
        """Initialize Google Speech client and verify credentials."""
        if not self.credentials_path:
            logger.error("Google credentials path is required - cannot initialize without credentials")
            return False

        logger.info(f"Loading Google credentials from: {self.credentials_path}")
        try:
            credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
        except (OSError, ValueError, auth_exceptions.GoogleAuthError) as e:
            logger.error(f"Could not load Google credentials: {e}")
            return False

        self.client = speech.SpeechClient(credentials=credentials)
        self.project_id = credentials.project_id
        logger.info(f"Using Google Cloud project: {self.project_id}")
        logger.info("Google Speech-to-Text engine initialized successfully")
        return True

    def start(self) -> None:
        if self.client is None:
            raise PermissionDenied("Google Speech credentials are not available")
        if self.is_capturing:
            raise EngineFailure("Capture already in progress")

        self.cancel()
        self.cancel_event = threading.Event()
        self.audio_buffer = bytearray()
        self.is_capturing = True
        logger.info("Google engine capturing")

    def feed_audio(self, frame: bytes) -> None:
        """Append a raw audio frame to the capture buffer."""
        if not self.is_capturing:
            logger.debug("Dropping audio frame fed while not capturing")
            return
        self.audio_buffer.extend(frame)

    def stop(self) -> None:
        if not self.is_capturing:
            logger.warning("Google engine stop() called while not capturing")
            return
        self.is_capturing = False

        audio_data = bytes(self.audio_buffer)
        self.audio_buffer = bytearray()
        logger.info(f"Google engine stopped with {len(audio_data)} bytes of audio")

        self.recognize_thread = threading.Thread(
            target=self._recognize, args=(audio_data, self.cancel_event), daemon=True
        )
        self.recognize_thread.name = "GoogleRecognizeThread"
        self.recognize_thread.start()

    def _recognize(self, audio_data: bytes, cancel_event: threading.Event) -> None:
        """Worker: run recognition and emit segments followed by end-of-stream."""
        if not audio_data:
            logger.debug("No audio captured, ending stream")
            self._emit_unless_cancelled(EndOfStream(segment_count=0), cancel_event)
            return

        try:
            results = self.transcribe(audio_data)
        except (PermissionDenied, EngineFailure) as e:
            self._emit_unless_cancelled(EngineError(error=e), cancel_event)
            return

        for result in results:
            if not self._emit_unless_cancelled(result.to_segment(), cancel_event):
                logger.debug("Recognition cancelled, discarding remaining results")
                return
        self._emit_unless_cancelled(EndOfStream(segment_count=len(results)), cancel_event)

    def _emit_unless_cancelled(self, event, cancel_event: threading.Event) -> bool:
        with self.emit_lock:
            if cancel_event.is_set():
                return False
            self._emit(event)
            return True

    def transcribe(self, audio_data: bytes) -> List[TranscriptionResult]:
        """Run a synchronous recognize call.

        Raises:
            PermissionDenied: credentials rejected by the service
            EngineFailure: any other API failure
        """
        start_time = time.time()
        audio = speech.RecognitionAudio(content=audio_data)
        try:
            response = self.client.recognize(config=self.config, audio=audio, timeout=self.request_timeout)
        except (gax_exceptions.PermissionDenied, gax_exceptions.Unauthenticated) as e:
            logger.error(f"Google STT rejected credentials: {e}")
            raise PermissionDenied(f"Google Speech access denied: {e}") from e
        except gax_exceptions.DeadlineExceeded as e:
            logger.error("Google STT recognize deadline exceeded")
            raise EngineFailure(f"Google Speech recognize timeout: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            logger.error(f"Google STT API call error: {e}")
            raise EngineFailure(f"Google Speech API error: {e}") from e
        processing_time = time.time() - start_time

        results = []
        for recognition_result in response.results:
            if not recognition_result.alternatives:
                continue
            alternative = recognition_result.alternatives[0]
            if not alternative.transcript.strip():
                continue
            results.append(TranscriptionResult(
                text=alternative.transcript.strip(),
                confidence=alternative.confidence,
                processing_time=processing_time,
                timestamp=datetime.now(),
                service=self.service_name,
                language=self.language,
            ))

        if not results:
            logger.debug("--- NO SPEECH DETECTED ---")
        else:
            logger.debug(f"Recognised {len(results)} segments in {processing_time:.3f}s")
        return results

    def cancel(self) -> None:
        self.is_capturing = False
        self.audio_buffer = bytearray()
        with self.emit_lock:
            self.cancel_event.set()

    def cleanup(self) -> None:
        """Clean up Google Speech client resources."""
        self.cancel()
        thread = self.recognize_thread
        if thread and thread.is_alive():
            thread.join(timeout=self.request_timeout)
        self.client = None

    def get_display_info(self) -> str:
        return f" ({self.service_name}, {self.language})"
