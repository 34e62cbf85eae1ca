"""Pytest configuration and fixtures for Whispr tests."""

import pytest
import tempfile
import logging
import wave
from pathlib import Path
from typing import List, Optional
from unittest.mock import Mock

import numpy as np
from pubsub import pub

from whispr.engine.base import AbstractSpeechEngine
from whispr.engine.scripted import ScriptedSpeechEngine
from whispr.models.events import EngineEvent
from whispr.models.session import SessionSnapshot
from whispr.services.clipboard import InMemoryClipboard
from whispr.services.dispatcher import Dispatcher
from whispr.services.session_controller import SessionController
from whispr.services.share import ShareService


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FakeSpeechEngine(AbstractSpeechEngine):
    """Engine double that records calls and lets tests emit events."""

    def __init__(self, start_error: Optional[Exception] = None, stop_error: Optional[Exception] = None):
        super().__init__()
        self.start_error = start_error
        self.stop_error = stop_error
        self.start_calls = 0
        self.stop_calls = 0
        self.cancel_calls = 0

    def initialize(self) -> bool:
        return True

    def start(self) -> None:
        self.start_calls += 1
        if self.start_error is not None:
            raise self.start_error

    def stop(self) -> None:
        self.stop_calls += 1
        if self.stop_error is not None:
            raise self.stop_error

    def cancel(self) -> None:
        self.cancel_calls += 1

    def cleanup(self) -> None:
        pass

    def emit(self, event: EngineEvent) -> None:
        """Simulate the engine delivering an event from its worker."""
        self._emit(event)


class SnapshotRecorder:
    """Collects published snapshots."""

    def __init__(self):
        self.snapshots: List[SessionSnapshot] = []

    def record(self, snapshot: SessionSnapshot) -> None:
        self.snapshots.append(snapshot)

    @property
    def states(self):
        return [s.state for s in self.snapshots]

    @property
    def last(self) -> Optional[SessionSnapshot]:
        return self.snapshots[-1] if self.snapshots else None


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop pub/sub subscriptions between tests."""
    pub.unsubAll()
    yield
    pub.unsubAll()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def fake_engine():
    return FakeSpeechEngine()


@pytest.fixture
def scripted_engine():
    """Scripted engine that emits synchronously from stop()."""
    return ScriptedSpeechEngine(phrase="hello brave new world", word_delay=0)


@pytest.fixture
def clipboard():
    return InMemoryClipboard()


@pytest.fixture
def share_service():
    return Mock(spec=ShareService)


@pytest.fixture
def dispatcher():
    return Dispatcher()


@pytest.fixture
def controller(fake_engine, clipboard, share_service, dispatcher):
    controller = SessionController(
        engine=fake_engine,
        clipboard=clipboard,
        share=share_service,
        dispatcher=dispatcher,
    )
    yield controller
    controller.close()


@pytest.fixture
def recorder(controller):
    recorder = SnapshotRecorder()
    controller.subscribe(recorder.record)
    return recorder


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # 1024 samples of 16-bit audio (440 Hz sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * 440 * t)
    return (wave_data * 32767).astype(np.int16).tobytes()


@pytest.fixture
def sample_audio_file(temp_data_dir, sample_audio_chunk):
    """Create a sample WAV file for testing."""
    file_path = Path(temp_data_dir) / "test_audio.wav"

    with wave.open(str(file_path), 'wb') as wf:
        wf.setnchannels(1)  # Mono
        wf.setsampwidth(2)  # 16-bit
        wf.setframerate(16000)  # 16kHz

        # 10 chunks, ~0.64 seconds
        for _ in range(10):
            wf.writeframes(sample_audio_chunk)

    return str(file_path)


@pytest.fixture
def fake_engine_factory():
    """Build FakeSpeechEngine instances with custom behaviour."""
    return FakeSpeechEngine


@pytest.fixture
def snapshot_recorder_factory():
    return SnapshotRecorder


@pytest.fixture
def make_controller(clipboard, share_service):
    """Build extra controllers that are closed after the test."""
    created = []

    def factory(engine=None, **kwargs):
        controller = SessionController(
            engine=engine or FakeSpeechEngine(),
            clipboard=clipboard,
            share=share_service,
            **kwargs
        )
        created.append(controller)
        return controller

    yield factory
    for controller in created:
        controller.close()
