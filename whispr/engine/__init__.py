"""Speech engine module for Whispr."""

from .base import AbstractSpeechEngine
from .scripted import ScriptedSpeechEngine
from .audio_source import WaveAudioSource

__all__ = [
    "AbstractSpeechEngine",
    "ScriptedSpeechEngine",
    "WaveAudioSource",
]
