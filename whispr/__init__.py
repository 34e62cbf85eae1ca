"""Whispr - voice-to-text transcription screen."""

__version__ = "0.1.0"
