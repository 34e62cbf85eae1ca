"""WAV file audio source used in place of a live microphone."""

import wave
import logging
from pathlib import Path
from typing import Callable, Iterator

logger = logging.getLogger(__name__)


class WaveAudioSource:
    """Reads 16-bit PCM WAV audio in fixed-size chunks."""

    def __init__(self, file_path: str, chunk_size: int = 1024):
        """Initialize audio source.

        Args:
            file_path: Path to a 16-bit PCM WAV file
            chunk_size: Number of frames per chunk
        """
        self.file_path = Path(file_path)
        self.chunk_size = chunk_size
        if not self.file_path.exists():
            raise FileNotFoundError(f"Audio file not found: {self.file_path}")

        with wave.open(str(self.file_path), 'rb') as wf:
            self.sample_rate = wf.getframerate()
            self.channels = wf.getnchannels()
            self.sample_width = wf.getsampwidth()
            self.total_frames = wf.getnframes()

        if self.sample_width != 2:
            raise ValueError(f"Expected 16-bit audio, got {self.sample_width * 8}-bit: {self.file_path}")

        logger.info(f"Audio source {self.file_path.name}: {self.sample_rate}Hz, "
                    f"{self.channels} channel(s), {self.duration_seconds:.1f}s")

    @property
    def duration_seconds(self) -> float:
        if not self.sample_rate:
            return 0.0
        return self.total_frames / self.sample_rate

    def iter_chunks(self) -> Iterator[bytes]:
        with wave.open(str(self.file_path), 'rb') as wf:
            while True:
                chunk = wf.readframes(self.chunk_size)
                if not chunk:
                    break
                yield chunk

    def feed(self, callback: Callable[[bytes], None]) -> int:
        """Pass every chunk to callback.

        Returns:
            Number of chunks fed
        """
        count = 0
        for chunk in self.iter_chunks():
            callback(chunk)
            count += 1
        logger.debug(f"Fed {count} chunks from {self.file_path.name}")
        return count
