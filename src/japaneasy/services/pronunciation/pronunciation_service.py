"""Pronunciation Service - text-to-speech for headwords."""

import io
import wave
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class PronunciationResult:
    """Raw 16-bit little-endian PCM audio, or an error."""

    audio: Optional[bytes]
    model: Optional[str]
    sample_rate: int = 24000
    channels: int = 1
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.error is None and bool(self.audio)

    def to_wav_bytes(self) -> bytes:
        """Wrap the PCM payload in a WAV container for playback."""
        if not self.audio:
            raise ValueError("No audio to encode")
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(self.channels)
            wav.setsampwidth(2)
            wav.setframerate(self.sample_rate)
            wav.writeframes(self.audio)
        return buffer.getvalue()


class PronunciationService(ABC):
    @abstractmethod
    def synthesize(self, text: str, api_key: str) -> PronunciationResult:
        """Produce spoken audio for Japanese text."""
        pass
