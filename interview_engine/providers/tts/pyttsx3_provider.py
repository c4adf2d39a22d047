"""
Text-to-Speech provider using pyttsx3.

Synthesizes the interviewer's reply so a voice client can play it.
Synthesis is optional: any failure raises `VoiceSynthesisError` and the
caller answers text-only.
"""
import asyncio
import logging
import tempfile
import wave
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import pyttsx3

from interview_engine.core.exceptions import VoiceSynthesisError

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    """Result of text-to-speech synthesis."""
    audio_data: bytes
    sample_rate: int
    duration_seconds: float
    text: str
    voice_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sample_rate": self.sample_rate,
            "duration_seconds": self.duration_seconds,
            "text": self.text,
            "voice_id": self.voice_id,
            "audio_size_bytes": len(self.audio_data),
        }


class VoiceSynthesizer(ABC):
    """Turns interviewer text into audio."""

    @abstractmethod
    async def synthesize(self, text: str) -> SynthesisResult:
        """Synthesize `text`; raises VoiceSynthesisError on failure."""


class Pyttsx3VoiceSynthesizer(VoiceSynthesizer):
    """
    Voice synthesizer backed by the system TTS engine (SAPI5, NSSpeech, espeak).

    A fresh engine is created per request because pyttsx3 engines are not
    safe to share across executor threads.
    """

    def __init__(
        self,
        voice_id: Optional[str] = None,
        rate: int = 150,  # Words per minute
        volume: float = 1.0,
    ):
        self.voice_id = voice_id
        self.rate = rate
        self.volume = max(0.0, min(1.0, volume))
        logger.info(f"Initialized TTS provider: rate={rate}, volume={self.volume}")

    async def synthesize(self, text: str) -> SynthesisResult:
        if not text or not text.strip():
            raise VoiceSynthesisError("Text cannot be empty")

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._synthesize_sync, text)
        except VoiceSynthesisError:
            raise
        except Exception as e:
            raise VoiceSynthesisError(f"Speech synthesis failed: {e}", cause=e)

    def _synthesize_sync(self, text: str) -> SynthesisResult:
        with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as f:
            temp_path = f.name

        try:
            engine = pyttsx3.init()
            engine.setProperty('rate', self.rate)
            engine.setProperty('volume', self.volume)
            if self.voice_id:
                engine.setProperty('voice', self.voice_id)

            engine.save_to_file(text, temp_path)
            engine.runAndWait()
            engine.stop()

            audio_data = Path(temp_path).read_bytes()
            if not audio_data:
                raise VoiceSynthesisError("TTS engine produced no audio")

            with wave.open(temp_path, 'rb') as wav:
                sample_rate = wav.getframerate()
                duration = wav.getnframes() / sample_rate

            return SynthesisResult(
                audio_data=audio_data,
                sample_rate=sample_rate,
                duration_seconds=duration,
                text=text,
                voice_id=self.voice_id or "default",
            )
        finally:
            Path(temp_path).unlink(missing_ok=True)


_voice_synthesizer: Optional[VoiceSynthesizer] = None


def get_voice_synthesizer() -> VoiceSynthesizer:
    """Get or create the voice synthesizer singleton."""
    global _voice_synthesizer
    if _voice_synthesizer is None:
        _voice_synthesizer = Pyttsx3VoiceSynthesizer()
    return _voice_synthesizer
