"""
Text-to-Speech providers.

Optional speech for the interviewer's replies.
"""
from interview_engine.providers.tts.pyttsx3_provider import (
    VoiceSynthesizer,
    Pyttsx3VoiceSynthesizer,
    SynthesisResult,
    get_voice_synthesizer,
)

__all__ = [
    "VoiceSynthesizer",
    "Pyttsx3VoiceSynthesizer",
    "SynthesisResult",
    "get_voice_synthesizer",
]
