"""Provider implementations."""

from app.ai.providers.base import JsonGenerator, SpeechSynthesizer
from app.ai.providers.gemini import GeminiJsonGenerator, GeminiSpeechSynthesizer
from app.ai.providers.whisper import TranscriptionAdapter

__all__ = ["GeminiJsonGenerator", "GeminiSpeechSynthesizer", "JsonGenerator", "SpeechSynthesizer", "TranscriptionAdapter"]
