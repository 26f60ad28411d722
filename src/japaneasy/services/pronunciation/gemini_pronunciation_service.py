"""Gemini Pronunciation Service - speech synthesis via the Gemini TTS model."""

import base64
import logging

import google.genai as genai
from google.genai import types

from japaneasy.services.pronunciation.pronunciation_service import (
    PronunciationResult,
    PronunciationService,
)

logger = logging.getLogger(__name__)


class GeminiPronunciationService(PronunciationService):
    MODEL_NAME = "gemini-2.5-flash-preview-tts"
    VOICE_NAME = "Kore"
    SAMPLE_RATE = 24000

    def synthesize(self, text: str, api_key: str) -> PronunciationResult:
        if not text or not text.strip():
            return PronunciationResult(audio=None, model=self.MODEL_NAME, error="Nothing to read")
        try:
            client = genai.Client(api_key=api_key)
            response = client.models.generate_content(
                model=self.MODEL_NAME,
                contents=f"Read aloud: {text.strip()}",
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(
                                voice_name=self.VOICE_NAME,
                            )
                        )
                    ),
                ),
            )
        except Exception as exc:
            logger.error("Pronunciation request failed: %s", exc)
            return PronunciationResult(
                audio=None, model=self.MODEL_NAME, error=f"Pronunciation failed: {exc}"
            )

        audio = self._extract_audio(response)
        if not audio:
            return PronunciationResult(audio=None, model=self.MODEL_NAME, error="No audio in response")
        return PronunciationResult(audio=audio, model=self.MODEL_NAME, sample_rate=self.SAMPLE_RATE)

    @staticmethod
    def _extract_audio(response) -> bytes:
        try:
            data = response.candidates[0].content.parts[0].inline_data.data
        except (AttributeError, IndexError, TypeError):
            return b""
        if isinstance(data, str):
            return base64.b64decode(data)
        return data or b""
