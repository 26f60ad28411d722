"""Gemini Analysis Service - Extracts flashcards from images via Google Gemini API."""

import logging
import time

import google.genai as genai
from google.genai import types

from japaneasy.core import AnalysisError
from japaneasy.services.analysis.analysis_service import (
    AnalysisResult,
    AnalysisService,
    parse_analysis_payload,
)

logger = logging.getLogger(__name__)


class GeminiAnalysisService(AnalysisService):
    """
    Analysis service using Google Gemini API.

    Asks for a JSON reply and validates it before anything becomes an entity.
    """

    MODEL_NAME = "gemini-2.5-flash"

    PROMPT_TEMPLATE = """Analyze the Japanese content in this image and reply strictly in the JSON format below.

1. Extract at least 10-15 important Japanese words.
2. For verbs (type "verb"), include the conjugations object.
3. Extract the important grammar points.
4. Write all explanations and translations in {language}.

JSON structure:
{{
  "words": [
    {{
      "kanji": "word",
      "furigana": "reading",
      "meaning": "meaning",
      "type": "verb|noun|adjective|adverb|particle|other",
      "example": "example sentence",
      "exampleFurigana": "example sentence reading",
      "exampleTranslation": "example sentence translation",
      "conjugations": {{
        "dictionary": "dictionary form", "masu": "masu form", "te": "te form", "nai": "nai form", "ta": "ta form"
      }}
    }}
  ],
  "grammar": [
    {{ "point": "grammar point", "explanation": "explanation", "example": "example sentence" }}
  ]
}}"""

    def __init__(self, language: str = "Traditional Chinese", max_retries: int = 3) -> None:
        self.language = language
        self.max_retries = max_retries

    def analyze(self, image_bytes: bytes, mime_type: str, api_key: str) -> AnalysisResult:
        """Send the image to Gemini and parse the structured reply."""
        if not image_bytes:
            return AnalysisResult(model=self.MODEL_NAME, error="No image data provided")

        retry_delay = 2
        attempt = 0

        while attempt < self.max_retries:
            attempt += 1
            try:
                client = genai.Client(api_key=api_key)
                logger.debug(
                    "Analysis request attempt %d/%d (%s, %d bytes)",
                    attempt,
                    self.max_retries,
                    mime_type,
                    len(image_bytes),
                )
                response = client.models.generate_content(
                    model=self.MODEL_NAME,
                    contents=[
                        types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                        self.PROMPT_TEMPLATE.format(language=self.language),
                    ],
                    config=types.GenerateContentConfig(
                        temperature=0.3,
                        response_mime_type="application/json",
                    ),
                )
            except Exception as exc:
                error_msg = str(exc).lower()
                is_rate_limit = (
                    "429" in error_msg
                    or "resource_exhausted" in error_msg
                    or "quota" in error_msg
                    or "rate_limit" in error_msg
                )

                if is_rate_limit and attempt < self.max_retries:
                    logger.info("Rate limit detected. Retrying in %s seconds", retry_delay)
                    time.sleep(retry_delay)
                    retry_delay *= 2
                    continue

                logger.error("Analysis request failed: %s", exc)
                if "api_key" in error_msg or "authentication" in error_msg or "invalid" in error_msg:
                    return AnalysisResult(model=self.MODEL_NAME, error=f"Invalid API key or request: {exc}")
                if is_rate_limit:
                    return AnalysisResult(
                        model=self.MODEL_NAME,
                        error="API quota exceeded. Please try again later.",
                    )
                if "deadline" in error_msg or "timeout" in error_msg:
                    return AnalysisResult(
                        model=self.MODEL_NAME,
                        error="Request timed out. Please check your connection.",
                    )
                return AnalysisResult(model=self.MODEL_NAME, error=f"Analysis failed: {exc}")

            try:
                words, grammar = parse_analysis_payload(response.text)
            except AnalysisError as exc:
                logger.error("Unusable analysis reply: %s", exc)
                return AnalysisResult(
                    model=self.MODEL_NAME,
                    error="The AI reply was not in the expected format. Please try again.",
                )

            logger.info("Analysis returned %d words and %d grammar points", len(words), len(grammar))
            return AnalysisResult(words=words, grammar=grammar, model=self.MODEL_NAME)

        return AnalysisResult(model=self.MODEL_NAME, error="Analysis failed after retries")
