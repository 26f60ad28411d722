"""Tests for analysis reply parsing and the Gemini analysis service."""

import json
from unittest.mock import MagicMock, patch

import pytest

from japaneasy.core import AnalysisError, PartOfSpeech
from japaneasy.services.analysis import GeminiAnalysisService, parse_analysis_payload


SAMPLE_REPLY = {
    "words": [
        {
            "kanji": "書く",
            "furigana": "かく",
            "meaning": "to write",
            "type": "verb",
            "example": "手紙を書く。",
            "exampleFurigana": "てがみをかく。",
            "exampleTranslation": "Write a letter.",
            "conjugations": {
                "dictionary": "書く",
                "masu": "書きます",
                "te": "書いて",
                "nai": "書かない",
                "ta": "書いた",
            },
        },
        {
            "kanji": "静か",
            "furigana": "しずか",
            "meaning": "quiet",
            "type": "na-adjective",
            "example": "",
            "exampleFurigana": "",
            "exampleTranslation": "",
        },
    ],
    "grammar": [
        {"point": "〜てから", "explanation": "after doing", "example": "食べてから寝る。"}
    ],
}


class TestParseAnalysisPayload:
    def test_parses_words_and_grammar(self):
        words, grammar = parse_analysis_payload(json.dumps(SAMPLE_REPLY, ensure_ascii=False))

        assert [w.kanji for w in words] == ["書く", "静か"]
        assert words[0].part_of_speech is PartOfSpeech.VERB
        assert words[0].conjugations.ta == "書いた"
        assert words[0].example_translation == "Write a letter."
        # Unknown tags fall back to OTHER
        assert words[1].part_of_speech is PartOfSpeech.OTHER
        assert words[1].conjugations is None
        assert grammar[0].point == "〜てから"

    def test_strips_markdown_fences(self):
        text = "```json\n" + json.dumps(SAMPLE_REPLY) + "\n```"
        words, grammar = parse_analysis_payload(text)
        assert len(words) == 2
        assert len(grammar) == 1

    def test_drops_malformed_candidates(self):
        reply = {
            "words": [{"kanji": "", "meaning": "empty"}, "not an object", SAMPLE_REPLY["words"][0]],
            "grammar": [{"point": "only a label"}],
        }
        words, grammar = parse_analysis_payload(json.dumps(reply))
        assert [w.kanji for w in words] == ["書く"]
        assert grammar == []

    @pytest.mark.parametrize(
        "text",
        ["", "not json", "[1, 2, 3]", '{"words": "many"}'],
    )
    def test_rejects_unusable_replies(self, text):
        with pytest.raises(AnalysisError):
            parse_analysis_payload(text)


class TestGeminiAnalysisService:
    @pytest.fixture
    def service(self):
        return GeminiAnalysisService(max_retries=2)

    def test_empty_image_is_rejected_without_api_call(self, service):
        with patch("japaneasy.services.analysis.gemini_analysis_service.genai.Client") as client_cls:
            result = service.analyze(b"", "image/png", "key")
        assert not result.is_success()
        client_cls.assert_not_called()

    def test_successful_analysis(self, service):
        with patch("japaneasy.services.analysis.gemini_analysis_service.genai.Client") as client_cls:
            client_cls.return_value.models.generate_content.return_value = MagicMock(
                text=json.dumps(SAMPLE_REPLY)
            )
            result = service.analyze(b"\x89PNG", "image/png", "key")

        assert result.is_success()
        assert len(result.words) == 2
        assert result.model == GeminiAnalysisService.MODEL_NAME
        kwargs = client_cls.return_value.models.generate_content.call_args.kwargs
        assert kwargs["config"].response_mime_type == "application/json"

    def test_malformed_reply_becomes_error_result(self, service):
        with patch("japaneasy.services.analysis.gemini_analysis_service.genai.Client") as client_cls:
            client_cls.return_value.models.generate_content.return_value = MagicMock(text="oops")
            result = service.analyze(b"img", "image/jpeg", "key")

        assert not result.is_success()
        assert "expected format" in result.error

    def test_rate_limit_is_retried(self, service):
        with patch("japaneasy.services.analysis.gemini_analysis_service.genai.Client") as client_cls, \
                patch("japaneasy.services.analysis.gemini_analysis_service.time.sleep") as sleep:
            client_cls.return_value.models.generate_content.side_effect = [
                Exception("429 RESOURCE_EXHAUSTED"),
                MagicMock(text=json.dumps(SAMPLE_REPLY)),
            ]
            result = service.analyze(b"img", "image/jpeg", "key")

        assert result.is_success()
        sleep.assert_called_once_with(2)

    def test_quota_exhausted_after_retries(self, service):
        with patch("japaneasy.services.analysis.gemini_analysis_service.genai.Client") as client_cls, \
                patch("japaneasy.services.analysis.gemini_analysis_service.time.sleep"):
            client_cls.return_value.models.generate_content.side_effect = Exception("quota exceeded")
            result = service.analyze(b"img", "image/jpeg", "key")

        assert result.error == "API quota exceeded. Please try again later."
