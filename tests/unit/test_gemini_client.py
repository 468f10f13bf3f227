"""
Unit Tests for gemini_client

SDK 호출은 MagicMock 클라이언트로 대체합니다.
"""

import base64
from unittest.mock import MagicMock

import pytest
from google.genai import types

from nano_image.services.image.image_extractor import extract_artifacts
from nano_image.services.llm.gemini_client import (
    GeminiImageGenerator,
    MockImageGenerator,
    get_image_generator,
    is_mock_mode,
    response_to_dict,
)


class TestMockMode:

    def test_mock_mode_flag(self, monkeypatch):
        assert is_mock_mode() is False
        monkeypatch.setenv("MOCK_MODE", "True")
        assert is_mock_mode() is True

    def test_generator_selection(self, monkeypatch):
        assert isinstance(get_image_generator(), GeminiImageGenerator)
        monkeypatch.setenv("MOCK_MODE", "true")
        assert isinstance(get_image_generator(), MockImageGenerator)

    def test_mock_response_echoes_image(self):
        response = MockImageGenerator().generate("k", "m", "prompt", "AAAA")
        result = extract_artifacts(response)

        assert [a.data for a in result.artifacts] == ["AAAA"]
        assert result.text == "[mock:m] prompt"


class TestGeminiImageGenerator:

    def _generator_with_client(self, client):
        generator = GeminiImageGenerator()
        generator._create_client = MagicMock(return_value=client)
        return generator

    def test_sends_text_then_inline_png(self):
        client = MagicMock()
        client.models.generate_content.return_value = {"candidates": []}
        generator = self._generator_with_client(client)
        image = base64.b64encode(b"\x89PNG fake").decode("ascii")

        result = generator.generate(api_key="k", model="gemini-2.5-flash-image", prompt="blue", image_base64=image)

        assert result == {"candidates": []}
        generator._create_client.assert_called_once_with("k")
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash-image"
        text_part, image_part = kwargs["contents"]
        assert text_part.text == "blue"
        assert image_part.inline_data.mime_type == "image/png"
        assert image_part.inline_data.data == b"\x89PNG fake"

    def test_sdk_errors_propagate(self):
        client = MagicMock()
        client.models.generate_content.side_effect = RuntimeError("429 RESOURCE_EXHAUSTED")
        generator = self._generator_with_client(client)

        with pytest.raises(RuntimeError, match="429"):
            generator.generate(api_key="k", model="m", prompt="p", image_base64="AAAA")


class TestResponseToDict:

    def test_sdk_response_dumped_with_aliases(self):
        response = types.GenerateContentResponse(
            candidates=[
                types.Candidate(
                    content=types.Content(
                        role="model",
                        parts=[
                            types.Part(text="done"),
                            types.Part(inline_data=types.Blob(data=b"abc", mime_type="image/jpeg")),
                        ],
                    )
                )
            ]
        )

        dumped = response_to_dict(response)
        result = extract_artifacts(dumped)

        assert isinstance(dumped, dict)
        assert "inlineData" in dumped["candidates"][0]["content"]["parts"][1]
        assert len(result.artifacts) == 1
        assert result.artifacts[0].mime_type == "image/jpeg"
        assert result.text == "done"

    def test_plain_dict_passthrough(self):
        payload = {"candidates": []}
        assert response_to_dict(payload) is payload
