# -*- coding: utf-8 -*-
"""
Gemini Client - Gemini Native API 이미지 생성 클라이언트

텍스트 프롬프트와 inline 이미지를 함께 보내 이미지 생성 모델을 호출합니다.

Features:
- google-genai SDK 를 통한 generate_content 호출 (text part + inline image part)
- 응답을 JSON 형태의 dict 로 변환 (추출 단계는 SDK 타입에 의존하지 않음)
- Mock 모드 지원 (MOCK_MODE=true, 네트워크 호출 없음)
"""

import base64
import os
from typing import Any, Dict, Protocol

from nano_image.common.logging_utils import get_logger

logger = get_logger(__name__)

INPUT_IMAGE_MIME_TYPE = "image/png"


def is_mock_mode() -> bool:
    return os.getenv("MOCK_MODE", "false").strip().lower() in ("true", "1", "yes")


class ImageGenerator(Protocol):
    def generate(self, api_key: str, model: str, prompt: str, image_base64: str) -> Any:
        ...


def response_to_dict(response: Any) -> Any:
    """SDK 응답을 camelCase dict 로 변환 (이미 dict 이면 그대로)"""
    model_dump = getattr(response, "model_dump", None)
    if callable(model_dump):
        return model_dump(mode="json", by_alias=True, exclude_none=True)
    return response


class GeminiImageGenerator:
    """google.genai 기반 이미지 생성기"""

    def _create_client(self, api_key: str):
        from google import genai

        return genai.Client(api_key=api_key)

    def generate(self, api_key: str, model: str, prompt: str, image_base64: str) -> Any:
        """
        Gemini generate_content 호출

        Args:
            api_key: API 키 (로그에 남기지 않음)
            model: 모델 ID
            prompt: 사용자 프롬프트
            image_base64: data URI prefix 가 제거된 base64 이미지

        Returns:
            JSON 형태의 응답 dict
        """
        from google.genai import types

        client = self._create_client(api_key)
        contents = [
            types.Part.from_text(text=prompt),
            types.Part.from_bytes(
                data=base64.b64decode(image_base64),
                mime_type=INPUT_IMAGE_MIME_TYPE,
            ),
        ]
        response = client.models.generate_content(model=model, contents=contents)
        return response_to_dict(response)


class MockImageGenerator:
    """MOCK_MODE 용 합성 응답 (입력 이미지를 그대로 돌려줌)"""

    def generate(self, api_key: str, model: str, prompt: str, image_base64: str) -> Dict[str, Any]:
        logger.info("MOCK_MODE: Gemini image synthetic response")
        return {
            "candidates": [
                {
                    "content": {
                        "role": "model",
                        "parts": [
                            {"text": f"[mock:{model}] {prompt}"},
                            {
                                "inlineData": {
                                    "mimeType": INPUT_IMAGE_MIME_TYPE,
                                    "data": image_base64,
                                }
                            },
                        ],
                    },
                    "finishReason": "STOP",
                }
            ],
            "modelVersion": model,
        }


def get_image_generator() -> ImageGenerator:
    if is_mock_mode():
        return MockImageGenerator()
    return GeminiImageGenerator()
