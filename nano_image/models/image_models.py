# -*- coding: utf-8 -*-
"""
Image transform models.

이미지 변환 요청/결과 및 분류된 에러의 데이터 모델을 정의합니다.
Wire 포맷은 camelCase (mimeType) 를 사용하므로 alias 를 통해 직렬화합니다.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_ARTIFACT_MIME_TYPE = "image/png"
NO_IMAGES_WARNING = "no_images_generated"


class ErrorKind(str, Enum):
    """분류된 에러 종류"""
    INVALID_ARGUMENT = "InvalidArgument"        # 잘못된/누락된/과대 입력
    FAILED_PRECONDITION = "FailedPrecondition"  # 사용 가능한 API 키 없음
    RESOURCE_EXHAUSTED = "ResourceExhausted"    # Rate limit / quota
    INTERNAL = "Internal"                       # 그 외 원격 호출 실패


class ClassifiedError(Exception):
    """
    Error raised by the handler, tagged with one of a small fixed set of kinds.

    Callers use `kind` to decide retry/backoff/user-messaging behaviour.
    `message` is caller-visible and must never contain secrets.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"ClassifiedError(kind={self.kind.value!r}, message={self.message!r})"


class TransformRequest(BaseModel):
    """Inbound request: base64 image (optionally data-URI prefixed) and a prompt."""

    image: Optional[str] = None
    prompt: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "TransformRequest":
        payload = payload or {}
        image = payload.get("image")
        prompt = payload.get("prompt")
        # 문자열이 아닌 값은 누락으로 취급 (검증 단계에서 InvalidArgument)
        return cls(
            image=image if isinstance(image, str) else None,
            prompt=prompt if isinstance(prompt, str) else None,
        )


class GeneratedArtifact(BaseModel):
    """A generated binary payload (base64) and its MIME type."""

    model_config = ConfigDict(populate_by_name=True)

    data: str
    mime_type: str = Field(default=DEFAULT_ARTIFACT_MIME_TYPE, alias="mimeType")


class TransformResult(BaseModel):
    """
    Handler result.

    Invariants:
        - count == len(images)
        - images is empty only when warning == "no_images_generated"
    """

    images: List[GeneratedArtifact] = Field(default_factory=list)
    text: Optional[str] = None
    count: int = 0
    warning: Optional[str] = None

    @classmethod
    def from_artifacts(
        cls,
        artifacts: List[GeneratedArtifact],
        text: Optional[str] = None,
    ) -> "TransformResult":
        if not artifacts:
            return cls(images=[], text=text, count=0, warning=NO_IMAGES_WARNING)
        return cls(images=list(artifacts), text=text, count=len(artifacts))

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation; `warning` is omitted when unset."""
        payload = {
            "images": [a.model_dump(by_alias=True) for a in self.images],
            "text": self.text,
            "count": self.count,
        }
        if self.warning is not None:
            payload["warning"] = self.warning
        return payload
