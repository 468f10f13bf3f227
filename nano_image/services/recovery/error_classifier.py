"""
Error Classifier Service
========================

원격 생성 호출에서 발생한 에러를 클라이언트용 분류로 변환:
1. RESOURCE_EXHAUSTED: rate limit / quota 신호 (메시지 휴리스틱)
2. INTERNAL: 그 외 모든 에러 (원본 메시지 유지)

Validation / credential 에러는 호출 전에 핸들러에서 직접 발생하므로
여기서는 다루지 않습니다.
"""

import re
from collections.abc import Mapping
from typing import Optional

from nano_image.common.logging_utils import get_logger
from nano_image.common.security_utils import redact_secret
from nano_image.models.image_models import ClassifiedError, ErrorKind

logger = get_logger(__name__)

RATE_LIMIT_MESSAGE = "AI rate limit or quota exceeded."
INTERNAL_MESSAGE_PREFIX = "AI processing failed: "
UNKNOWN_ERROR_MESSAGE = "Unknown error"


class ErrorClassifier:
    """
    에러 분류기: 원격 호출 실패 -> ClassifiedError

    Resource Exhausted (재시도/backoff 대상):
    - 메시지에 "429" 포함
    - quota / too many requests / exceeded (대소문자 무시)

    Internal:
    - 그 외 전부
    """

    RATE_LIMIT_MARKER = "429"
    RATE_LIMIT_PATTERNS = [
        r"quota",
        r"too many requests",
        r"exceeded",
    ]

    def __init__(self):
        self._rate_limit_compiled = [
            re.compile(p, re.IGNORECASE) for p in self.RATE_LIMIT_PATTERNS
        ]

    @staticmethod
    def error_message(error: BaseException) -> str:
        message = getattr(error, "message", None)
        if isinstance(message, str) and message:
            # google.genai APIError 는 .message 에 상태 코드가 없으므로 str() 과 합침
            text = str(error)
            return text if message in text else f"{text} {message}".strip()
        return str(error)

    def is_rate_limited(self, message: str) -> bool:
        if self.RATE_LIMIT_MARKER in message:
            return True
        return any(p.search(message) for p in self._rate_limit_compiled)

    @staticmethod
    def retry_after_hint(error: BaseException) -> Optional[str]:
        """
        error.response.headers['retry-after'] 에서 재시도 힌트 추출 (best-effort)

        추출 실패는 무시합니다.
        """
        try:
            headers = getattr(getattr(error, "response", None), "headers", None)
            if headers is None:
                return None
            value = headers.get("retry-after")
            if value is None and isinstance(headers, Mapping):
                # 일반 dict 는 대소문자를 구분함
                value = headers.get("Retry-After")
            if value is None or value == "":
                return None
            return str(value)
        except Exception:
            return None

    def classify(self, error: BaseException, secret: Optional[str] = None) -> ClassifiedError:
        """
        에러를 분류하여 ClassifiedError 로 반환합니다.

        Args:
            error: 원격 호출에서 발생한 예외
            secret: 메시지에서 가릴 비밀값 (API 키)

        Returns:
            ClassifiedError: RESOURCE_EXHAUSTED 또는 INTERNAL
        """
        message = self.error_message(error)

        if self.is_rate_limited(message):
            retry_after = self.retry_after_hint(error)
            retry_info = f" Retry after {retry_after}s." if retry_after else ""
            return ClassifiedError(
                ErrorKind.RESOURCE_EXHAUSTED,
                redact_secret(f"{RATE_LIMIT_MESSAGE}{retry_info}", secret),
            )

        return ClassifiedError(
            ErrorKind.INTERNAL,
            redact_secret(f"{INTERNAL_MESSAGE_PREFIX}{message or UNKNOWN_ERROR_MESSAGE}", secret),
        )


# Singleton instance
_error_classifier = None


def get_error_classifier() -> ErrorClassifier:
    """싱글톤 ErrorClassifier 인스턴스 반환"""
    global _error_classifier
    if _error_classifier is None:
        _error_classifier = ErrorClassifier()
    return _error_classifier
