# -*- coding: utf-8 -*-
"""
Security Utilities - 비밀값 마스킹

API 키 등 비밀값이 로그나 클라이언트 응답에 노출되지 않도록 처리합니다.
"""

from typing import Optional

MASK = "***MASKED***"


def redact_secret(text: Optional[str], secret: Optional[str]) -> str:
    """
    텍스트 안에 포함된 비밀값을 마스킹 문자열로 치환

    SDK 에러 메시지가 요청 URL(?key=...)을 그대로 포함하는 경우가 있어
    클라이언트에 전달하기 전에 적용합니다.

    Args:
        text: 원본 텍스트
        secret: 가릴 비밀값

    Returns:
        str: 비밀값이 치환된 텍스트
    """
    if not text:
        return text or ""
    if not secret:
        return text
    return text.replace(secret, MASK)
