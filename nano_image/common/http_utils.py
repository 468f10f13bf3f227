"""
HTTP response helpers for Lambda proxy integrations.

Responses follow the callable wire protocol: a success body is
``{"result": ...}`` and a failure body is
``{"error": {"status": "<CANONICAL_STATUS>", "message": "..."}}``.
"""

import json
import os
from typing import Any, Dict, Optional

JSON_HEADERS = {"Content-Type": "application/json"}


def get_cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": os.getenv("CORS_ALLOW_ORIGIN", "*"),
        "Access-Control-Allow-Headers": "Content-Type,Authorization",
        "Access-Control-Allow-Methods": "OPTIONS,POST",
    }


def get_json_headers() -> Dict[str, str]:
    headers = dict(JSON_HEADERS)
    headers.update(get_cors_headers())
    return headers


def build_response(status_code: int, body: Optional[Any] = None) -> Dict[str, Any]:
    """Build an API Gateway proxy response with JSON body and CORS headers."""
    return {
        "statusCode": status_code,
        "headers": get_json_headers(),
        "body": "" if body is None else json.dumps(body),
    }


def build_result_response(result: Dict[str, Any]) -> Dict[str, Any]:
    return build_response(200, {"result": result})


def build_error_response(status_code: int, status: str, message: str) -> Dict[str, Any]:
    return build_response(status_code, {"error": {"status": status, "message": message}})
