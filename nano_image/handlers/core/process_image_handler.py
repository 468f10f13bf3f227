"""
Lambda entry point for POST /processImageWithNano.

Speaks the callable wire protocol:
  - request body: ``{"data": {"image": "<base64>", "prompt": "..."}}``
    (a bare ``{"image": ..., "prompt": ...}`` body or direct invocation
    payload is accepted as well)
  - success: 200 ``{"result": {"images": [...], "text": ..., "count": n}}``
  - failure: ``{"error": {"status": "INVALID_ARGUMENT", "message": "..."}}``

All request handling lives in ImageTransformHandler; this module only
parses the event and maps ClassifiedError kinds onto HTTP statuses.
Configuration is read fresh on every invocation.
"""

import base64
import binascii
import json
from typing import Any, Dict, Optional, Tuple

from nano_image.common.config_sources import HandlerConfig
from nano_image.common.http_utils import build_error_response, build_response, build_result_response
from nano_image.common.logging_utils import get_powertools_logger
from nano_image.models.image_models import ClassifiedError, ErrorKind, TransformRequest
from nano_image.services.image.image_transform_service import ImageTransformHandler

logger = get_powertools_logger()

# ErrorKind -> (HTTP status, canonical status)
ERROR_STATUS_MAP: Dict[ErrorKind, Tuple[int, str]] = {
    ErrorKind.INVALID_ARGUMENT: (400, "INVALID_ARGUMENT"),
    ErrorKind.FAILED_PRECONDITION: (400, "FAILED_PRECONDITION"),
    ErrorKind.RESOURCE_EXHAUSTED: (429, "RESOURCE_EXHAUSTED"),
    ErrorKind.INTERNAL: (500, "INTERNAL"),
}


class InvalidBodyError(ValueError):
    pass


def _is_options(event: Dict[str, Any]) -> bool:
    if event.get("httpMethod") == "OPTIONS":
        return True
    return event.get("requestContext", {}).get("http", {}).get("method") == "OPTIONS"


def parse_request(event: Dict[str, Any]) -> TransformRequest:
    """
    Extract the request fields from a proxy event or a direct invocation.

    Raises:
        InvalidBodyError: body is not valid JSON / base64
    """
    if "body" in event:
        body: Any = event.get("body")
        if isinstance(body, str):
            try:
                if event.get("isBase64Encoded"):
                    body = base64.b64decode(body).decode("utf-8")
                body = json.loads(body) if body else {}
            except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, ValueError) as e:
                raise InvalidBodyError(f"invalid body: {e}") from e
    else:
        body = event

    if not isinstance(body, dict):
        raise InvalidBodyError("invalid body: expected a JSON object")

    data = body.get("data")
    payload = data if isinstance(data, dict) else body
    return TransformRequest.from_payload(payload)


def error_response(error: ClassifiedError) -> Dict[str, Any]:
    status_code, status = ERROR_STATUS_MAP.get(error.kind, ERROR_STATUS_MAP[ErrorKind.INTERNAL])
    return build_error_response(status_code, status, error.message)


def lambda_handler(event: Dict[str, Any], context: Any = None,
                   handler: Optional[ImageTransformHandler] = None) -> Dict[str, Any]:
    event = event or {}
    if _is_options(event):
        return build_response(200)

    request_id = getattr(context, "aws_request_id", None)
    if request_id:
        logger.append_keys(request_id=request_id)

    try:
        request = parse_request(event)
    except InvalidBodyError as e:
        logger.warning(str(e))
        return build_error_response(400, "INVALID_ARGUMENT", "Request body must be a JSON object.")

    handler = handler or ImageTransformHandler(config=HandlerConfig.from_environment())

    try:
        result = handler.handle(request)
    except ClassifiedError as e:
        logger.warning("Request failed", extra={"kind": e.kind.value, "error_message": e.message})
        return error_response(e)
    except Exception:
        logger.exception("Unhandled error in processImageWithNano")
        return build_error_response(500, "INTERNAL", "Internal error.")

    logger.info("Request completed", extra={"count": result.count, "warning": result.warning})
    return build_result_response(result.to_payload())
