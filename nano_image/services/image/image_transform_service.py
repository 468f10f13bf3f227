# -*- coding: utf-8 -*-
"""
Image Transform Service

이미지 + 프롬프트를 받아 생성 모델을 호출하고, 생성된 이미지와 텍스트를
반환하는 단일 선형 파이프라인입니다.

    validate -> sanitize -> resolve credentials -> select model
    -> invoke -> extract (typed path, then generic scan) -> assemble

에러 게이트:
    - 입력 검증 실패      -> InvalidArgument (네트워크 호출 전)
    - API 키 없음         -> FailedPrecondition (네트워크 호출 전)
    - 원격 호출 실패      -> ErrorClassifier (ResourceExhausted / Internal)

이미지가 하나도 생성되지 않은 경우는 에러가 아니라 warning 이 붙은 성공 결과입니다.
"""

import re
from typing import Any, Dict, Optional, Union

from nano_image.common.config_sources import CREDENTIAL_ENV_VARS, HandlerConfig
from nano_image.common.json_utils import dumps_safe
from nano_image.common.logging_utils import get_logger
from nano_image.common.security_utils import redact_secret
from nano_image.models.image_models import (
    ClassifiedError,
    ErrorKind,
    TransformRequest,
    TransformResult,
)
from nano_image.services.image.image_extractor import extract_artifacts
from nano_image.services.llm.gemini_client import ImageGenerator, get_image_generator
from nano_image.services.recovery.error_classifier import ErrorClassifier, get_error_classifier

logger = get_logger(__name__)

# base64 문자 길이 기준 (디코딩 바이트 크기가 아닌 근사 상한)
MAX_BASE64_LENGTH = 6 * 1024 * 1024

DATA_URI_PREFIX = re.compile(r"^data:image/[a-zA-Z]+;base64,")

MISSING_INPUT_MESSAGE = "The function must be called with `image` and `prompt`."
IMAGE_TOO_LARGE_MESSAGE = "Image is too large. Upload to Cloud Storage and pass a URL instead."
MISSING_API_KEY_MESSAGE = (
    "Missing API key. Set the secret `{}` or an environment variable like {}."
).format(CREDENTIAL_ENV_VARS[0], CREDENTIAL_ENV_VARS[1])


def sanitize_image(image: str) -> str:
    """Strip an optional leading data:image/<type>;base64, prefix."""
    return DATA_URI_PREFIX.sub("", image, count=1)


class ImageTransformHandler:
    """
    Image + prompt -> generated images (+ optional text).

    Stateless between calls: credentials and model name are resolved from
    the injected HandlerConfig sources on every call.
    """

    def __init__(
        self,
        config: Optional[HandlerConfig] = None,
        generator: Optional[ImageGenerator] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        self.config = config or HandlerConfig.from_environment()
        self.generator = generator or get_image_generator()
        self.classifier = classifier or get_error_classifier()

    @staticmethod
    def validate(request: TransformRequest) -> str:
        """Return the raw image payload or raise InvalidArgument."""
        if not request.image or not request.prompt:
            raise ClassifiedError(ErrorKind.INVALID_ARGUMENT, MISSING_INPUT_MESSAGE)
        if len(request.image) > MAX_BASE64_LENGTH:
            raise ClassifiedError(ErrorKind.INVALID_ARGUMENT, IMAGE_TOO_LARGE_MESSAGE)
        return request.image

    def handle(self, request: Union[TransformRequest, Dict[str, Any]]) -> TransformResult:
        if not isinstance(request, TransformRequest):
            request = TransformRequest.from_payload(request)

        image = sanitize_image(self.validate(request))

        credentials = self.config.resolve_credentials()
        if credentials is None:
            raise ClassifiedError(ErrorKind.FAILED_PRECONDITION, MISSING_API_KEY_MESSAGE)
        logger.debug(f"API key resolved from source: {credentials.source}")

        model = self.config.resolve_model()
        logger.info(f"Using generative model: {model}")

        try:
            response = self.generator.generate(
                api_key=credentials.value,
                model=model,
                prompt=request.prompt,
                image_base64=image,
            )
        except Exception as e:
            classified = self.classifier.classify(e, secret=credentials.value)
            raw_message = self.classifier.error_message(e)
            # traceback 에 API 키가 포함되는 경우에는 traceback 없이 기록
            logger.error(
                f"Gemini AI Generation Error [{classified.kind.value}] "
                f"{type(e).__name__}: {redact_secret(raw_message, credentials.value)}",
                exc_info=credentials.value not in raw_message,
            )
            raise classified from e

        extraction = extract_artifacts(response)
        if not extraction.artifacts:
            self._log_empty_response(response)
        elif extraction.used_fallback:
            logger.info(f"Found {len(extraction.artifacts)} image(s) via generic response scan")

        return TransformResult.from_artifacts(extraction.artifacts, extraction.text)

    @staticmethod
    def _log_empty_response(response: Any) -> None:
        try:
            logger.error(
                f"No images generated in response. Full response: {dumps_safe(response, indent=2)}"
            )
        except Exception as e:
            logger.error(f"No images generated and failed to stringify response: {e}")
