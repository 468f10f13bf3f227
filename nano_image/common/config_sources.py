# -*- coding: utf-8 -*-
"""
Configuration Sources - 이름이 있는 설정 소스와 우선순위 해석

핸들러는 환경 변수를 직접 읽지 않고, 생성 시점에 주입된 소스 목록을
순서대로 조회합니다. 각 소스는 호출 시점마다 새로 읽으므로
Lambda warm start 사이에 상태가 남지 않습니다.

Priority (기본 구성):
    API key: GEMINI -> GEMINI_API_KEY -> GEMINI_KEY
             -> (GEMINI_API_KEY_SECRET_NAME 설정 시) Secrets Manager api_key
    Model:   GENERATIVE_MODEL -> GENERATIVE_MODEL_NAME -> DEFAULT_MODEL_NAME
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

import boto3

from nano_image.common.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_MODEL_NAME = "gemini-2.5-flash-image"

CREDENTIAL_ENV_VARS = ("GEMINI", "GEMINI_API_KEY", "GEMINI_KEY")
MODEL_ENV_VARS = ("GENERATIVE_MODEL", "GENERATIVE_MODEL_NAME")
SECRET_NAME_ENV_VAR = "GEMINI_API_KEY_SECRET_NAME"


class ConfigSource:
    """A named place a single configuration value can come from."""

    name: str = "unknown"

    def read(self) -> Optional[str]:
        raise NotImplementedError


class EnvVarSource(ConfigSource):
    """Reads one environment variable at call time."""

    def __init__(self, var: str, environ: Optional[Mapping[str, str]] = None):
        self.name = var
        self._environ = environ

    def read(self) -> Optional[str]:
        environ = os.environ if self._environ is None else self._environ
        return environ.get(self.name)


class StaticSource(ConfigSource):
    """Fixed value, for tests and local invocation."""

    def __init__(self, name: str, value: Optional[str]):
        self.name = name
        self._value = value

    def read(self) -> Optional[str]:
        return self._value


class SecretsManagerSource(ConfigSource):
    """
    JSON 시크릿의 필드 하나를 AWS Secrets Manager 에서 조회

    조회 실패는 debug 로그만 남기고 None 을 반환합니다 (다음 소스로 진행).
    """

    def __init__(
        self,
        secret_id: str,
        field_name: str = "api_key",
        region: Optional[str] = None,
        client: Any = None,
    ):
        self.name = f"secretsmanager:{secret_id}"
        self.secret_id = secret_id
        self.field_name = field_name
        self.region = region
        self._client = client

    def _get_client(self):
        if self._client is None:
            region = self.region or os.getenv("AWS_REGION", "us-east-1")
            self._client = boto3.client("secretsmanager", region_name=region)
        return self._client

    def read(self) -> Optional[str]:
        try:
            response = self._get_client().get_secret_value(SecretId=self.secret_id)
            secret = json.loads(response["SecretString"])
            value = secret.get(self.field_name)
            return value if isinstance(value, str) else None
        except Exception as e:
            # 예외 메시지에 시크릿 값은 포함되지 않음 (SecretId 만 포함)
            logger.debug(f"Failed to read {self.field_name} from secret {self.secret_id}: {e}")
            return None


@dataclass(frozen=True)
class ResolvedValue:
    source: str
    value: str

    def __repr__(self) -> str:
        # value 는 API 키일 수 있으므로 repr 에 포함하지 않음
        return f"ResolvedValue(source={self.source!r})"


def resolve_first(sources: Sequence[ConfigSource]) -> Optional[ResolvedValue]:
    """Return the first non-empty value in source order, or None."""
    for source in sources:
        value = source.read()
        if isinstance(value, str) and value:
            return ResolvedValue(source=source.name, value=value)
    return None


@dataclass
class HandlerConfig:
    """
    Ordered configuration sources injected into ImageTransformHandler.

    Tests build this with StaticSource / EnvVarSource over a plain dict so
    the process environment is never touched.
    """

    credential_sources: List[ConfigSource] = field(default_factory=list)
    model_sources: List[ConfigSource] = field(default_factory=list)
    default_model: str = DEFAULT_MODEL_NAME

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "HandlerConfig":
        env = os.environ if environ is None else environ
        credential_sources: List[ConfigSource] = [
            EnvVarSource(var, environ) for var in CREDENTIAL_ENV_VARS
        ]
        secret_name = env.get(SECRET_NAME_ENV_VAR)
        if secret_name:
            credential_sources.append(
                SecretsManagerSource(secret_name, region=env.get("AWS_REGION"))
            )
        return cls(
            credential_sources=credential_sources,
            model_sources=[EnvVarSource(var, environ) for var in MODEL_ENV_VARS],
        )

    def resolve_credentials(self) -> Optional[ResolvedValue]:
        return resolve_first(self.credential_sources)

    def resolve_model(self) -> str:
        resolved = resolve_first(self.model_sources)
        return resolved.value if resolved else self.default_model
