"""
Unit Tests for config_sources

- 우선순위: 첫 번째 비어 있지 않은 값이 이김
- 호출 시점마다 새로 읽음
- Secrets Manager 소스 (moto)
"""

import json

import boto3
import pytest
from moto import mock_aws

from nano_image.common.config_sources import (
    DEFAULT_MODEL_NAME,
    EnvVarSource,
    HandlerConfig,
    SecretsManagerSource,
    StaticSource,
    resolve_first,
)


class TestResolveFirst:

    def test_first_non_empty_wins(self):
        resolved = resolve_first([
            StaticSource("a", None),
            StaticSource("b", ""),
            StaticSource("c", "value-c"),
            StaticSource("d", "value-d"),
        ])
        assert resolved.source == "c"
        assert resolved.value == "value-c"

    def test_all_empty_returns_none(self):
        assert resolve_first([StaticSource("a", None), StaticSource("b", "")]) is None

    def test_repr_hides_value(self):
        resolved = resolve_first([StaticSource("GEMINI", "super-secret")])
        assert "super-secret" not in repr(resolved)


class TestEnvVarSource:

    def test_reads_at_call_time(self):
        environ = {}
        source = EnvVarSource("GEMINI", environ)
        assert source.read() is None

        environ["GEMINI"] = "k1"
        assert source.read() == "k1"

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_KEY", "from-env")
        assert EnvVarSource("GEMINI_KEY").read() == "from-env"


class TestHandlerConfigFromEnvironment:

    @pytest.mark.parametrize("environ,expected", [
        ({"GEMINI": "a", "GEMINI_API_KEY": "b", "GEMINI_KEY": "c"}, "a"),
        ({"GEMINI_API_KEY": "b", "GEMINI_KEY": "c"}, "b"),
        ({"GEMINI": "", "GEMINI_KEY": "c"}, "c"),
    ])
    def test_credential_priority(self, environ, expected):
        config = HandlerConfig.from_environment(environ)
        assert config.resolve_credentials().value == expected

    def test_no_credentials(self):
        assert HandlerConfig.from_environment({}).resolve_credentials() is None

    def test_model_priority(self):
        config = HandlerConfig.from_environment(
            {"GENERATIVE_MODEL": "m1", "GENERATIVE_MODEL_NAME": "m2"}
        )
        assert config.resolve_model() == "m1"

    def test_model_second_source(self):
        config = HandlerConfig.from_environment({"GENERATIVE_MODEL_NAME": "m2"})
        assert config.resolve_model() == "m2"

    def test_model_default(self):
        assert HandlerConfig.from_environment({}).resolve_model() == DEFAULT_MODEL_NAME
        assert DEFAULT_MODEL_NAME == "gemini-2.5-flash-image"

    def test_secrets_manager_source_only_when_configured(self):
        assert len(HandlerConfig.from_environment({}).credential_sources) == 3

        config = HandlerConfig.from_environment({"GEMINI_API_KEY_SECRET_NAME": "nano/gemini"})
        assert len(config.credential_sources) == 4
        assert config.credential_sources[-1].name == "secretsmanager:nano/gemini"


class TestSecretsManagerSource:

    @mock_aws
    def test_reads_api_key_field(self):
        client = boto3.client("secretsmanager", region_name="us-east-1")
        client.create_secret(Name="nano/gemini", SecretString=json.dumps({"api_key": "sm-key"}))

        source = SecretsManagerSource("nano/gemini", region="us-east-1")
        assert source.read() == "sm-key"

    @mock_aws
    def test_missing_secret_returns_none(self):
        source = SecretsManagerSource("does/not/exist", region="us-east-1")
        assert source.read() is None

    @mock_aws
    def test_env_sources_take_priority_over_secret(self):
        client = boto3.client("secretsmanager", region_name="us-east-1")
        client.create_secret(Name="nano/gemini", SecretString=json.dumps({"api_key": "sm-key"}))

        config = HandlerConfig.from_environment(
            {"GEMINI_API_KEY_SECRET_NAME": "nano/gemini", "GEMINI_KEY": "env-key"}
        )
        assert config.resolve_credentials().value == "env-key"

        config = HandlerConfig.from_environment({"GEMINI_API_KEY_SECRET_NAME": "nano/gemini"})
        resolved = config.resolve_credentials()
        assert resolved.value == "sm-key"
        assert resolved.source == "secretsmanager:nano/gemini"
