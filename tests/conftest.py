"""
pytest configuration for nano-image-functions tests.

🚨 테스트는 실제 Gemini / AWS 호출을 하지 않습니다.
   - 생성기는 항상 fake 로 주입
   - Secrets Manager 는 moto (mock_aws) 사용
"""

import pytest

from nano_image.common.config_sources import CREDENTIAL_ENV_VARS, MODEL_ENV_VARS, SECRET_NAME_ENV_VAR


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """테스트마다 API 키 / 모델 관련 환경 변수를 제거하고 더미 AWS 자격 증명을 설정"""
    for var in CREDENTIAL_ENV_VARS + MODEL_ENV_VARS + (SECRET_NAME_ENV_VAR, "MOCK_MODE"):
        monkeypatch.delenv(var, raising=False)

    # AWS SSO 세션 충돌 및 실제 AWS 호출 방지
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    yield


class FakeGenerator:
    """Records calls and returns a canned response or raises a canned error."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else {}
        self.error = error
        self.calls = []

    def generate(self, api_key, model, prompt, image_base64):
        self.calls.append(
            {"api_key": api_key, "model": model, "prompt": prompt, "image_base64": image_base64}
        )
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_generator_factory():
    return FakeGenerator


@pytest.fixture
def parts_response():
    """candidates[0].content.parts 형태의 표준 응답"""
    return {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"text": "hello"},
                        {"inlineData": {"data": "XYZ", "mimeType": "image/jpeg"}},
                    ]
                }
            }
        ]
    }
