"""Tests for application settings."""
import pytest
from pydantic import ValidationError
from bailian_gateway.core.config import Settings


def test_settings_defaults(monkeypatch):
    """Test DashScope defaults."""
    monkeypatch.delenv("DASHSCOPE_BASE_URL", raising=False)
    settings = Settings(_env_file=None)
    assert settings.DASHSCOPE_BASE_URL == "https://dashscope.aliyuncs.com"
    assert settings.DASHSCOPE_TIMEOUT_SECONDS > 0
    assert settings.cors_origins_list == ["*"]


def test_settings_from_env(monkeypatch):
    """Test settings are read from the environment."""
    monkeypatch.setenv("DASHSCOPE_API_KEY", "sk-env")
    monkeypatch.setenv("DASHSCOPE_BASE_URL", "https://dashscope-intl.aliyuncs.com/")
    monkeypatch.setenv("DASHSCOPE_PLUGIN", '{"pdf_extracter": {}}')
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    settings = Settings(_env_file=None)
    assert settings.DASHSCOPE_API_KEY == "sk-env"
    assert settings.DASHSCOPE_BASE_URL == "https://dashscope-intl.aliyuncs.com"
    assert settings.DASHSCOPE_PLUGIN == '{"pdf_extracter": {}}'
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


@pytest.mark.parametrize("name,value", [
    ("DASHSCOPE_BASE_URL", "dashscope.aliyuncs.com"),
    ("DASHSCOPE_BASE_URL", "https://"),
    ("DASHSCOPE_TIMEOUT_SECONDS", "0"),
    ("DASHSCOPE_CONNECT_TIMEOUT_SECONDS", "-1"),
    ("LOG_LEVEL", "chatty"),
])
def test_settings_invalid(monkeypatch, name, value):
    """Test invalid values are rejected."""
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
