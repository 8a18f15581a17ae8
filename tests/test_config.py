import pytest

from config.config import DEFAULT_LLM_BASE_URL, DEFAULT_LLM_MODEL, Config, ProviderSettings

ENV_VARS = (
    "UPSTAGE_API_KEY",
    "UPSTAGE_MODEL_NAME",
    "UPSTAGE_BASE_URL",
    "LLM_TIMEOUT_MS",
    "TAVILY_API_KEY",
    "FIRECRAWL_API_KEY",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = Config()
    settings = config.llm_settings()

    assert settings.base_url == DEFAULT_LLM_BASE_URL
    assert settings.model_name == DEFAULT_LLM_MODEL
    assert settings.timeout_ms == 300_000
    assert not settings.is_configured
    assert config.validate() is False


def test_environment_overrides(clean_env):
    clean_env.setenv("UPSTAGE_API_KEY", "up-key")
    clean_env.setenv("UPSTAGE_BASE_URL", "https://proxy.test/v1/")
    clean_env.setenv("LLM_TIMEOUT_MS", "1500")

    config = Config()
    settings = config.llm_settings()

    assert settings.base_url == "https://proxy.test/v1"
    assert settings.timeout_s == 1.5
    assert config.validate() is True


def test_invalid_timeout_falls_back(clean_env):
    clean_env.setenv("LLM_TIMEOUT_MS", "soon")
    assert Config().llm_settings().timeout_ms == 300_000


def test_optional_providers_are_disabled_without_keys(clean_env):
    config = Config()

    assert not config.search_settings().is_configured
    assert not config.scrape_settings().is_configured


def test_provider_settings_timeout_seconds():
    assert ProviderSettings(timeout_ms=2500).timeout_s == 2.5
