import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LLM_BASE_URL = "https://api.upstage.ai/v1"
DEFAULT_LLM_MODEL = "solar-pro2-preview"
DEFAULT_ANALYSIS_MODEL = "solar-pro"
DEFAULT_DOCUMENT_PARSE_URL = "https://api.upstage.ai/v1/document-ai/document-parse"
DEFAULT_SCRAPE_BASE_URL = "https://api.firecrawl.dev/v1"


@dataclass(frozen=True)
class ProviderSettings:
    """
    Connection settings injected into a provider client at construction time.

    Attributes:
        api_key: Bearer credential; empty string means "not configured"
        model_name: Model identifier (unused by non-LLM providers)
        base_url: Endpoint root for the provider
        timeout_ms: Per-request timeout in milliseconds
    """

    api_key: str = ""
    model_name: str = ""
    base_url: str = ""
    timeout_ms: int = 300_000

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {name}: {raw!r}")
        return default


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Read provider credentials and endpoints from the environment (and .env)."""
        env_path = Path(__file__).parent.parent / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # LLM (Upstage Solar, OpenAI-compatible chat completions)
        self.UPSTAGE_API_KEY = os.getenv("UPSTAGE_API_KEY", "")
        self.UPSTAGE_MODEL_NAME = os.getenv("UPSTAGE_MODEL_NAME", DEFAULT_LLM_MODEL)
        self.UPSTAGE_ANALYSIS_MODEL_NAME = os.getenv(
            "UPSTAGE_ANALYSIS_MODEL_NAME", DEFAULT_ANALYSIS_MODEL
        )
        self.UPSTAGE_BASE_URL = os.getenv("UPSTAGE_BASE_URL", DEFAULT_LLM_BASE_URL).rstrip("/")
        self.LLM_TIMEOUT_MS = _int_env("LLM_TIMEOUT_MS", 300_000)

        # Web search (Tavily)
        self.TAVILY_API_KEY = os.getenv("TAVILY_API_KEY", "")
        self.SEARCH_TIMEOUT_MS = _int_env("SEARCH_TIMEOUT_MS", 30_000)

        # Document parsing (Upstage Document Parse)
        self.DOCUMENT_PARSE_URL = os.getenv("UPSTAGE_DOCUMENT_PARSE_URL", DEFAULT_DOCUMENT_PARSE_URL)
        self.DOCUMENT_PARSE_TIMEOUT_MS = _int_env("DOCUMENT_PARSE_TIMEOUT_MS", 120_000)

        # Web scraping (Firecrawl)
        self.FIRECRAWL_API_KEY = os.getenv("FIRECRAWL_API_KEY", "")
        self.FIRECRAWL_BASE_URL = os.getenv("FIRECRAWL_BASE_URL", DEFAULT_SCRAPE_BASE_URL).rstrip("/")
        self.SCRAPE_TIMEOUT_MS = _int_env("SCRAPE_TIMEOUT_MS", 60_000)

    def llm_settings(self) -> ProviderSettings:
        return ProviderSettings(
            api_key=self.UPSTAGE_API_KEY,
            model_name=self.UPSTAGE_MODEL_NAME,
            base_url=self.UPSTAGE_BASE_URL,
            timeout_ms=self.LLM_TIMEOUT_MS,
        )

    def analysis_llm_settings(self) -> ProviderSettings:
        return ProviderSettings(
            api_key=self.UPSTAGE_API_KEY,
            model_name=self.UPSTAGE_ANALYSIS_MODEL_NAME,
            base_url=self.UPSTAGE_BASE_URL,
            timeout_ms=self.LLM_TIMEOUT_MS,
        )

    def search_settings(self) -> ProviderSettings:
        return ProviderSettings(
            api_key=self.TAVILY_API_KEY,
            timeout_ms=self.SEARCH_TIMEOUT_MS,
        )

    def document_parse_settings(self) -> ProviderSettings:
        return ProviderSettings(
            api_key=self.UPSTAGE_API_KEY,
            base_url=self.DOCUMENT_PARSE_URL,
            timeout_ms=self.DOCUMENT_PARSE_TIMEOUT_MS,
        )

    def scrape_settings(self) -> ProviderSettings:
        return ProviderSettings(
            api_key=self.FIRECRAWL_API_KEY,
            base_url=self.FIRECRAWL_BASE_URL,
            timeout_ms=self.SCRAPE_TIMEOUT_MS,
        )

    def validate(self) -> bool:
        """
        Check that the mandatory LLM credential is present.

        Search and scraping credentials are optional: without them the
        pipeline writes without research augmentation.

        Returns:
            bool: True if configuration is usable, False otherwise
        """
        if not self.UPSTAGE_API_KEY:
            logger.error("UPSTAGE_API_KEY is not set. Please set it in the .env file.")
            return False
        if not self.TAVILY_API_KEY:
            logger.warning("TAVILY_API_KEY is not set; sections will be written without web research")
        return True

    def get_model_info(self) -> str:
        return f"Upstage Solar ({self.UPSTAGE_MODEL_NAME})"
