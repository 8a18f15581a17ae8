"""FastAPI dependencies providing configured clients and pipeline services.

Provider clients are process-wide singletons; the services built on top of
them are cheap and created per request, so overriding a client dependency in
tests reaches every service that uses it.
"""

from fastapi import Depends

from api.base_client import BaseLLMClient
from api.solar_client import SolarClient
from config.config import Config
from orchestrator.contract_analyzer import ContractAnalyzer
from orchestrator.pipeline import PipelineOrchestrator
from orchestrator.refinement_chat import RefinementChat
from tools.documents.upstage_parser import UpstageDocumentParser
from tools.web.factory import create_scraper, create_search_client
from tools.web.firecrawl_scraper import FirecrawlScraper
from tools.web.tavily_client import TavilySearchClient
from utils.logger import get_logger

logger = get_logger(__name__)

ANALYSIS_TEMPERATURE = 0.1


def get_config() -> Config:
    """Dependency to get the configuration (singleton pattern)."""
    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()
    return get_config._instance


def get_llm_client(config: Config = Depends(get_config)) -> BaseLLMClient:
    if not hasattr(get_llm_client, "_instance"):
        get_llm_client._instance = SolarClient(config.llm_settings())
        logger.info(f"LLM client ready: {config.get_model_info()}")
    return get_llm_client._instance


def get_analysis_llm_client(config: Config = Depends(get_config)) -> BaseLLMClient:
    if not hasattr(get_analysis_llm_client, "_instance"):
        get_analysis_llm_client._instance = SolarClient(
            config.analysis_llm_settings(), temperature=ANALYSIS_TEMPERATURE
        )
    return get_analysis_llm_client._instance


def get_search_client(config: Config = Depends(get_config)) -> TavilySearchClient:
    if not hasattr(get_search_client, "_instance"):
        get_search_client._instance = create_search_client(config)
    return get_search_client._instance


def get_document_parser(config: Config = Depends(get_config)) -> UpstageDocumentParser:
    if not hasattr(get_document_parser, "_instance"):
        get_document_parser._instance = UpstageDocumentParser(config.document_parse_settings())
    return get_document_parser._instance


def get_scraper(config: Config = Depends(get_config)) -> FirecrawlScraper:
    if not hasattr(get_scraper, "_instance"):
        get_scraper._instance = create_scraper(config)
    return get_scraper._instance


def get_orchestrator(
    llm_client: BaseLLMClient = Depends(get_llm_client),
    search_client: TavilySearchClient = Depends(get_search_client),
) -> PipelineOrchestrator:
    return PipelineOrchestrator(llm_client, search_client)


def get_refinement_chat(llm_client: BaseLLMClient = Depends(get_llm_client)) -> RefinementChat:
    return RefinementChat(llm_client)


def get_contract_analyzer(
    llm_client: BaseLLMClient = Depends(get_analysis_llm_client),
) -> ContractAnalyzer:
    return ContractAnalyzer(llm_client)
