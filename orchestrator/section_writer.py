"""
SectionWriter - research-augmented writing of one section.

Steps: keyword extraction (LLM, heuristic fallback) -> search (best effort)
-> enriched prompt -> generation. If anything before generation fails, a
plain prompt without research is used instead.
"""

from collections.abc import Iterator

from api.base_client import BaseLLMClient
from api.structured import parse_structured_output
from models.project import ProjectSpec, SectionSpec
from orchestrator import prompts
from orchestrator.payloads import KeywordsPayload
from orchestrator.pipeline_types import (
    PipelineEvent,
    content_event,
    error_event,
    keywords_event,
    progress_event,
    search_results_event,
)
from tools.web.contracts import ResearchContext
from tools.web.research_pack import build_enriched_context
from tools.web.tavily_client import TavilySearchClient
from utils.errors import ContentPipelineError
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_KEYWORDS = 5
GENERATION_FAILED_MESSAGE = "Content generation failed"


def fallback_keywords(spec: SectionSpec) -> list[str]:
    """Title words longer than 3 chars, then up to 2 words longer than 4 chars per key point."""
    words = [w for w in spec.title.split(" ") if len(w) > 3]
    for point in spec.key_points:
        words.extend([w for w in point.split(" ") if len(w) > 4][:2])
    return words[:MAX_KEYWORDS]


class SectionWriter:
    def __init__(self, llm_client: BaseLLMClient, search_client: TavilySearchClient):
        self.llm_client = llm_client
        self.search_client = search_client

    def extract_keywords(self, spec: SectionSpec, context: str) -> list[str]:
        """Never raises; falls back to heuristic keywords."""
        try:
            raw = self.llm_client.complete(
                prompts.keyword_extraction_messages(spec, context), prompts.KEYWORDS_SCHEMA
            )
            result = parse_structured_output(
                raw, KeywordsPayload, provider=self.llm_client.provider_name
            )
            keywords = [k.strip() for k in result.unwrap().keywords if k and k.strip()]
            if keywords:
                return keywords[:MAX_KEYWORDS]
            logger.warning(f"Keyword extraction returned nothing for '{spec.title}'")
        except ContentPipelineError as e:
            logger.warning(f"Keyword extraction failed for '{spec.title}': {e}")
        return fallback_keywords(spec)

    def research(self, spec: SectionSpec, context: str) -> ResearchContext:
        keywords = self.extract_keywords(spec, context)
        results = self.search_client.search_many(keywords) if keywords else []
        logger.info(
            f"Research for '{spec.title}': {len(keywords)} keywords, {len(results)} results",
            extra={"extra_fields": {"section": spec.id, "keywords": keywords}},
        )
        return ResearchContext(keywords=keywords, results=results)

    def _enhanced_messages(
        self, spec: SectionSpec, project: ProjectSpec, research: ResearchContext
    ) -> list[dict[str, str]]:
        enriched = build_enriched_context(project.context, research.results, research.keywords)
        return prompts.section_writing_messages(
            spec, project.title, project.content_type, enriched, with_research=True
        )

    def _fallback_messages(self, spec: SectionSpec, project: ProjectSpec) -> list[dict[str, str]]:
        return prompts.section_writing_messages(
            spec, project.title, project.content_type, project.context, with_research=False
        )

    def write(self, spec: SectionSpec, project: ProjectSpec) -> str:
        """
        Write one section and return its full text.

        Raises:
            ProviderError: Only when both the enhanced and the fallback call fail
        """
        try:
            research = self.research(spec, project.context)
            return self.llm_client.complete(self._enhanced_messages(spec, project, research))
        except ContentPipelineError as e:
            logger.warning(
                f"Enhanced section writing failed, falling back to basic approach: {e}",
                extra={"extra_fields": {"section": spec.id}},
            )
            return self.llm_client.complete(self._fallback_messages(spec, project))

    def write_streaming(self, spec: SectionSpec, project: ProjectSpec) -> Iterator[PipelineEvent]:
        """
        Yield progress/keywords/search_results events, then content deltas.

        A stream that breaks after it started yields one ``error`` event and
        ends. ProviderError escapes only when the fallback stream cannot be
        opened either.
        """
        try:
            yield progress_event(f"Extracting search keywords for: {spec.title}")
            keywords = self.extract_keywords(spec, project.context)
            yield keywords_event(keywords)

            yield progress_event("Searching for current information...")
            results = self.search_client.search_many(keywords) if keywords else []
            yield search_results_event(results)

            yield progress_event("Starting content generation...")
            research = ResearchContext(keywords=keywords, results=results)
            stream = self.llm_client.complete_streaming(
                self._enhanced_messages(spec, project, research)
            )
        except ContentPipelineError as e:
            logger.warning(
                f"Enhanced streaming failed, falling back to basic approach: {e}",
                extra={"extra_fields": {"section": spec.id}},
            )
            stream = self.llm_client.complete_streaming(self._fallback_messages(spec, project))

        with stream:
            try:
                for delta in stream:
                    yield content_event(delta)
            except ContentPipelineError as e:
                logger.error(f"Content generation error for '{spec.title}': {e}")
                yield error_event(GENERATION_FAILED_MESSAGE)
