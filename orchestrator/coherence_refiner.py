"""CoherenceRefiner - final rewrite that unifies formatting and voice across sections."""

from api.base_client import BaseLLMClient
from api.streaming import DeltaStream
from models.project import Section
from orchestrator import prompts
from utils.errors import ContentPipelineError, NoContentError
from utils.logger import get_logger

logger = get_logger(__name__)


def usable_sections(sections: list[Section]) -> list[Section]:
    return [s for s in sections if s.is_completed and s.content.strip()]


def concatenate_sections(sections: list[Section]) -> str:
    """Raw ``## title`` + body join; also the fallback when the coherence pass fails."""
    return "\n\n".join(f"## {s.title}\n\n{s.content}" for s in sections if s.content)


class CoherenceRefiner:
    def __init__(self, llm_client: BaseLLMClient):
        self.llm_client = llm_client

    def _messages(self, project_title: str, content_type: str, sections: list[Section]):
        completed = usable_sections(sections)
        if not completed:
            raise NoContentError("No completed sections to refine")
        return prompts.coherence_messages(
            project_title, content_type, concatenate_sections(completed)
        )

    def refine(self, project_title: str, content_type: str, sections: list[Section]) -> str:
        """
        Return the unified document.

        Raises:
            NoContentError: If no completed section has content
            ProviderError: If the LLM call fails after retries
        """
        messages = self._messages(project_title, content_type, sections)
        logger.info(f"Running coherence pass over {len(sections)} sections")
        return self.llm_client.complete(messages)

    def refine_streaming(
        self, project_title: str, content_type: str, sections: list[Section]
    ) -> DeltaStream:
        messages = self._messages(project_title, content_type, sections)
        logger.info(f"Streaming coherence pass over {len(sections)} sections")
        return self.llm_client.complete_streaming(messages)

    def refine_or_concatenate(
        self, project_title: str, content_type: str, sections: list[Section]
    ) -> tuple[str, bool]:
        """Buffered refine; on NoContentError or ProviderError returns (concatenation, False)."""
        try:
            refined = self.refine(project_title, content_type, sections)
            if refined.strip():
                return refined, True
            logger.warning("Coherence pass returned no content; keeping concatenated sections")
        except NoContentError as e:
            logger.warning(f"Coherence pass skipped: {e}")
        except ContentPipelineError as e:
            logger.warning(f"Coherence refinement failed, using concatenation: {e}")
        return concatenate_sections(sections), False
