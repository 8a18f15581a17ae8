"""
SectionRefiner - expands a flat outline into structured section specs.

One LLM call with a strict schema. Any failure (provider error, malformed
JSON, schema violation) degrades to a 1:1 mapping from outline lines.
"""

from api.base_client import BaseLLMClient
from api.structured import parse_structured_output
from models.project import DEFAULT_SECTION_LENGTH, ProjectSpec, SectionSpec
from orchestrator import prompts
from orchestrator.payloads import RefinedSectionsPayload
from utils.errors import ContentPipelineError
from utils.logger import get_logger

logger = get_logger(__name__)


def fallback_section_specs(outline_titles: list[str]) -> list[SectionSpec]:
    """Generic specs built directly from the outline titles."""
    return [
        SectionSpec(
            id=f"section-{idx}",
            title=title,
            description=f"Content for {title}",
            key_points=(f"Key point for {title}",),
            estimated_length=DEFAULT_SECTION_LENGTH,
        )
        for idx, title in enumerate(outline_titles)
    ]


class SectionRefiner:
    def __init__(self, llm_client: BaseLLMClient):
        self.llm_client = llm_client

    def refine(
        self, title: str, content_type: str, context: str, outline_titles: list[str]
    ) -> list[SectionSpec]:
        """
        Ask the model for refined section specs.

        Raises:
            ProviderError: If the LLM call fails after retries
            ParseError: If the response does not match the schema
        """
        messages = prompts.section_refinement_messages(title, content_type, context, outline_titles)
        raw = self.llm_client.complete(
            messages, prompts.REFINED_SECTIONS_SCHEMA, schema_name="writing_response"
        )
        payload = parse_structured_output(
            raw, RefinedSectionsPayload, provider=self.llm_client.provider_name
        ).unwrap()

        specs = []
        seen_ids: set[str] = set()
        for idx, item in enumerate(payload.sections):
            section_id = item.id.strip() or f"section-{idx}"
            if section_id in seen_ids:
                section_id = f"{section_id}-{idx}"
            seen_ids.add(section_id)
            specs.append(
                SectionSpec(
                    id=section_id,
                    title=item.title,
                    description=item.description,
                    key_points=tuple(item.key_points),
                    estimated_length=item.estimated_length,
                )
            )
        return specs

    def refine_or_fallback(self, project: ProjectSpec) -> tuple[list[SectionSpec], bool]:
        """
        Refine the project's outline, falling back to the outline itself.

        Returns:
            (specs, refined) where ``refined`` is False when the fallback was used
        """
        outline_titles = project.outline_titles()
        try:
            specs = self.refine(
                project.title, project.content_type, project.context, outline_titles
            )
            logger.info(f"Refined outline into {len(specs)} sections")
            return specs, True
        except ContentPipelineError as e:
            logger.warning(
                f"Section refinement failed, using original outline: {e}",
                extra={"extra_fields": {"error_type": type(e).__name__}},
            )
            return fallback_section_specs(outline_titles), False
