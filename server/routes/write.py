"""Pipeline step endpoint: refine sections, write one section, or run the coherence pass."""

import asyncio

from fastapi import APIRouter, Depends

from models.project import DEFAULT_SECTION_LENGTH, ProjectSpec, Section, SectionSpec, SectionStatus
from orchestrator.coherence_refiner import usable_sections
from orchestrator.pipeline import PipelineOrchestrator
from orchestrator.pipeline_types import content_event, error_event
from server.dependencies import get_orchestrator
from server.schemas.requests import CoherenceSectionItem, WriteRequest
from server.schemas.responses import (
    ContentDataDTO,
    ContentResponseDTO,
    RefineSectionsResponseDTO,
    SectionSpecDTO,
)
from server.utils import ndjson_response
from utils.errors import ContentPipelineError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Write"])


def _require(**fields) -> None:
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def _section_spec(request: WriteRequest) -> SectionSpec:
    return SectionSpec(
        id=request.section_id or "section-0",
        title=request.section_title,
        description=request.section_description or "",
        key_points=tuple(request.key_points),
        estimated_length=request.estimated_length or DEFAULT_SECTION_LENGTH,
    )


def _coherence_sections(request: WriteRequest) -> list[Section]:
    sections = []
    for idx, item in enumerate(request.sections or []):
        if not isinstance(item, CoherenceSectionItem):
            raise ValidationError("refine-coherence sections must be {title, content} objects")
        sections.append(
            Section(
                id=f"section-{idx}",
                title=item.title,
                content=item.content,
                status=SectionStatus.COMPLETED,
            )
        )
    return sections


async def _refine_sections(request: WriteRequest, orchestrator: PipelineOrchestrator):
    _require(title=request.title, contentType=request.content_type, sections=request.sections)
    outline = [s for s in request.sections if isinstance(s, str) and s.strip()]
    if not outline:
        raise ValidationError("refine-sections expects a list of outline titles")

    specs = await asyncio.to_thread(
        orchestrator.refiner.refine,
        request.title,
        request.content_type,
        request.context or "",
        outline,
    )
    return RefineSectionsResponseDTO(data=[SectionSpecDTO.from_spec(s) for s in specs])


async def _write_section(request: WriteRequest, orchestrator: PipelineOrchestrator):
    _require(
        sectionTitle=request.section_title,
        projectTitle=request.project_title,
        projectContentType=request.project_content_type,
    )
    spec = _section_spec(request)
    project = ProjectSpec(
        title=request.project_title,
        content_type=request.project_content_type,
        source_text=request.project_context or "",
        outline=spec.title,
    )

    if request.stream:
        events = orchestrator.writer.write_streaming(spec, project)
        return ndjson_response(_guarded(events, "Content generation failed"))

    content = await asyncio.to_thread(orchestrator.writer.write, spec, project)
    return ContentResponseDTO(data=ContentDataDTO(content=content))


async def _refine_coherence(request: WriteRequest, orchestrator: PipelineOrchestrator):
    _require(projectTitle=request.project_title, contentType=request.content_type)
    sections = _coherence_sections(request)
    if not usable_sections(sections):
        raise ValidationError("At least one section with content is required")
    coherence = orchestrator.coherence

    if request.stream:
        stream = await asyncio.to_thread(
            coherence.refine_streaming, request.project_title, request.content_type, sections
        )
        return ndjson_response(
            _guarded((content_event(delta) for delta in stream), "Coherence refinement failed", stream)
        )

    content = await asyncio.to_thread(
        coherence.refine, request.project_title, request.content_type, sections
    )
    return ContentResponseDTO(data=ContentDataDTO(content=content))


def _guarded(events, failure_message: str, stream=None):
    """Turn a mid-stream pipeline error into a final ``error`` event."""
    try:
        yield from events
    except ContentPipelineError as e:
        logger.error(f"{failure_message}: {e}")
        yield error_event(failure_message)
    finally:
        if stream is not None:
            stream.close()


ACTIONS = {
    "refine-sections": _refine_sections,
    "write-section": _write_section,
    "refine-coherence": _refine_coherence,
}


@router.post("/write")
async def write(request: WriteRequest, orchestrator: PipelineOrchestrator = Depends(get_orchestrator)):
    """Run one pipeline step selected by ``action``."""
    handler = ACTIONS.get(request.action)
    if handler is None:
        raise ValidationError("Invalid action specified")
    logger.info(f"Write action: {request.action} (stream={request.stream})")
    return await handler(request, orchestrator)
