"""Whole-project pipeline endpoint (buffered result or NDJSON event stream)."""

import asyncio

from fastapi import APIRouter, Depends

from models.project import ProjectSpec
from orchestrator.pipeline import PipelineOrchestrator
from server.dependencies import get_orchestrator
from server.schemas.requests import PipelineRequest
from server.schemas.responses import PipelineResponseDTO
from server.utils import ndjson_response
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Pipeline"])


def _project_from_request(request: PipelineRequest) -> ProjectSpec:
    return ProjectSpec.from_sources(
        title=request.title.strip(),
        content_type=request.content_type.strip(),
        outline=request.outline,
        text=request.source_text,
        url_content=request.url_content,
        file_texts=request.file_texts,
    )


@router.post("/pipeline")
async def run_pipeline(
    request: PipelineRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """
    Run refine -> write -> coherence for one project.

    Streaming emits phase/section/writer events, then ``document`` deltas of
    the coherence pass, then one ``done`` event with the final content.
    """
    project = _project_from_request(request)

    if request.stream:
        pipeline_run = orchestrator.start(project, streaming=True)
        logger.info(f"Streaming pipeline for '{project.title}'")
        return ndjson_response(pipeline_run.stream_all())

    logger.info(f"Running buffered pipeline for '{project.title}'")
    result = await asyncio.to_thread(orchestrator.run, project)
    return PipelineResponseDTO.from_result(result)
