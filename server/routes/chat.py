"""Refinement chat endpoint for post-pipeline feedback turns."""

import asyncio

from fastapi import APIRouter, Depends

from orchestrator.pipeline_types import content_event, error_event
from orchestrator.refinement_chat import RefinementChat
from server.dependencies import get_refinement_chat
from server.schemas.requests import ChatRequest
from server.schemas.responses import ChatResponseDTO
from server.utils import ndjson_response, trim_history
from utils.errors import ContentPipelineError
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Chat"])


def _stream_events(mode, stream):
    yield {"type": "mode", "mode": mode.value}
    with stream:
        try:
            for delta in stream:
                yield content_event(delta)
        except ContentPipelineError as e:
            logger.error(f"Chat stream broke: {e}")
            yield error_event("Response generation failed")
    yield {"type": "done", "mode": mode.value}


@router.post("/chat", response_model=ChatResponseDTO)
async def chat(request: ChatRequest, refinement_chat: RefinementChat = Depends(get_refinement_chat)):
    """Answer a question about the document or apply a requested change."""
    history = trim_history(request.conversation_history)

    if request.stream:
        mode, stream = await asyncio.to_thread(
            refinement_chat.respond_streaming,
            request.content,
            request.user_message,
            history,
            project_title=request.project_title,
            content_type=request.content_type,
        )
        return ndjson_response(_stream_events(mode, stream))

    reply = await asyncio.to_thread(
        refinement_chat.respond,
        request.content,
        request.user_message,
        history,
        project_title=request.project_title,
        content_type=request.content_type,
    )
    return ChatResponseDTO.from_reply(reply)
