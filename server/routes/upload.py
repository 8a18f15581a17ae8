"""File upload endpoint: parses PDF/DOC/DOCX/TXT into source text."""

import asyncio

from fastapi import APIRouter, Depends, File, UploadFile

from server.dependencies import get_document_parser
from server.schemas.responses import UploadResponseDTO
from tools.documents.upstage_parser import UpstageDocumentParser
from utils.errors import ValidationError

router = APIRouter(prefix="/v1", tags=["Sources"])


@router.post("/upload", response_model=UploadResponseDTO)
async def upload(
    file: UploadFile | None = File(None),
    parser: UpstageDocumentParser = Depends(get_document_parser),
):
    if file is None:
        raise ValidationError("No file provided")

    data = await file.read()
    document = await asyncio.to_thread(
        parser.parse, file.filename or "upload", data, file.content_type
    )
    return UploadResponseDTO.from_document(document)
