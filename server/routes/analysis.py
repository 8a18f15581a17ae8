"""Contract risk analysis endpoint."""

import asyncio

from fastapi import APIRouter, Depends

from orchestrator.contract_analyzer import ContractAnalyzer
from server.dependencies import get_contract_analyzer
from server.schemas.requests import AnalysisRequest
from server.schemas.responses import AnalysisResponseDTO
from utils.errors import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Analysis"])


@router.post("/analysis", response_model=AnalysisResponseDTO)
async def analyze_contract(
    request: AnalysisRequest,
    analyzer: ContractAnalyzer = Depends(get_contract_analyzer),
):
    if not request.text or not request.text.strip():
        raise ValidationError("Contract text is required")

    logger.info(f"Starting contract analysis ({len(request.text)} chars)")
    analysis = await asyncio.to_thread(analyzer.analyze, request.text)
    return AnalysisResponseDTO.from_analysis(analysis)
