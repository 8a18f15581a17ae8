"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponseDTO)
async def health_check():
    return HealthResponseDTO(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=API_VERSION,
    )
