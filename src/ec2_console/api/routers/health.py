from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ...core.console import ConsoleSession
from ..dependencies import get_session
from ..schemas import HealthResponse


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(session: ConsoleSession = Depends(get_session)) -> HealthResponse:
    status = session.status()
    return HealthResponse(
        message="EC2 console API is running",
        timestamp=datetime.now(timezone.utc),
        live=status["live"],
        region=status["region"],
    )
