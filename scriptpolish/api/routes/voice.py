"""
Voice analysis routes.
"""

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from scriptpolish.api.deps import get_current_user_id, get_voice_analyzer
from scriptpolish.api.rate_limit import limiter
from scriptpolish.core.config import settings
from scriptpolish.services import VoiceAnalyzer

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["voice"])


class AnalyzeVoiceResponse(BaseModel):
    message: str
    patterns: dict


@router.post("/analyze-voice", response_model=AnalyzeVoiceResponse)
@limiter.limit(settings.rate_limit)
async def analyze_voice(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    analyzer: VoiceAnalyzer = Depends(get_voice_analyzer),
) -> AnalyzeVoiceResponse:
    """Extract the user's voice patterns from their saved examples."""
    logger.info("Analyze voice request", user_id=user_id)

    profile = await analyzer.analyze_user_voice(user_id)
    return AnalyzeVoiceResponse(
        message="Voice patterns extracted successfully",
        patterns=profile.model_dump(mode="json"),
    )
