"""
Polish routes: rewrite a raw script in the user's voice.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from scriptpolish.api.deps import get_current_user_id, get_polish_service
from scriptpolish.api.rate_limit import limiter
from scriptpolish.core.config import settings
from scriptpolish.services import PolishService, StyleMode

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["polish"])


class PolishRequest(BaseModel):
    """Request to polish a script."""
    rawScript: Optional[str] = None
    styleMode: StyleMode = StyleMode.PATTERNS

    model_config = {
        "json_schema_extra": {
            "example": {
                "rawScript": "Three reasons to start journaling. 1. Clarity. 2. Memory. 3. Calm.",
                "styleMode": "patterns",
            }
        }
    }


class PolishResponse(BaseModel):
    polishedScript: str
    historyId: Optional[str] = None


@router.post("/polish", response_model=PolishResponse)
@limiter.limit(settings.rate_limit)
async def polish_script(
    request: Request,
    body: PolishRequest,
    user_id: str = Depends(get_current_user_id),
    service: PolishService = Depends(get_polish_service),
) -> PolishResponse:
    """
    Rewrite a raw script.

    - patterns: follow the stored voice pattern profile (run voice analysis first)
    - examples: imitate the user's best saved examples for the script's topic
    """
    logger.info("Polish request", user_id=user_id, style_mode=body.styleMode.value)

    result = await service.polish_for_user(user_id, body.rawScript or "", body.styleMode)
    return PolishResponse(polishedScript=result.polished_script, historyId=result.history_id)
