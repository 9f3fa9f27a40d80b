"""
Correction routes: learn from the user's final version of a script.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from scriptpolish.api.deps import get_correction_service, get_current_user_id
from scriptpolish.services import CorrectionService

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["corrections"])


class SaveCorrectionRequest(BaseModel):
    historyId: Optional[str] = None
    aiPolishedScript: Optional[str] = None
    userFinalScript: Optional[str] = None


class SaveCorrectionResponse(BaseModel):
    message: str
    newExampleId: str
    newQualityScore: int
    newTopic: str


@router.post("/save-correction", response_model=SaveCorrectionResponse)
async def save_correction(
    body: SaveCorrectionRequest,
    user_id: str = Depends(get_current_user_id),
    service: CorrectionService = Depends(get_correction_service),
) -> SaveCorrectionResponse:
    """Save the user's final script as a new voice example."""
    logger.info("Save correction request", user_id=user_id, history_id=body.historyId)

    result = await service.record_correction(
        history_id=body.historyId,
        ai_polished_script=body.aiPolishedScript,
        user_final_script=body.userFinalScript,
        user_id=user_id,
    )
    return SaveCorrectionResponse(
        message="Learning saved successfully",
        newExampleId=result.example_id,
        newQualityScore=result.quality_score,
        newTopic=result.topic.value,
    )
