"""
Correction feedback loop.

When a user saves their final version of a polished script, the final text
becomes a new VoiceExample scored by how far it diverged from the AI output,
and the originating history record is linked to it.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from scriptpolish.core.exceptions import MissingFieldsError, PersistenceError
from scriptpolish.core.llm_clients import LLMClient
from scriptpolish.models.polish_history import PolishHistory
from scriptpolish.models.voice_example import TopicCategory, VoiceExample
from scriptpolish.services.topic_classifier import TopicClassifier
from scriptpolish.utils.text_metrics import quality_score, word_count

logger = structlog.get_logger(__name__)


@dataclass
class CorrectionResult:
    quality_score: int
    topic: TopicCategory
    example_id: str
    history_linked: bool


class CorrectionService:
    """Learns from user corrections."""

    def __init__(
        self,
        llm: LLMClient,
        db: AsyncSession,
        classifier: Optional[TopicClassifier] = None,
    ):
        self.db = db
        self.classifier = classifier or TopicClassifier(llm)

    async def record_correction(
        self,
        history_id: Optional[str],
        ai_polished_script: Optional[str],
        user_final_script: Optional[str],
        user_id: Optional[str],
    ) -> CorrectionResult:
        """
        Store the user's final script as a new example and link it to history.

        Raises:
            MissingFieldsError: any input is missing or empty
            PersistenceError: the new example could not be stored
        """
        if not (history_id and ai_polished_script and user_final_script and user_id):
            raise MissingFieldsError("Missing data for learning")

        score = quality_score(ai_polished_script, user_final_script)
        # The approved final text is the authoritative topic signal
        topic = await self.classifier.classify(user_final_script)

        example = VoiceExample(
            id=str(uuid.uuid4()),
            user_id=user_id,
            script_text=user_final_script,
            topic_category=topic.value,
            quality_score=score,
            word_count=word_count(user_final_script),
        )
        try:
            self.db.add(example)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error("Failed to save voice example", user_id=user_id, error=str(e))
            raise PersistenceError("Failed to save correction") from e

        linked = await self._link_history(history_id, user_id, user_final_script, example.id)

        logger.info(
            "Correction learned",
            user_id=user_id,
            example_id=example.id,
            quality_score=score,
            topic=topic.value,
            history_linked=linked,
        )
        return CorrectionResult(
            quality_score=score,
            topic=topic,
            example_id=example.id,
            history_linked=linked,
        )

    async def _link_history(
        self,
        history_id: str,
        user_id: str,
        user_final_script: str,
        example_id: str,
    ) -> bool:
        """
        Attach the final script and example to the history record.

        Scoped to the owning user and applied only once. Failure is logged,
        never raised: the example is already saved.
        """
        stmt = (
            update(PolishHistory)
            .where(
                PolishHistory.id == history_id,
                PolishHistory.user_id == user_id,
                PolishHistory.user_final_script.is_(None),
            )
            .values(user_final_script=user_final_script, voice_example_id=example_id)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error("Failed to link polish history", history_id=history_id, error=str(e))
            return False

        if result.rowcount == 0:
            logger.warning(
                "Polish history not linked: not found, not owned, or already finalized",
                history_id=history_id,
                user_id=user_id,
            )
            return False
        return True
