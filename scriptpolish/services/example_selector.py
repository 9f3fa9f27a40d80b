"""
Example selection: picks the user's most representative saved scripts.
"""

import structlog
from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from scriptpolish.core.config import settings
from scriptpolish.models.voice_example import TopicCategory, VoiceExample

logger = structlog.get_logger(__name__)


class ExampleSelector:
    """
    Ranks a user's VoiceExamples for a topic.

    Order: same topic first (skipped when the topic is Other), then higher
    quality_score, then most recent. At most max_selected_examples are returned.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def select_best_examples(self, user_id: str, topic: TopicCategory) -> list[str]:
        """Return ranked script texts; an empty list on no data or on any failure."""
        stmt = select(VoiceExample.script_text).where(VoiceExample.user_id == user_id)

        ordering = []
        if topic != TopicCategory.OTHER:
            ordering.append(case((VoiceExample.topic_category == topic.value, 0), else_=1))
        ordering.extend([VoiceExample.quality_score.desc(), VoiceExample.created_at.desc()])

        stmt = stmt.order_by(*ordering).limit(settings.max_selected_examples)

        try:
            result = await self.db.execute(stmt)
            examples = list(result.scalars().all())
        except Exception as e:
            logger.error("Example retrieval failed", user_id=user_id, error=str(e))
            await self.db.rollback()
            return []

        logger.info(
            "Examples selected",
            user_id=user_id,
            topic=topic.value,
            count=len(examples),
        )
        return examples
