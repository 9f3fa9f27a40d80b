"""
Topic classification for scripts.
One fast LLM call, validated against a hard allow-list of labels.
"""

import structlog

from scriptpolish.core.config import settings
from scriptpolish.core.llm_clients import LLMClient, LLMMessage
from scriptpolish.models.voice_example import TopicCategory
from scriptpolish.utils.prompts import PromptBuilder
from scriptpolish.utils.text_metrics import preview

logger = structlog.get_logger(__name__)


class TopicClassifier:
    """
    Maps script text to exactly one TopicCategory.

    Never raises: any failure, or any answer outside the fixed label set,
    degrades to TopicCategory.OTHER.
    """

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def classify(self, script_text: str) -> TopicCategory:
        prompt = PromptBuilder.build_classification_prompt(
            script_text,
            TopicCategory.labels(),
            settings.classifier_max_chars,
        )

        try:
            response = await self.llm.generate_fast(
                [LLMMessage(role="system", content=prompt)],
                temperature=settings.classifier_temperature,
            )
        except Exception as e:
            logger.warning("Topic classification failed", error=str(e))
            return TopicCategory.OTHER

        label = (response.content or "").strip()
        try:
            topic = TopicCategory(label)
        except ValueError:
            logger.info("Unrecognised topic label", label=label[:50], script=preview(script_text))
            return TopicCategory.OTHER

        logger.debug("Script classified", topic=topic.value)
        return topic
