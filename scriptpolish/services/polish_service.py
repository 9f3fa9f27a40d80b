"""
Script polishing: rewrites a raw script in the user's voice.

Pipeline per request: resolve style source (profile, or classify + select
examples) -> assemble prompt -> completion with bounded retry -> history write.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from scriptpolish.core.config import settings
from scriptpolish.core.exceptions import (
    EmptyCompletionError,
    LLMError,
    LLMTransientError,
    MissingFieldsError,
    PolishFailedError,
    VoicePatternNotFoundError,
)
from scriptpolish.core.llm_clients import LLMClient, LLMMessage
from scriptpolish.models.polish_history import PolishHistory
from scriptpolish.models.profile import Profile
from scriptpolish.schemas import ExampleStyle, StyleSource, VoicePatternProfile, VoicePatternStyle
from scriptpolish.services.example_selector import ExampleSelector
from scriptpolish.services.topic_classifier import TopicClassifier
from scriptpolish.utils.prompts import PromptBuilder
from scriptpolish.utils.text_metrics import preview

logger = structlog.get_logger(__name__)


class StyleMode(str, Enum):
    """How a rewrite is conditioned on the user's voice."""
    PATTERNS = "patterns"
    EXAMPLES = "examples"


@dataclass
class PolishResult:
    polished_script: str
    history_id: Optional[str]


class PolishService:
    """
    Rewrites scripts and records each rewrite in polish history.
    """

    def __init__(
        self,
        llm: LLMClient,
        db: AsyncSession,
        classifier: Optional[TopicClassifier] = None,
        selector: Optional[ExampleSelector] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self.llm = llm
        self.db = db
        self.classifier = classifier or TopicClassifier(llm)
        self.selector = selector or ExampleSelector(db)
        self.retry_wait = retry_wait or wait_exponential(
            multiplier=1,
            min=settings.polish_retry_min_wait,
            max=settings.polish_retry_max_wait,
        )

    async def load_voice_patterns(self, user_id: str) -> VoicePatternProfile:
        """
        Raises:
            VoicePatternNotFoundError: no usable profile stored for the user
        """
        row = await self.db.get(Profile, user_id)
        if row is None or not row.voice_patterns:
            raise VoicePatternNotFoundError()

        document = row.voice_patterns
        # Older rows carry the extraction envelope
        if isinstance(document.get("voice_patterns"), dict):
            document = document["voice_patterns"]

        try:
            return VoicePatternProfile.model_validate(document)
        except ValidationError as e:
            logger.error("Stored voice patterns are unreadable", user_id=user_id, error=str(e))
            raise VoicePatternNotFoundError() from e

    async def resolve_style(self, user_id: str, raw_script: str, mode: StyleMode) -> StyleSource:
        if mode == StyleMode.PATTERNS:
            return VoicePatternStyle(profile=await self.load_voice_patterns(user_id))

        topic = await self.classifier.classify(raw_script)
        examples = await self.selector.select_best_examples(user_id, topic)
        return ExampleStyle(examples=examples)

    async def generate(self, raw_script: str, style: StyleSource) -> str:
        """
        Run the rewrite completion.

        Transient provider failures are retried up to polish_max_attempts in
        total; an empty completion is not retried.

        Raises:
            EmptyCompletionError: the model returned no text
            PolishFailedError: the provider call failed
        """
        messages = [
            LLMMessage(role="system", content=PromptBuilder.build_polish_prompt(style)),
            LLMMessage(role="user", content=PromptBuilder.build_fact_sheet(raw_script)),
        ]

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(settings.polish_max_attempts),
                wait=self.retry_wait,
                retry=retry_if_exception_type(LLMTransientError),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "Retrying polish completion",
                            attempt=attempt.retry_state.attempt_number,
                        )
                    response = await self.llm.generate(
                        messages,
                        temperature=settings.polish_temperature,
                    )
        except LLMError as e:
            logger.error("Polish completion failed", error=str(e))
            raise PolishFailedError(str(e)) from e

        polished = (response.content or "").strip()
        if not polished:
            raise EmptyCompletionError()
        return polished

    async def record_history(self, user_id: str, raw_script: str, polished: str) -> Optional[str]:
        """Best-effort history write; returns None when it fails."""
        history = PolishHistory(
            id=str(uuid.uuid4()),
            user_id=user_id,
            raw_script=raw_script,
            ai_polished_script=polished,
        )
        try:
            self.db.add(history)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error("Error saving polish history", user_id=user_id, error=str(e))
            return None
        return history.id

    async def polish(self, user_id: str, raw_script: str, style: StyleSource) -> PolishResult:
        """Rewrite raw_script under the given style source and record the result."""
        if not raw_script or not raw_script.strip():
            raise MissingFieldsError("Missing script")

        polished = await self.generate(raw_script, style)
        history_id = await self.record_history(user_id, raw_script, polished)

        logger.info(
            "Script polished",
            user_id=user_id,
            style=type(style).__name__,
            history_id=history_id,
            script=preview(raw_script),
        )
        return PolishResult(polished_script=polished, history_id=history_id)

    async def polish_for_user(
        self,
        user_id: str,
        raw_script: str,
        mode: StyleMode = StyleMode.PATTERNS,
    ) -> PolishResult:
        """Resolve the user's style source, then polish."""
        if not raw_script or not raw_script.strip():
            raise MissingFieldsError("Missing script")

        style = await self.resolve_style(user_id, raw_script, mode)
        return await self.polish(user_id, raw_script, style)
