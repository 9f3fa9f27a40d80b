"""
Voice pattern extraction.

Turns a user's saved example scripts into a structured VoicePatternProfile
with a single JSON-mode LLM call, then stores it on the user's profile.
"""

import json
from datetime import datetime, timezone
from typing import Any

import structlog
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scriptpolish.core.config import settings
from scriptpolish.core.exceptions import (
    InsufficientExamplesError,
    LLMError,
    PatternExtractionFailedError,
    PersistenceError,
)
from scriptpolish.core.llm_clients import LLMClient, LLMMessage
from scriptpolish.models.profile import Profile
from scriptpolish.models.voice_example import VoiceExample
from scriptpolish.schemas import VoicePatternProfile
from scriptpolish.utils.prompts import PromptBuilder

logger = structlog.get_logger(__name__)


def parse_voice_patterns(raw: str) -> VoicePatternProfile:
    """
    Parse the extraction completion.

    Accepts the bare document or one wrapped in {"voice_patterns": ...},
    optionally inside a markdown code fence.

    Raises:
        PatternExtractionFailedError: on invalid JSON or a missing section
    """
    text = (raw or "").strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
        text = text.strip()

    try:
        document: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise PatternExtractionFailedError("Voice analysis returned invalid JSON") from e

    if isinstance(document, dict) and isinstance(document.get("voice_patterns"), dict):
        document = document["voice_patterns"]
    if not isinstance(document, dict):
        raise PatternExtractionFailedError("Voice analysis did not return an object")

    missing = [key for key in VoicePatternProfile.SECTIONS if not isinstance(document.get(key), dict)]
    if missing:
        raise PatternExtractionFailedError(
            f"Voice analysis is missing sections: {', '.join(missing)}"
        )

    try:
        return VoicePatternProfile.model_validate(document)
    except ValidationError as e:
        raise PatternExtractionFailedError("Voice analysis returned malformed sections") from e


class VoiceAnalyzer:
    """Extracts and persists voice pattern profiles."""

    def __init__(self, llm: LLMClient, db: AsyncSession):
        self.llm = llm
        self.db = db

    async def extract_voice_patterns(self, examples: list[str]) -> VoicePatternProfile:
        """
        Analyze example scripts and return their voice pattern profile.

        Raises:
            InsufficientExamplesError: fewer than min_examples_for_analysis scripts
            PatternExtractionFailedError: the call failed or returned an unusable document
        """
        if len(examples) < settings.min_examples_for_analysis:
            raise InsufficientExamplesError(
                f"Need at least {settings.min_examples_for_analysis} saved examples to analyze a voice."
            )

        system_prompt, user_prompt = PromptBuilder.build_extraction_prompt(examples)
        messages = [
            LLMMessage(role="system", content=system_prompt),
            LLMMessage(role="user", content=user_prompt),
        ]

        try:
            response = await self.llm.generate(
                messages,
                temperature=settings.extraction_temperature,
                json_mode=True,
            )
        except LLMError as e:
            logger.error("Voice pattern extraction call failed", error=str(e))
            raise PatternExtractionFailedError() from e

        if not (response.content or "").strip():
            raise PatternExtractionFailedError("AI did not return patterns")

        profile = parse_voice_patterns(response.content)
        logger.info(
            "Voice patterns extracted",
            examples=len(examples),
            tokens=response.tokens_used,
        )
        return profile

    async def analyze_user_voice(self, user_id: str) -> VoicePatternProfile:
        """
        Re-analyze a user's voice from their most recent saved examples and
        replace the stored profile. The stored profile is untouched on failure.
        """
        stmt = (
            select(VoiceExample.script_text)
            .where(VoiceExample.user_id == user_id)
            .order_by(VoiceExample.created_at.desc())
            .limit(settings.max_examples_for_analysis)
        )
        try:
            result = await self.db.execute(stmt)
            examples = list(result.scalars().all())
        except Exception as e:
            logger.error("Failed to load voice examples", user_id=user_id, error=str(e))
            raise PersistenceError("Failed to load saved examples") from e

        profile = await self.extract_voice_patterns(examples)

        try:
            await self._store_profile(user_id, profile.model_dump(mode="json"))
        except Exception as e:
            await self.db.rollback()
            logger.error("Failed to store voice patterns", user_id=user_id, error=str(e))
            raise PersistenceError("Failed to store voice patterns") from e

        logger.info("Voice profile replaced", user_id=user_id, examples=len(examples))
        return profile

    async def _store_profile(self, user_id: str, document: dict) -> None:
        """
        Insert or replace the user's profile row.

        A concurrent first analysis may insert the row between our read and
        our insert; that conflict is retried once as an update.
        """
        extracted_at = datetime.now(timezone.utc)
        for attempt in range(2):
            row = await self.db.get(Profile, user_id)
            if row is None:
                row = Profile(id=user_id)
                self.db.add(row)
            row.voice_patterns = document
            row.patterns_extracted_at = extracted_at
            try:
                await self.db.commit()
                return
            except IntegrityError:
                await self.db.rollback()
                if attempt:
                    raise
                logger.info("Profile created concurrently, retrying as update", user_id=user_id)
