"""
Polish service tests: style resolution, retry policy and history writes.
"""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import wait_none

from conftest import FakeLLMClient, add_example, add_profile
from scriptpolish.core.exceptions import (
    EmptyCompletionError,
    LLMError,
    LLMTransientError,
    MissingFieldsError,
    PolishFailedError,
    VoicePatternNotFoundError,
)
from scriptpolish.models import PolishHistory
from scriptpolish.schemas import ExampleStyle
from scriptpolish.services.polish_service import PolishService, StyleMode
from scriptpolish.utils.prompts import NO_EXAMPLES_GUIDANCE

RAW = "Three reasons to journal. 1. Clarity. 2. Memory. 3. Calm. Studies show 67% sleep better."


def make_service(llm: FakeLLMClient, db: AsyncSession) -> PolishService:
    return PolishService(llm, db, retry_wait=wait_none())


@pytest.mark.asyncio
async def test_pattern_mode_requires_profile(db_session: AsyncSession):
    llm = FakeLLMClient()

    with pytest.raises(VoicePatternNotFoundError):
        await make_service(llm, db_session).polish_for_user("u1", RAW)

    assert llm.calls == []


@pytest.mark.asyncio
async def test_unreadable_stored_profile_counts_as_missing(db_session: AsyncSession):
    await add_profile(db_session, "u1", {"openings": {}})

    with pytest.raises(VoicePatternNotFoundError):
        await make_service(FakeLLMClient(), db_session).polish_for_user("u1", RAW)


@pytest.mark.asyncio
async def test_pattern_mode_polishes_and_records_history(
    db_session: AsyncSession, sample_voice_patterns: dict
):
    await add_profile(db_session, "u1", sample_voice_patterns)
    llm = FakeLLMClient(responses=["  Okay, real talk. Journal.  "])

    result = await make_service(llm, db_session).polish_for_user("u1", RAW)

    assert result.polished_script == "Okay, real talk. Journal."
    history = await db_session.get(PolishHistory, result.history_id)
    assert history.user_id == "u1"
    assert history.raw_script == RAW
    assert history.ai_polished_script == "Okay, real talk. Journal."
    assert history.user_final_script is None

    call = llm.calls[0]
    assert call["temperature"] == pytest.approx(0.3)
    system_prompt = llm.system_prompts()[0]
    for word in ("synergy", "leverage", "utilize"):
        assert f'"{word}"' in system_prompt
    assert RAW in call["messages"][1].content


@pytest.mark.asyncio
async def test_transient_failures_are_retried(db_session: AsyncSession):
    llm = FakeLLMClient(responses=[
        LLMTransientError("timeout"),
        LLMTransientError("503"),
        "Polished on the third try.",
    ])

    result = await make_service(llm, db_session).polish("u1", RAW, ExampleStyle())

    assert result.polished_script == "Polished on the third try."
    assert len(llm.calls) == 3


@pytest.mark.asyncio
async def test_retries_stop_after_three_attempts(db_session: AsyncSession):
    llm = FakeLLMClient(responses=[LLMTransientError("down")] * 4)

    with pytest.raises(PolishFailedError) as exc_info:
        await make_service(llm, db_session).polish("u1", RAW, ExampleStyle())

    assert len(llm.calls) == 3
    assert "down" in exc_info.value.message
    assert (await db_session.execute(select(PolishHistory))).first() is None


@pytest.mark.asyncio
async def test_non_transient_failure_is_not_retried(db_session: AsyncSession):
    llm = FakeLLMClient(responses=[LLMError("invalid api key"), "unused"])

    with pytest.raises(PolishFailedError):
        await make_service(llm, db_session).polish("u1", RAW, ExampleStyle())

    assert len(llm.calls) == 1


@pytest.mark.asyncio
async def test_empty_completion_is_not_retried(db_session: AsyncSession):
    llm = FakeLLMClient(responses=["   ", "unused"])

    with pytest.raises(EmptyCompletionError):
        await make_service(llm, db_session).polish("u1", RAW, ExampleStyle())

    assert len(llm.calls) == 1


@pytest.mark.asyncio
async def test_history_failure_does_not_fail_polish(db_session: AsyncSession, monkeypatch):
    async def failing_commit():
        raise ConnectionError("write failed")

    monkeypatch.setattr(db_session, "commit", failing_commit)
    llm = FakeLLMClient(responses=["Polished anyway."])

    result = await make_service(llm, db_session).polish("u1", RAW, ExampleStyle())

    assert result.polished_script == "Polished anyway."
    assert result.history_id is None


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["", "   "])
async def test_missing_script_is_rejected(db_session: AsyncSession, raw: str):
    with pytest.raises(MissingFieldsError):
        await make_service(FakeLLMClient(), db_session).polish_for_user("u1", raw)


@pytest.mark.asyncio
async def test_example_mode_classifies_then_selects_then_generates(db_session: AsyncSession):
    await add_example(db_session, "u1", "My tech script.", "Tech", 90)
    await add_example(db_session, "u1", "My health script.", "Health", 95)
    llm = FakeLLMClient(fast_responses=["Tech"], responses=["Polished."])

    await make_service(llm, db_session).polish_for_user("u1", RAW, StyleMode.EXAMPLES)

    assert [c["kind"] for c in llm.calls] == ["fast", "primary"]
    system_prompt = llm.system_prompts()[0]
    assert system_prompt.index("My tech script.") < system_prompt.index("My health script.")


@pytest.mark.asyncio
async def test_example_mode_without_examples_falls_back_to_generic_framing(db_session: AsyncSession):
    llm = FakeLLMClient(fast_responses=["Health"], responses=["Polished."])

    result = await make_service(llm, db_session).polish_for_user("u1", RAW, StyleMode.EXAMPLES)

    assert result.polished_script == "Polished."
    assert NO_EXAMPLES_GUIDANCE in llm.system_prompts()[0]


@pytest.mark.asyncio
async def test_enveloped_stored_profile_is_accepted(
    db_session: AsyncSession, sample_voice_patterns: dict
):
    await add_profile(db_session, "u1", {"voice_patterns": sample_voice_patterns})
    llm = FakeLLMClient(responses=["Polished."])

    result = await make_service(llm, db_session).polish_for_user("u1", RAW)

    assert result.polished_script == "Polished."
    assert '"synergy"' in llm.system_prompts()[0]


@pytest.mark.asyncio
async def test_stored_profile_with_list_text_field_is_usable(
    db_session: AsyncSession, sample_voice_patterns: dict
):
    sample_voice_patterns["personality_markers"]["humor_style"] = ["dry", "self-deprecating"]
    await add_profile(db_session, "u1", sample_voice_patterns)
    llm = FakeLLMClient(responses=["Polished."])

    await make_service(llm, db_session).polish_for_user("u1", RAW)

    assert "HUMOR: dry, self-deprecating." in llm.system_prompts()[0]
