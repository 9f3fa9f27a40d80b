"""
Correction feedback loop tests.
"""

import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import FakeLLMClient
from scriptpolish.core.exceptions import LLMTransientError, MissingFieldsError, PersistenceError
from scriptpolish.models import PolishHistory, TopicCategory, VoiceExample
from scriptpolish.services.correction_service import CorrectionService


async def add_history(session: AsyncSession, user_id: str, final: str = None) -> PolishHistory:
    history = PolishHistory(
        id=str(uuid.uuid4()),
        user_id=user_id,
        raw_script="raw",
        ai_polished_script="abc",
        user_final_script=final,
    )
    session.add(history)
    await session.commit()
    return history


async def reload_history(session: AsyncSession, history_id: str) -> PolishHistory:
    result = await session.execute(
        select(PolishHistory)
        .where(PolishHistory.id == history_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["history_id", "ai_polished_script", "user_final_script", "user_id"])
async def test_missing_fields_are_rejected(db_session: AsyncSession, missing: str):
    llm = FakeLLMClient()
    kwargs = {
        "history_id": "h1",
        "ai_polished_script": "abc",
        "user_final_script": "abcd",
        "user_id": "u1",
    }
    kwargs[missing] = ""

    with pytest.raises(MissingFieldsError) as exc_info:
        await CorrectionService(llm, db_session).record_correction(**kwargs)

    assert exc_info.value.message == "Missing data for learning"
    assert llm.calls == []


@pytest.mark.asyncio
async def test_correction_creates_scored_example_and_links_history(db_session: AsyncSession):
    history = await add_history(db_session, "u1")
    llm = FakeLLMClient(fast_responses=["Tech"])

    result = await CorrectionService(llm, db_session).record_correction(
        history_id=history.id,
        ai_polished_script="abc",
        user_final_script="abcd",
        user_id="u1",
    )

    assert result.quality_score == 100
    assert result.topic == TopicCategory.TECH
    assert result.history_linked is True

    example = await db_session.get(VoiceExample, result.example_id)
    assert example.user_id == "u1"
    assert example.script_text == "abcd"
    assert example.topic_category == "Tech"
    assert example.quality_score == 100
    assert example.word_count == 1

    linked = await reload_history(db_session, history.id)
    assert linked.user_final_script == "abcd"
    assert linked.voice_example_id == result.example_id


@pytest.mark.asyncio
async def test_untouched_script_scores_zero(db_session: AsyncSession):
    history = await add_history(db_session, "u1")
    llm = FakeLLMClient(fast_responses=["Other"])

    result = await CorrectionService(llm, db_session).record_correction(
        history_id=history.id,
        ai_polished_script="Okay, real talk. Journal every night.",
        user_final_script="Okay, real talk. Journal every night.",
        user_id="u1",
    )

    assert result.quality_score == 0


@pytest.mark.asyncio
async def test_other_users_history_is_not_linked(db_session: AsyncSession):
    history = await add_history(db_session, "owner")
    llm = FakeLLMClient(fast_responses=["Health"])

    result = await CorrectionService(llm, db_session).record_correction(
        history_id=history.id,
        ai_polished_script="abc",
        user_final_script="abcd",
        user_id="intruder",
    )

    assert result.history_linked is False
    assert await db_session.get(VoiceExample, result.example_id) is not None
    untouched = await reload_history(db_session, history.id)
    assert untouched.user_final_script is None
    assert untouched.voice_example_id is None


@pytest.mark.asyncio
async def test_finalized_history_is_not_relinked(db_session: AsyncSession):
    history = await add_history(db_session, "u1", final="first final")
    llm = FakeLLMClient(fast_responses=["Other"])

    result = await CorrectionService(llm, db_session).record_correction(
        history_id=history.id,
        ai_polished_script="abc",
        user_final_script="second final",
        user_id="u1",
    )

    assert result.history_linked is False
    assert (await reload_history(db_session, history.id)).user_final_script == "first final"


@pytest.mark.asyncio
async def test_unknown_history_still_stores_example(db_session: AsyncSession):
    llm = FakeLLMClient(fast_responses=["Other"])

    result = await CorrectionService(llm, db_session).record_correction(
        history_id="does-not-exist",
        ai_polished_script="abc",
        user_final_script="abcd",
        user_id="u1",
    )

    assert result.history_linked is False
    assert await db_session.get(VoiceExample, result.example_id) is not None


@pytest.mark.asyncio
async def test_classifier_failure_stores_other(db_session: AsyncSession):
    history = await add_history(db_session, "u1")
    llm = FakeLLMClient(fast_responses=[LLMTransientError("timeout")])

    result = await CorrectionService(llm, db_session).record_correction(
        history_id=history.id,
        ai_polished_script="abc",
        user_final_script="abcd",
        user_id="u1",
    )

    assert result.topic == TopicCategory.OTHER
    example = await db_session.get(VoiceExample, result.example_id)
    assert example.topic_category == "Other"


@pytest.mark.asyncio
async def test_example_insert_failure_raises(db_session: AsyncSession, monkeypatch):
    async def failing_commit():
        raise ConnectionError("insert failed")

    monkeypatch.setattr(db_session, "commit", failing_commit)
    llm = FakeLLMClient(fast_responses=["Other"])

    with pytest.raises(PersistenceError):
        await CorrectionService(llm, db_session).record_correction(
            history_id="h1",
            ai_polished_script="abc",
            user_final_script="abcd",
            user_id="u1",
        )


@pytest.mark.asyncio
async def test_history_link_failure_is_not_fatal(db_session: AsyncSession, monkeypatch):
    history = await add_history(db_session, "u1")
    llm = FakeLLMClient(fast_responses=["Other"])

    async def failing_execute(*args, **kwargs):
        raise ConnectionError("update failed")

    monkeypatch.setattr(db_session, "execute", failing_execute)

    result = await CorrectionService(llm, db_session).record_correction(
        history_id=history.id,
        ai_polished_script="abc",
        user_final_script="abcd",
        user_id="u1",
    )

    assert result.history_linked is False
    assert result.quality_score == 100
