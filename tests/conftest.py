"""
Pytest configuration and fixtures.
"""

import os

# Settings are read once at import time; point them at test values first
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import uuid
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional, Union

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import scriptpolish.models  # noqa: F401
from scriptpolish.api.deps import get_llm_client
from scriptpolish.api.main import app
from scriptpolish.core.database import Base, get_db
from scriptpolish.core.llm_clients import LLMMessage, LLMProvider, LLMResponse
from scriptpolish.models import Profile, VoiceExample


TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeLLMClient:
    """
    Scripted stand-in for LLMClient.

    Each queue item is either completion text or an exception to raise.
    Every call is recorded in ``calls``.
    """

    def __init__(
        self,
        responses: Optional[list[Union[str, Exception]]] = None,
        fast_responses: Optional[list[Union[str, Exception]]] = None,
    ):
        self.responses = list(responses or [])
        self.fast_responses = list(fast_responses or [])
        self.calls: list[dict] = []

    def _next(self, queue: list) -> LLMResponse:
        if not queue:
            raise AssertionError("Unexpected LLM call")
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return LLMResponse(content=item, model="fake-model", provider=LLMProvider.GROQ)

    async def generate(
        self,
        messages: list[LLMMessage],
        provider=None,
        model=None,
        temperature=None,
        max_tokens=None,
        json_mode: bool = False,
    ) -> LLMResponse:
        self.calls.append({
            "kind": "primary",
            "messages": messages,
            "temperature": temperature,
            "json_mode": json_mode,
        })
        return self._next(self.responses)

    async def generate_fast(
        self,
        messages: list[LLMMessage],
        temperature=None,
        json_mode: bool = False,
    ) -> LLMResponse:
        self.calls.append({
            "kind": "fast",
            "messages": messages,
            "temperature": temperature,
            "json_mode": json_mode,
        })
        return self._next(self.fast_responses)

    def system_prompts(self, kind: str = "primary") -> list[str]:
        return [
            m.content
            for call in self.calls
            if call["kind"] == kind
            for m in call["messages"]
            if m.role == "system"
        ]


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """In-memory SQLite session with all tables created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, fake_llm: FakeLLMClient) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with the test session and fake LLM injected."""

    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_llm_client] = lambda: fake_llm

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def mock_user_id() -> str:
    """The user resolved in development mode when no token is sent."""
    return "dev-user-001"


@pytest.fixture
def sample_voice_patterns() -> dict:
    """A complete voice pattern document."""
    return {
        "openings": {
            "common_phrases": ["Okay, real talk.", "Here's the thing nobody tells you."],
            "hook_style": "Start with a blunt claim the viewer disagrees with",
        },
        "transitions": {
            "common_phrases": ["Now here's where it gets good.", "Second thing."],
            "avoid_phrases": ["Furthermore", "Moreover"],
        },
        "sentence_structure": {
            "avg_length_words": 9,
            "uses_fragments": True,
            "uses_rhetorical_questions": False,
            "paragraph_length_sentences": 2,
        },
        "emphasis_techniques": {
            "techniques": ["repetition", "one-word lines"],
            "uses_caps_for_emphasis": False,
        },
        "vocabulary": {
            "signature_words": ["honestly", "wild"],
            "avoid_words": ["synergy", "leverage", "utilize"],
            "formality": "casual",
        },
        "pacing": {
            "style": "Fast, one idea per line",
            "words_per_point": 40,
            "uses_line_breaks": True,
        },
        "conclusions": {
            "common_phrases": ["That's it. Go try it."],
            "call_to_action_style": "Dare the viewer to try it for a week",
        },
        "personality_markers": {
            "self_reference": "I",
            "audience_reference": "you",
            "humor_style": "dry and self-deprecating",
            "traits": ["direct", "skeptical"],
        },
    }


async def add_example(
    session: AsyncSession,
    user_id: str,
    text: str,
    topic: str = "Other",
    quality: int = 0,
    created_at: Optional[datetime] = None,
) -> VoiceExample:
    example = VoiceExample(
        id=str(uuid.uuid4()),
        user_id=user_id,
        script_text=text,
        topic_category=topic,
        quality_score=quality,
        word_count=len(text.split()),
        created_at=created_at or datetime.now(timezone.utc),
    )
    session.add(example)
    await session.commit()
    return example


async def add_profile(session: AsyncSession, user_id: str, patterns: dict) -> Profile:
    profile = Profile(
        id=user_id,
        voice_patterns=patterns,
        patterns_extracted_at=datetime.now(timezone.utc),
    )
    session.add(profile)
    await session.commit()
    return profile
