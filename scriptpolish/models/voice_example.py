"""
VoiceExample model: finalized scripts the user approved.

Rows are appended by the correction feedback loop and never mutated.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from scriptpolish.core.database import Base


class TopicCategory(str, Enum):
    """Closed set of topic labels a script can be bucketed into."""
    PRODUCTIVITY = "Productivity"
    TECH = "Tech"
    FINANCE = "Finance"
    STUDENT_ADVICE = "Student Advice"
    HEALTH = "Health"
    RELATIONSHIPS = "Relationships"
    CREATOR_ECONOMY = "Creator Economy"
    PHILOSOPHY = "Philosophy"
    OTHER = "Other"

    @classmethod
    def labels(cls) -> list[str]:
        return [c.value for c in cls]


class VoiceExample(Base):
    """One user-authored, finalized script sample."""

    __tablename__ = "voice_examples"
    __table_args__ = (
        CheckConstraint(
            "quality_score >= 0 AND quality_score <= 100",
            name="ck_voice_examples_quality_score_range",
        ),
        Index("ix_voice_examples_user_topic", "user_id", "topic_category"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    script_text: Mapped[str] = mapped_column(Text, nullable=False)
    topic_category: Mapped[str] = mapped_column(
        String(50), nullable=False, default=TopicCategory.OTHER.value
    )
    quality_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<VoiceExample(id={self.id}, topic={self.topic_category}, "
            f"quality={self.quality_score})>"
        )
