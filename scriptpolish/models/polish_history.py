"""
PolishHistory model: one row per rewrite transaction.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from scriptpolish.core.database import Base


class PolishHistory(Base):
    """
    A single rewrite: the raw input and the AI output.

    user_final_script and voice_example_id are filled in once, when the user
    saves their corrected version.
    """

    __tablename__ = "polish_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    raw_script: Mapped[str] = mapped_column(Text, nullable=False)
    ai_polished_script: Mapped[str] = mapped_column(Text, nullable=False)
    user_final_script: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Informational link only; deleting the example leaves the history intact
    voice_example_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("voice_examples.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<PolishHistory(id={self.id}, user_id={self.user_id})>"
