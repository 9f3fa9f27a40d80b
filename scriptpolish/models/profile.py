"""
Profile model: one row per authenticated user.

Holds the extracted voice pattern document. The document is replaced
wholesale on every successful analysis, never patched field by field.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from scriptpolish.core.database import Base
from scriptpolish.models.column_types import JSONDocument


class Profile(Base):
    """User profile carrying the voice pattern profile."""

    __tablename__ = "profiles"

    # Matches the auth provider's user id; there is no local users table
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    voice_patterns: Mapped[Optional[dict]] = mapped_column(JSONDocument, nullable=True)
    patterns_extracted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, has_patterns={self.voice_patterns is not None})>"
