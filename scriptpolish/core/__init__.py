"""Core infrastructure modules"""

from scriptpolish.core.config import settings
from scriptpolish.core.database import get_db, AsyncSessionLocal
from scriptpolish.core.llm_clients import LLMClient

__all__ = ["settings", "get_db", "AsyncSessionLocal", "LLMClient"]
