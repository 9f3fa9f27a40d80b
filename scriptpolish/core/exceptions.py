"""
Error taxonomy for the voice-learning pipeline.

Every domain error carries a machine-stable ``kind`` and the HTTP status the
API layer answers with. Messages are safe to show to end users.
"""

from typing import Optional


class ScriptPolishError(Exception):
    """Base class for errors surfaced to API callers."""

    kind: str = "internal_error"
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


# --- Validation (4xx, never retried) ---

class MissingFieldsError(ScriptPolishError):
    kind = "missing_fields"
    status_code = 400
    default_message = "Missing required fields"


class VoicePatternNotFoundError(ScriptPolishError):
    kind = "voice_pattern_not_found"
    status_code = 400
    default_message = (
        "Voice pattern not found. Please run 'Analyze My Voice' on your profile page."
    )


class InsufficientExamplesError(ScriptPolishError):
    kind = "insufficient_examples"
    status_code = 400
    default_message = "Need at least 2 saved examples to analyze a voice."


# --- Upstream failures (5xx) ---

class PatternExtractionFailedError(ScriptPolishError):
    kind = "pattern_extraction_failed"
    default_message = "Failed to extract voice patterns"


class EmptyCompletionError(ScriptPolishError):
    kind = "empty_completion"
    default_message = "No response from AI"


class PolishFailedError(ScriptPolishError):
    kind = "polish_failed"
    default_message = "Failed to polish script"

    def __init__(self, detail: str):
        super().__init__(f"Failed to polish script: {detail}")


class PersistenceError(ScriptPolishError):
    kind = "persistence_failed"
    default_message = "Failed to save data"


# --- LLM transport ---

class LLMError(Exception):
    """A completion request failed."""


class LLMTransientError(LLMError):
    """A completion request failed in a way worth retrying."""
