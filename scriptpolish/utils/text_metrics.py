"""
Text measurements used by the correction feedback loop.
"""

import math

from rapidfuzz.distance import Levenshtein

# Scale factor of the divergence score; capped at MAX_QUALITY_SCORE
QUALITY_SCALE = 1000
MAX_QUALITY_SCORE = 100


def edit_distance(a: str, b: str) -> int:
    """Minimum number of single-character inserts, deletes and substitutions turning a into b."""
    return Levenshtein.distance(a, b)


def quality_score(ai_script: str, final_script: str) -> int:
    """
    Divergence between the AI output and the user's final version.

    0 means the user kept the AI text untouched; 100 means it was heavily
    rewritten. Heuristic: edit distance relative to the AI text length,
    scaled by 1000, rounded half-up and capped at 100.

    Raises:
        ValueError: if ai_script is empty
    """
    if not ai_script:
        raise ValueError("ai_script must not be empty")

    ratio = edit_distance(ai_script, final_script) / len(ai_script)
    return min(MAX_QUALITY_SCORE, math.floor(ratio * QUALITY_SCALE + 0.5))


def word_count(text: str) -> int:
    """Number of whitespace-delimited tokens."""
    return len(text.split())


def preview(text: str, length: int = 80) -> str:
    """Short single-line excerpt for log context."""
    flat = " ".join(text.split())
    return flat if len(flat) <= length else flat[: length - 3] + "..."
