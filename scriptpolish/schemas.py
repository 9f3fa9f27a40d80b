"""
Structured shapes exchanged between the voice-learning services.

VoicePatternProfile is the document the extraction call must return. Only
the eight top-level sections are mandatory; inside each section the fields
read during prompt assembly are typed leniently (a lone string where a list
is expected is accepted, a list or number where text is expected is
flattened to a string, an unparseable number becomes None) and any extra
keys the model emits are preserved.
"""

from typing import Annotated, Any, ClassVar, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected a list of strings")
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, dict):
        return None
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(v).strip() for v in value if v is not None and str(v).strip())
    text = str(value).strip()
    return text or None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "often", "frequently", "always"):
            return True
        if lowered in ("false", "no", "never", "rarely"):
            return False
    return None


StrList = Annotated[list[str], BeforeValidator(_as_str_list)]
Number = Annotated[Optional[float], BeforeValidator(_as_number)]
Flag = Annotated[Optional[bool], BeforeValidator(_as_bool)]
Text = Annotated[Optional[str], BeforeValidator(_as_text)]


class PatternSection(BaseModel):
    """Base for a free-form section; unknown keys are kept."""
    model_config = ConfigDict(extra="allow")


class Openings(PatternSection):
    common_phrases: StrList = Field(default_factory=list)
    hook_style: Text = None


class Transitions(PatternSection):
    common_phrases: StrList = Field(default_factory=list)
    avoid_phrases: StrList = Field(default_factory=list)


class SentenceStructure(PatternSection):
    avg_length_words: Number = None
    uses_fragments: Flag = None
    uses_rhetorical_questions: Flag = None
    paragraph_length_sentences: Number = None


class EmphasisTechniques(PatternSection):
    techniques: StrList = Field(default_factory=list)
    uses_caps_for_emphasis: Flag = None


class Vocabulary(PatternSection):
    signature_words: StrList = Field(default_factory=list)
    avoid_words: StrList = Field(default_factory=list)
    formality: Text = None


class Pacing(PatternSection):
    style: Text = None
    words_per_point: Number = None
    uses_line_breaks: Flag = None


class Conclusions(PatternSection):
    common_phrases: StrList = Field(default_factory=list)
    call_to_action_style: Text = None


class PersonalityMarkers(PatternSection):
    self_reference: Text = None
    audience_reference: Text = None
    humor_style: Text = None
    traits: StrList = Field(default_factory=list)


class VoicePatternProfile(BaseModel):
    """A user's writing voice, broken into the sections the rewrite obeys."""

    openings: Openings
    transitions: Transitions
    sentence_structure: SentenceStructure
    emphasis_techniques: EmphasisTechniques
    vocabulary: Vocabulary
    pacing: Pacing
    conclusions: Conclusions
    personality_markers: PersonalityMarkers

    SECTIONS: ClassVar[tuple[str, ...]] = (
        "openings",
        "transitions",
        "sentence_structure",
        "emphasis_techniques",
        "vocabulary",
        "pacing",
        "conclusions",
        "personality_markers",
    )


# Style sources: what conditions a rewrite

class VoicePatternStyle(BaseModel):
    """Rewrite by following explicit rules rendered from a pattern profile."""
    profile: VoicePatternProfile


class ExampleStyle(BaseModel):
    """Rewrite by imitating ranked raw examples (may be empty)."""
    examples: list[str] = Field(default_factory=list)


StyleSource = Union[VoicePatternStyle, ExampleStyle]
