"""
Prompt templates and the builder that renders style sources into
rewrite instructions.

Prompt structure for a rewrite:
1. Role
2. Style block (numbered pattern rules, or gold-standard examples)
3. Invariant rules shared by every rewrite
4. Output instruction
The raw script travels separately as the user message.
"""

import json
from typing import Optional

from scriptpolish.schemas import (
    ExampleStyle,
    StyleSource,
    VoicePatternProfile,
    VoicePatternStyle,
)


CLASSIFICATION_PROMPT = """You are a fast and accurate text classifier. Your only job is to assign one category to the following script.
Choose ONLY from this list: {categories}.
Return only the single category name, and nothing else.
SCRIPT:
---
{script}
---"""


EXTRACTION_SYSTEM_PROMPT = """You are a "Voice Pattern Analyst." You study a creator's finished video scripts and describe their writing voice as precise, machine-usable patterns.

## Guidelines
- Quote phrases exactly as they appear in the scripts; do not paraphrase them.
- Prefer patterns that recur across several scripts over one-off choices.
- Numbers must be measured from the scripts, not guessed.
- avoid_words and avoid_phrases list generic or corporate wording this creator never uses.
- If a field cannot be determined, use an empty list or null. Never omit a top-level section."""


# Documented sub-schema of each section; rendered into the extraction prompt
EXTRACTION_SCHEMA = {
    "openings": {
        "common_phrases": ["exact opening phrases the creator uses"],
        "hook_style": "how the first line grabs attention",
    },
    "transitions": {
        "common_phrases": ["exact transition phrases between points"],
        "avoid_phrases": ["generic transitions the creator never uses"],
    },
    "sentence_structure": {
        "avg_length_words": 0,
        "uses_fragments": True,
        "uses_rhetorical_questions": True,
        "paragraph_length_sentences": 0,
    },
    "emphasis_techniques": {
        "techniques": ["e.g. repetition, one-word lines, contrast"],
        "uses_caps_for_emphasis": False,
    },
    "vocabulary": {
        "signature_words": ["words and slang the creator favours"],
        "avoid_words": ["words the creator never uses"],
        "formality": "casual | neutral | formal",
    },
    "pacing": {
        "style": "how fast ideas move and how points are spaced",
        "words_per_point": 0,
        "uses_line_breaks": True,
    },
    "conclusions": {
        "common_phrases": ["exact closing phrases"],
        "call_to_action_style": "how the creator ends and what they ask for",
    },
    "personality_markers": {
        "self_reference": "how the creator refers to themself, e.g. I",
        "audience_reference": "how the creator addresses viewers, e.g. you",
        "humor_style": "type of humor, or null",
        "traits": ["short personality descriptors"],
    },
}


POLISH_ROLE = (
    'You are a "Pattern Assembler." Your ONLY job is to rewrite a Fact Sheet '
    "so it reads exactly like the creator wrote it."
)

EXAMPLE_ROLE = (
    "You are a ghostwriter for a video creator. Your ONLY job is to rewrite a "
    "Fact Sheet so it reads exactly like the creator wrote it."
)

NO_EXAMPLES_GUIDANCE = (
    "The creator has not saved any example scripts yet. Write in a natural, "
    "conversational spoken voice suited to a short video script: short sentences, "
    "direct address to the viewer, no corporate filler."
)

INVARIANT_RULES = [
    "CONTENT ONLY: The Fact Sheet is raw content, not style. Discard its original "
    "phrasing, tone and any generic filler phrasing.",
    "PRESERVE FACTS: Keep every fact, name, number, statistic and structural marker "
    "(such as numbered reasons, steps or principles) from the Fact Sheet. Do not "
    "invent new facts.",
    "OUTPUT: Return only the rewritten script. No preamble, no title, no commentary.",
]


def _quoted(items: list[str]) -> str:
    return ", ".join(f'"{item}"' for item in items)


def _number(value: float) -> str:
    return str(int(round(value))) if value >= 1 else f"{value:g}"


class PromptBuilder:
    """
    Builds the prompts for classification, extraction and rewriting.
    """

    @staticmethod
    def build_classification_prompt(script: str, categories: list[str], max_chars: int) -> str:
        """Classification prompt; only the first max_chars characters are considered."""
        return CLASSIFICATION_PROMPT.format(
            categories=", ".join(categories),
            script=script[:max_chars],
        )

    @staticmethod
    def build_output_format(schema: dict) -> str:
        """JSON output specification."""
        return "\n".join([
            "## Output Format",
            "Respond with valid JSON only. No additional text.",
            "",
            'Schema (a single object under the key "voice_patterns"):',
            "```json",
            json.dumps({"voice_patterns": schema}, indent=2),
            "```",
        ])

    @classmethod
    def build_extraction_prompt(cls, examples: list[str]) -> tuple[str, str]:
        """
        Build (system_prompt, user_prompt) for voice pattern extraction.
        """
        system_prompt = "\n\n".join([
            EXTRACTION_SYSTEM_PROMPT,
            cls.build_output_format(EXTRACTION_SCHEMA),
        ])

        parts = [f"Analyze these {len(examples)} scripts written by the same creator.", ""]
        for i, example in enumerate(examples, 1):
            parts.extend([f"### Script {i}", example.strip(), ""])
        return system_prompt, "\n".join(parts)

    @staticmethod
    def render_pattern_rules(profile: VoicePatternProfile) -> list[str]:
        """
        Turn a pattern profile into explicit rewrite rules.

        Fields that are empty produce no rule, so the list length varies.
        """
        rules: list[str] = []
        o = profile.openings
        t = profile.transitions
        s = profile.sentence_structure
        e = profile.emphasis_techniques
        v = profile.vocabulary
        p = profile.pacing
        c = profile.conclusions
        m = profile.personality_markers

        if o.common_phrases:
            rules.append(
                f"OPENING: The script MUST start with one of these {len(o.common_phrases)} "
                f"opening phrases: {_quoted(o.common_phrases)}."
            )
        if o.hook_style:
            rules.append(f"HOOK: {o.hook_style}.")

        if t.common_phrases:
            rules.append(f"TRANSITIONS: Move between points using: {_quoted(t.common_phrases)}.")
        if t.avoid_phrases:
            rules.append(f"FORBIDDEN TRANSITIONS: Never use: {_quoted(t.avoid_phrases)}.")

        if s.avg_length_words:
            rules.append(
                f"SENTENCE LENGTH: Sentences MUST average about {_number(s.avg_length_words)} words."
            )
        if s.uses_fragments is True:
            rules.append("FRAGMENTS: You MUST use sentence fragments for emphasis.")
        elif s.uses_fragments is False:
            rules.append("FRAGMENTS: Do NOT use sentence fragments. Every sentence is complete.")
        if s.uses_rhetorical_questions is True:
            rules.append("RHETORICAL QUESTIONS: You MUST include rhetorical questions.")
        elif s.uses_rhetorical_questions is False:
            rules.append("RHETORICAL QUESTIONS: Do NOT use rhetorical questions.")
        if s.paragraph_length_sentences:
            rules.append(
                f"PARAGRAPHS: Keep paragraphs to about {_number(s.paragraph_length_sentences)} sentences."
            )

        if e.techniques:
            rules.append(f"EMPHASIS: Create emphasis with: {', '.join(e.techniques)}.")
        if e.uses_caps_for_emphasis is True:
            rules.append("CAPS: Put key words in ALL CAPS for emphasis.")
        elif e.uses_caps_for_emphasis is False:
            rules.append("CAPS: Never write words in all caps.")

        if v.signature_words:
            rules.append(f"VOCABULARY: Work in these words where they fit: {_quoted(v.signature_words)}.")
        if v.avoid_words:
            rules.append(f"FORBIDDEN WORDS: Never use any of these words: {_quoted(v.avoid_words)}.")
        if v.formality:
            rules.append(f"REGISTER: Keep the register {v.formality}.")

        if p.style:
            rules.append(f"PACING: {p.style}.")
        if p.words_per_point:
            rules.append(f"POINT LENGTH: Spend about {_number(p.words_per_point)} words on each point.")
        if p.uses_line_breaks is True:
            rules.append("LINE BREAKS: Put each beat on its own line.")

        if c.common_phrases:
            rules.append(f"CLOSING: End with one of these closing phrases: {_quoted(c.common_phrases)}.")
        if c.call_to_action_style:
            rules.append(f"CALL TO ACTION: {c.call_to_action_style}.")

        if m.self_reference:
            rules.append(f'SELF-REFERENCE: Refer to yourself as "{m.self_reference}".')
        if m.audience_reference:
            rules.append(f'AUDIENCE: Address the viewer as "{m.audience_reference}".')
        if m.humor_style:
            rules.append(f"HUMOR: {m.humor_style}.")
        if m.traits:
            rules.append(f"PERSONALITY: Sound {', '.join(m.traits)}.")

        return rules

    @staticmethod
    def render_examples(examples: list[str]) -> str:
        """Gold-standard example block, or generic guidance when there are none."""
        if not examples:
            return "\n".join(["## Style Guidance", NO_EXAMPLES_GUIDANCE])

        parts = [
            "## Gold-Standard Examples",
            "These scripts were written by the creator. Infer their tone, pacing, "
            "sentence rhythm and personality from them and write the same way. "
            "Do not copy their content.",
            "",
        ]
        for i, example in enumerate(examples, 1):
            parts.extend([f"### Example {i}", "---", example.strip(), "---", ""])
        return "\n".join(parts).rstrip()

    @classmethod
    def build_polish_prompt(cls, style: StyleSource) -> str:
        """Build the rewrite system prompt for either style source."""
        if isinstance(style, VoicePatternStyle):
            role = POLISH_ROLE
            style_block = "\n".join(
                ["## Voice Pattern Rules (follow EXACTLY)"]
                + [f"{i}. {rule}" for i, rule in enumerate(cls.render_pattern_rules(style.profile), 1)]
            )
            closing: Optional[str] = (
                "CRITICAL: You are a COPY MACHINE, not a creative writer. "
                "Follow these patterns EXACTLY. Do not improvise."
            )
        elif isinstance(style, ExampleStyle):
            role = EXAMPLE_ROLE
            style_block = cls.render_examples(style.examples)
            closing = None
        else:
            raise TypeError(f"Unsupported style source: {type(style).__name__}")

        parts = [
            role,
            "",
            style_block,
            "",
            "## Rules for Every Rewrite",
            *[f"- {rule}" for rule in INVARIANT_RULES],
        ]
        if closing:
            parts.extend(["", closing])
        return "\n".join(parts)

    @staticmethod
    def build_fact_sheet(raw_script: str) -> str:
        """User message carrying the content to rewrite."""
        return "\n".join(["## The Fact Sheet (content to rewrite)", "---", raw_script.strip(), "---"])
