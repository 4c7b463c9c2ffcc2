"""Heuristic token estimates for prompts, logged before each generation call."""

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from civicscoach.models import PromptMessage, TokenUsage

WORDS_PER_TOKEN = 0.75
PUNCTUATION_MULTIPLIER = 1.1
SPECIAL_CHAR_MULTIPLIER = 1.15
NEWLINE_MULTIPLIER = 1.05

# Checked in order; the first matching content type wins.
_CONTENT_TYPES: tuple[tuple[str, re.Pattern, float], ...] = (
    ("constitutional", re.compile(r"constitution|amendment|article|fundamental|doctrine|judicial|parliament", re.I), 1.2),
    ("academic", re.compile(r"research|analy|study|hypothesis|literature|findings", re.I), 1.15),
    ("creative", re.compile(r"imagin|creat|design|innovat|brainstorm", re.I), 1.1),
)
_STANDARD_MULTIPLIER = 1.0

_PUNCTUATION = re.compile(r"[.,;:!?'\"()\[\]-]")
_SPECIAL = re.compile(r"[{}<>@#$%^&*+=|\\/~`_]")


@dataclass(frozen=True)
class TokenEstimate:
    estimated: int
    words: int
    characters: int
    content_type: str
    has_punctuation: bool = False
    has_special_chars: bool = False
    has_newlines: bool = False


@dataclass
class MessageTokenAnalysis:
    total_messages: int
    total_estimated_tokens: int
    content_distribution: dict[str, int] = field(default_factory=dict)
    per_message: list[TokenEstimate] = field(default_factory=list)


def content_type(text: str) -> str:
    for name, pattern, _ in _CONTENT_TYPES:
        if pattern.search(text):
            return name
    return "standard"


def estimate_tokens(text: str | None) -> TokenEstimate:
    """Estimate the token count of text. Empty or None input estimates to zero."""
    if not text:
        return TokenEstimate(estimated=0, words=0, characters=0, content_type="standard")

    words = len(text.split())
    estimate = words / WORDS_PER_TOKEN
    has_punctuation = bool(_PUNCTUATION.search(text))
    has_special = bool(_SPECIAL.search(text))
    has_newlines = "\n" in text
    if has_punctuation:
        estimate *= PUNCTUATION_MULTIPLIER
    if has_special:
        estimate *= SPECIAL_CHAR_MULTIPLIER
    if has_newlines:
        estimate *= NEWLINE_MULTIPLIER

    kind = content_type(text)
    multiplier = next((m for name, _, m in _CONTENT_TYPES if name == kind), _STANDARD_MULTIPLIER)
    return TokenEstimate(
        estimated=math.ceil(estimate * multiplier),
        words=words,
        characters=len(text),
        content_type=kind,
        has_punctuation=has_punctuation,
        has_special_chars=has_special,
        has_newlines=has_newlines,
    )


def analyze_messages(messages: Sequence[PromptMessage]) -> MessageTokenAnalysis:
    per_message = [estimate_tokens(m.content) for m in messages]
    distribution = {"constitutional": 0, "academic": 0, "creative": 0, "standard": 0}
    for est in per_message:
        distribution[est.content_type] += 1
    return MessageTokenAnalysis(
        total_messages=len(messages),
        total_estimated_tokens=sum(e.estimated for e in per_message),
        content_distribution=distribution,
        per_message=per_message,
    )


def efficiency(usage: TokenUsage | None) -> float | None:
    """Output tokens per input token, or None when usage is unknown or empty."""
    if usage is None or usage.input <= 0:
        return None
    return usage.output / usage.input
