"""Query complexity classification: word count plus legal, multi-concept and creative term sets."""

import re

from civicscoach.models import ComplexityProfile

_COMPLEX_TERMS = re.compile(r"\b(doctrine|jurisdiction|constitutional|amendment|fundamental)", re.IGNORECASE)
_MULTI_CONCEPT = re.compile(r"\b(and|or|versus|compared|difference)\b", re.IGNORECASE)
_CREATIVE_TERMS = re.compile(r"\b(imagine|create|design|innovate|brainstorm)", re.IGNORECASE)

_COMPLEX_WORD_COUNT = 15
_MODERATE_WORD_COUNT = 8

SIMPLE = "simple"
MODERATE = "moderate"
COMPLEX = "complex"


def analyze(query: str | None) -> ComplexityProfile:
    """Classify a query. Never raises; empty input is simple with all flags off."""
    if not query or not query.strip():
        return ComplexityProfile(level=SIMPLE)

    word_count = len(query.split())
    has_complex_terms = bool(_COMPLEX_TERMS.search(query))
    has_multiple_concepts = bool(_MULTI_CONCEPT.search(query))
    has_creative_elements = bool(_CREATIVE_TERMS.search(query))

    if word_count > _COMPLEX_WORD_COUNT or has_complex_terms or has_multiple_concepts:
        level = COMPLEX
    elif word_count > _MODERATE_WORD_COUNT:
        level = MODERATE
    else:
        level = SIMPLE

    return ComplexityProfile(
        level=level,
        has_complex_terms=has_complex_terms,
        has_multiple_concepts=has_multiple_concepts,
        has_creative_elements=has_creative_elements,
        word_count=word_count,
    )
