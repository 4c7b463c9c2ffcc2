"""Dynamic prompting: instructions scale with query complexity and proficiency.

The complexity level and proficiency pick a reasoning-depth tier and an output
format; the tier decides how many worked examples are attached and which extra
instructions are appended. Previous responses, when supplied, are summarised so
follow-up requests stay consistent.
"""

from collections.abc import Sequence
from typing import Any

from civicscoach.models import PromptBundle, PromptMessage, PromptMetadata, ScoredChunk
from civicscoach.strategies.base import (
    DEBATE_JSON_SCHEMA,
    ROLE_PREAMBLE,
    PromptOptions,
    PromptStrategy,
    format_chunks,
)

_DEPTH = {
    "simple": {"beginner": "minimal", "intermediate": "basic", "advanced": "detailed"},
    "moderate": {"beginner": "basic", "intermediate": "detailed", "advanced": "comprehensive"},
    "complex": {"beginner": "detailed", "intermediate": "comprehensive", "advanced": "exhaustive"},
}

# Number of worked examples attached per depth tier.
_EXAMPLE_COUNT = {"minimal": 2, "basic": 1, "detailed": 1, "comprehensive": 0, "exhaustive": 0}

_EXAMPLES = {
    "simple": [
        ("What is the Constitution of India?",
         "The Constitution of India is the supreme law of the land..."),
        ("What are Fundamental Rights?",
         "Fundamental Rights are basic human rights guaranteed by Part III of the Constitution..."),
    ],
    "moderate": [
        ("How does the Indian Parliament work?",
         "The Indian Parliament consists of two houses: Lok Sabha and Rajya Sabha..."),
        ("What is the role of the President in Indian democracy?",
         "The President is the ceremonial head of state with specific constitutional powers..."),
    ],
    "complex": [
        ("What is the Basic Structure Doctrine and its implications?",
         "The Basic Structure Doctrine limits Parliament's power to amend the Constitution..."),
        ("How does the Constitution balance individual rights with collective interests?",
         "The Constitution balances rights through reasonable restrictions and public interest clauses..."),
    ],
}

_FORMAT_INSTRUCTIONS = {
    "simplified": "FORMAT_INSTRUCTIONS: Use bullet points and simple language. Avoid complex legal terminology.",
    "academic": "FORMAT_INSTRUCTIONS: Use formal academic language with proper citations and nuanced analysis.",
}

_PREVIOUS_LIMIT = 3


def reasoning_depth(level: str, proficiency: str) -> str:
    return _DEPTH.get(level, _DEPTH["moderate"]).get(proficiency, "detailed")


def output_format(level: str, proficiency: str) -> str:
    if level == "simple" and proficiency == "beginner":
        return "simplified"
    if level == "complex" and proficiency == "advanced":
        return "academic"
    return "standard"


def _additional_instructions(level: str, proficiency: str, query: str) -> list[str]:
    instructions: list[str] = []
    if level == "simple" and proficiency == "beginner":
        instructions.append("Use simple language and avoid complex legal jargon")
        instructions.append("Provide concrete examples where possible")
    elif level == "complex" and proficiency == "advanced":
        instructions.append("Include nuanced perspectives and counter-arguments")
        instructions.append("Reference specific legal precedents and scholarly opinions")
    lowered = query.lower()
    if "?" in query and ("why" in lowered or "how" in lowered):
        instructions.append("Focus on explaining the reasoning behind the concepts")
    return instructions


def _summarise_previous(previous: Sequence[Any]) -> str:
    lines = []
    for i, item in enumerate(previous[-_PREVIOUS_LIMIT:]):
        if isinstance(item, dict):
            text = item.get("stance") or item.get("content") or item.get("text") or ""
        else:
            text = str(item)
        text = " ".join(str(text).split())
        if text:
            lines.append(f"- Earlier response {i + 1}: {text[:200]}")
    return "\n".join(lines)


class DynamicStrategy(PromptStrategy):
    name = "dynamic"

    def build_messages(
        self,
        query: str,
        proficiency: str,
        chunks: Sequence[ScoredChunk],
        options: PromptOptions,
    ) -> PromptBundle:
        level = options.complexity.level
        depth = reasoning_depth(level, proficiency)
        fmt = output_format(level, proficiency)
        extra = _additional_instructions(level, proficiency, query)
        examples = _EXAMPLES.get(level, _EXAMPLES["moderate"])[: _EXAMPLE_COUNT[depth]]
        features = ["depth_scaled"]

        sections = [
            ROLE_PREAMBLE,
            "TASK: Produce a JSON object with fields: stance, counterStance, citations[], quiz[].",
            "FORMAT: Return ONLY valid JSON (no extra commentary).",
            "CONSTRAINTS:\n"
            "- Use the provided retrieved text chunks as source-of-truth\n"
            f"- Provide at least {options.min_citations} citations where possible\n"
            f"- Adapt your response complexity to match the user's proficiency level: {proficiency}\n"
            f"- Query complexity detected: {level}",
            f"OUTPUT_STRUCTURE:\n{DEBATE_JSON_SCHEMA}",
            f"RETRIEVED_CHUNKS:\n{format_chunks(chunks)}",
        ]
        if depth in ("comprehensive", "exhaustive"):
            sections.append(
                "REASONING_INSTRUCTIONS: Provide step-by-step analysis with intermediate conclusions."
            )
        if fmt in _FORMAT_INSTRUCTIONS:
            sections.append(_FORMAT_INSTRUCTIONS[fmt])
            features.append("format_guided")
        if examples:
            sections.append(
                "RELEVANT_EXAMPLES:\n" + "\n".join(f'EXAMPLE: "{q}" → {a}' for q, a in examples)
            )
            features.append("example_based")
        if extra:
            sections.append("ADDITIONAL_INSTRUCTIONS:\n" + "\n".join(extra))
            features.append("instruction_augmented")
        continuity = _summarise_previous(options.previous_responses)
        if continuity:
            sections.append(
                "CONTINUITY: Stay consistent with, and do not repeat, these earlier answers:\n" + continuity
            )
            features.append("continuity")
        if options.additional_context:
            sections.append(f"ADDITIONAL_CONTEXT: {options.additional_context}")

        messages = [PromptMessage("user", "\n\n".join(sections))]
        for q, a in examples:
            messages.append(PromptMessage("user", q))
            messages.append(PromptMessage("assistant", a))
        messages.append(
            PromptMessage(
                "user",
                f"QUERY: {query}\n\nPROFICIENCY: {proficiency}\n"
                f"COMPLEXITY: {level}\nREASONING_DEPTH: {depth}",
            )
        )

        return PromptBundle(
            messages=tuple(messages),
            metadata=PromptMetadata(
                strategy_name=self.name,
                task_description=f"Generate a debate with {depth} reasoning for a {proficiency} audience",
                output_format=fmt,
                constraints=(
                    "Use retrieved chunks as source-of-truth",
                    f"Provide at least {options.min_citations} citations",
                    *extra,
                ),
                features=tuple(features),
                details={"reasoningDepth": depth, "complexity": level, "examples": len(examples)},
            ),
        )
