"""Abstract base for all prompting strategies."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from civicscoach.models import ComplexityProfile, PromptBundle, ScoredChunk

# Sentence granting hidden reasoning; CoT suppression substitutes it verbatim.
REASONING_PERMITTED = (
    "You MAY use internal step-by-step reasoning to improve accuracy, "
    "BUT DO NOT reveal the chain-of-thought."
)
REASONING_SUPPRESSED = "Do NOT use internal step-by-step reasoning. Answer directly."

ROLE_PREAMBLE = "ROLE: You are CivicsCoach — an evidence-first debate coach for Indian Polity."

DEBATE_JSON_SCHEMA = """{
  "stance": "Main argument (150 words max)",
  "counterStance": "Opposing viewpoint (150 words max)",
  "citations": [{"id": "unique_id", "source": "source_name", "snippet": "relevant_text"}],
  "quiz": [{"q": "question", "options": ["A", "B", "C", "D"], "answerIndex": 0}],
  "rationale_1line": "Brief explanation of reasoning"
}"""


@dataclass(frozen=True)
class PromptOptions:
    task_type: str = "debate"
    context: str = "constitutionalEducation"
    complexity: ComplexityProfile = field(default_factory=lambda: ComplexityProfile(level="moderate"))
    min_citations: int = 2
    include_examples: bool = True
    additional_context: str | None = None
    previous_responses: tuple[Any, ...] = ()


def format_chunks(chunks: Sequence[ScoredChunk], limit: int = 500, empty: str = "") -> str:
    """Render ranked chunks as a numbered evidence block."""
    if not chunks:
        return empty
    return "\n\n".join(
        f"{i + 1}) [{c.id or f'chunk{i}'}] {c.text[:limit]}" for i, c in enumerate(chunks)
    )


class PromptStrategy(ABC):
    """Builds the ordered message list for one prompting technique."""

    name: str = ""

    @abstractmethod
    def build_messages(
        self,
        query: str,
        proficiency: str,
        chunks: Sequence[ScoredChunk],
        options: PromptOptions,
    ) -> PromptBundle:
        """Build messages for the generator.

        Returns:
            PromptBundle whose first message is the instruction message.
        """
        ...
