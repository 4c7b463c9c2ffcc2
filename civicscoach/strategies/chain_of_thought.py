"""Chain-of-thought prompting: hidden reasoning, worked example, evidence block."""

from collections.abc import Sequence

from civicscoach.models import PromptBundle, PromptMessage, PromptMetadata, ScoredChunk
from civicscoach.strategies.base import (
    REASONING_PERMITTED,
    ROLE_PREAMBLE,
    PromptOptions,
    PromptStrategy,
    format_chunks,
)

_EXAMPLE_INPUT = 'EXAMPLE_INPUT: "Are Money Bills defined by the Constitution or by the Speaker?"'
_EXAMPLE_OUTPUT = """EXAMPLE_OUTPUT:
{
  "stance":"Money bills are defined by Article 110 and interpreted by Parliament's Speaker...",
  "counterStance":"There have been controversies over acceptance by Parliament and role of Speaker...",
  "citations":[{"id":"Article110","source":"Constitution","snippet":"Article 110 defines money bills"}],
  "quiz":[{"q":"Which article defines Money Bills?","options":["Article 110","Article 112"],"answerIndex":0}],
  "rationale_1line":"Based on Article 110 and SC interpretations."
}"""


class ChainOfThoughtStrategy(PromptStrategy):
    name = "chain-of-thought"

    def build_messages(
        self,
        query: str,
        proficiency: str,
        chunks: Sequence[ScoredChunk],
        options: PromptOptions,
    ) -> PromptBundle:
        system = "\n".join([
            ROLE_PREAMBLE,
            "TASK: Produce a JSON object with fields: stance, counterStance, citations[], quiz[].",
            "FORMAT: Return ONLY valid JSON (no extra commentary).",
            f"CONSTRAINTS: {REASONING_PERMITTED} Use the provided retrieved text chunks as "
            f"source-of-truth. Provide at least {options.min_citations} citations where possible.",
            "Stop token for internal scratchpad: </reasoning>",
        ])

        user = "\n".join([
            f"AUDIENCE: {proficiency}",
            f"TOPIC: {query}",
            "",
            "RETRIEVED_CHUNKS:",
            format_chunks(chunks),
            "",
            "INSTRUCTIONS:",
            "- Produce JSON with keys: stance, counterStance, citations (array with metadata like "
            "{id,source,snippet}), quiz (1 item).",
            "- Keep stance & counterStance concise (max ~150 words each).",
            '- Use only the retrieved chunks as facts; if claims are not supported, mark citation as "unsourced": true.',
            "- Return ONLY JSON. Do not reveal the chain-of-thought. End with a newline.",
        ])

        messages = [PromptMessage("user", system)]
        features = ["reasoning_permitted", "evidence_grounded"]
        if options.include_examples:
            messages.append(PromptMessage("user", _EXAMPLE_INPUT))
            messages.append(PromptMessage("assistant", _EXAMPLE_OUTPUT))
            features.append("example_based")
        messages.append(PromptMessage("user", user))

        return PromptBundle(
            messages=tuple(messages),
            metadata=PromptMetadata(
                strategy_name=self.name,
                task_description="Generate an evidence-backed debate with hidden step-by-step reasoning",
                output_format="JSON with stance, counterStance, citations[], quiz[]",
                constraints=(
                    "Use retrieved chunks as source-of-truth",
                    f"Provide at least {options.min_citations} citations",
                    "Do not reveal the chain-of-thought",
                ),
                features=tuple(features),
                details={"examples": options.include_examples, "minCitations": options.min_citations},
            ),
        )
