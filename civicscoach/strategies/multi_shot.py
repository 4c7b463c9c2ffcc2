"""Multi-shot prompting: several worked examples chosen by proficiency and query overlap.

Examples live in a small database keyed by proficiency. For each request the
selector scores the examples at the user's level by how many query words they
share and keeps the best ``example_count``. The output fields beyond the debate
core come from the zero-shot task definitions so every strategy asks for the
same shape per task type.
"""

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from civicscoach.models import PromptBundle, PromptMessage, PromptMetadata, ScoredChunk
from civicscoach.strategies.base import PromptOptions, PromptStrategy, format_chunks
from civicscoach.strategies.zero_shot import ZeroShotStrategy

_SYSTEM = """You are CivicsCoach, an expert AI assistant specializing in Indian Constitutional Law and Political Science. You have comprehensive knowledge of constitutional principles, legal doctrines, and political systems.

Your task is to generate high-quality, accurate responses based on the examples provided and your constitutional knowledge. Study the examples carefully to understand the expected format, style, and level of detail."""

_NO_CHUNKS = "No specific citations provided. Use your constitutional knowledge to provide accurate information."

_FEATURES = (
    "multiple_examples_provided",
    "example_based_learning",
    "format_guidance",
    "style_adaptation",
    "quality_benchmarking",
)


@dataclass(frozen=True)
class ShotExample:
    query: str
    response: Mapping[str, Any]


def _debate(stance: str, counter: str, cite: tuple[str, str, str], q: str, options: list[str], answer: int):
    cid, source, snippet = cite
    return {
        "stance": stance,
        "counterStance": counter,
        "citations": [{"id": cid, "source": source, "snippet": snippet}],
        "quiz": [{"q": q, "options": options, "answerIndex": answer}],
    }


EXAMPLE_DATABASE: dict[str, tuple[ShotExample, ...]] = {
    "beginner": (
        ShotExample(
            "What is the Constitution of India?",
            _debate(
                "The Constitution of India is the supreme law that sets up the framework for governance, "
                "fundamental rights and duties. It was adopted on 26th January 1950.",
                "Its length and complexity (the longest written constitution) can make it hard for "
                "ordinary citizens to understand and use their rights.",
                ("constitution_basic", "Constitution of India",
                 "The Constitution establishes the framework for governance and fundamental rights"),
                "When did the Constitution of India come into force?",
                ["26th January 1950", "15th August 1947", "26th November 1949", "26th January 1949"],
                0,
            ),
        ),
        ShotExample(
            "What are Fundamental Rights?",
            _debate(
                "Fundamental Rights are basic rights guaranteed to all citizens, including equality, "
                "freedom, and the right to constitutional remedies.",
                "They are not absolute and some can be suspended during an emergency, which critics say "
                "weakens them exactly when they matter most.",
                ("fundamental_rights", "Part III, Constitution of India",
                 "Fundamental Rights are guaranteed to all citizens"),
                "Which part of the Constitution deals with Fundamental Rights?",
                ["Part I", "Part II", "Part III", "Part IV"],
                2,
            ),
        ),
    ),
    "intermediate": (
        ShotExample(
            "How does the Indian Parliament work?",
            _debate(
                "Parliament has two houses, the Lok Sabha and the Rajya Sabha, and both must pass a bill "
                "before it becomes law, except for Money Bills.",
                "Frequent disruptions, low attendance and ruling-party dominance can limit meaningful "
                "debate and opposition participation.",
                ("parliament_structure", "Articles 79-122, Constitution of India",
                 "Parliament consists of the President and two Houses"),
                "Which house has the final say on a Money Bill?",
                ["Rajya Sabha", "Lok Sabha", "Joint sitting", "President"],
                1,
            ),
        ),
        ShotExample(
            "What is the role of the President in Indian democracy?",
            _debate(
                "The President is the constitutional head of state who appoints the Prime Minister and "
                "assents to bills, with discretion when no party has a clear majority.",
                "Real power lies with the Prime Minister and Council of Ministers, which makes the "
                "presidency largely symbolic.",
                ("president_powers", "Articles 52-78, Constitution of India",
                 "The President has specific constitutional powers and discretionary authority"),
                "Who appoints the Prime Minister of India?",
                ["Lok Sabha", "Rajya Sabha", "President", "Supreme Court"],
                2,
            ),
        ),
    ),
    "advanced": (
        ShotExample(
            "Explain the Basic Structure Doctrine and its implications for constitutional amendments",
            _debate(
                "Kesavananda Bharati v. State of Kerala (1973) held that Parliament may amend the "
                "Constitution under Article 368 but cannot alter its basic structure.",
                "The doctrine is criticised as vague, since the Court has never fully defined the basic "
                "structure, which leaves wide judicial discretion.",
                ("basic_structure_doctrine", "Kesavananda Bharati v. State of Kerala (1973)",
                 "The Basic Structure Doctrine limits Parliament's amending power"),
                "In which case was the Basic Structure Doctrine established?",
                ["Golak Nath v. State of Punjab", "Kesavananda Bharati v. State of Kerala",
                 "Minerva Mills v. Union of India", "S.R. Bommai v. Union of India"],
                1,
            ),
        ),
        ShotExample(
            "Analyze the federal structure of India and its evolution",
            _debate(
                "India is quasi-federal with a unitary bias: the Seventh Schedule divides subjects into "
                "Union, State and Concurrent lists, and Union law prevails on concurrent matters.",
                "States have limited financial autonomy, and Article 356 has been used to interfere in "
                "state governments, undermining true federalism.",
                ("federal_structure", "Seventh Schedule, Constitution of India",
                 "Division of powers between Union and States"),
                "Which schedule divides subjects between the Union and the States?",
                ["Fifth Schedule", "Sixth Schedule", "Seventh Schedule", "Eighth Schedule"],
                2,
            ),
        ),
    ),
}


def _words(text: str) -> set[str]:
    return set(text.lower().split())


def select_examples(
    proficiency: str,
    query: str,
    count: int = 2,
    database: Mapping[str, Sequence[ShotExample]] = EXAMPLE_DATABASE,
) -> list[ShotExample]:
    """Best-matching examples at the user's level; unknown levels use intermediate.

    Ties keep database order, so the result is deterministic.
    """
    pool = database.get(proficiency) or database.get("intermediate", ())
    query_words = _words(query)
    ranked = sorted(pool, key=lambda ex: len(query_words & _words(ex.query)), reverse=True)
    return ranked[:count]


def format_examples(examples: Sequence[ShotExample]) -> str:
    return "\n\n".join(
        f'EXAMPLE {i + 1}:\nQuery: "{ex.query}"\nResponse: {json.dumps(ex.response, indent=2, ensure_ascii=False)}'
        for i, ex in enumerate(examples)
    )


class MultiShotStrategy(PromptStrategy):
    name = "multi-shot"

    def __init__(self, example_count: int = 2) -> None:
        self._example_count = example_count
        self._tasks = ZeroShotStrategy()

    def build_messages(
        self,
        query: str,
        proficiency: str,
        chunks: Sequence[ScoredChunk],
        options: PromptOptions,
    ) -> PromptBundle:
        task = self._tasks.task_definition(options.task_type)
        count = self._example_count if options.include_examples else 0
        examples = select_examples(proficiency, query, count)

        user = f"""TASK: {task.description}, using multi-shot prompting.

{task.heading}: {query}
USER PROFICIENCY: {proficiency}
CITATIONS TO USE:
{format_chunks(chunks, limit=300, empty=_NO_CHUNKS)}

EXAMPLES TO FOLLOW:
{format_examples(examples) or "None for this request."}

REQUIRED OUTPUT FORMAT (JSON):
{{
  "stance": "Main argument supporting the topic (150 words max)",
  "counterStance": "Opposing viewpoint or counter-argument (150 words max)",
  "citations": [{{"id": "unique_identifier", "source": "source_name", "snippet": "relevant_text_excerpt"}}],
  "quiz": [{{"q": "Multiple choice question testing understanding", "options": ["A", "B", "C", "D"], "answerIndex": 0}}],
  {task.extra_fields}
}}

INSTRUCTIONS:
1. Study the provided examples to understand the expected format and style
2. Use ONLY the provided citations as factual sources
3. Provide at least {options.min_citations} citations where possible
4. Generate balanced arguments without bias
5. Adapt language complexity to match user proficiency level
6. Return ONLY valid JSON - no additional commentary"""

        messages = [PromptMessage("user", _SYSTEM), PromptMessage("user", user)]
        if options.additional_context:
            messages.append(PromptMessage("user", f"ADDITIONAL CONTEXT: {options.additional_context}"))

        features = _FEATURES if examples else ("format_guidance",)
        return PromptBundle(
            messages=tuple(messages),
            metadata=PromptMetadata(
                strategy_name=self.name,
                task_description=task.description,
                output_format=task.output_format,
                constraints=task.constraints,
                features=features,
                details={
                    "taskType": task.key,
                    "proficiency": proficiency,
                    "examplesUsed": len(examples),
                    "exampleQueries": [ex.query for ex in examples],
                    "promptLength": len(user),
                },
            ),
        )
