"""Zero-shot prompting: self-contained instructions per task type, no examples."""

from collections.abc import Sequence
from dataclasses import dataclass

from civicscoach.models import PromptBundle, PromptMessage, PromptMetadata, ScoredChunk
from civicscoach.strategies.base import PromptOptions, PromptStrategy, format_chunks

_SYSTEM = """You are CivicsCoach, an expert AI assistant specializing in Indian Constitutional Law and Political Science. You have comprehensive knowledge of constitutional principles, legal doctrines, and political systems.

Your capabilities include:
- Analyzing constitutional concepts and legal principles
- Generating balanced debates and arguments
- Explaining complex legal concepts in accessible terms
- Comparing different constitutional doctrines
- Providing evidence-based analysis using constitutional sources

You can perform these tasks without specific examples, relying on your pre-trained knowledge of constitutional law."""

_NO_CHUNKS = "No specific citations provided. Use your constitutional knowledge to provide accurate information."

_FEATURES = (
    "no_examples_provided",
    "self_contained_instructions",
    "pre_trained_knowledge_utilization",
    "structured_output_format",
)


@dataclass(frozen=True)
class TaskDefinition:
    key: str
    description: str
    output_format: str
    constraints: tuple[str, ...]
    heading: str            # what the topic line is called in the prompt
    extra_fields: str       # task-specific JSON fields beyond the debate core


_TASKS: dict[str, TaskDefinition] = {
    "debate": TaskDefinition(
        key="debate",
        description="Generate a structured debate with stance, counter-stance, citations, and quiz",
        output_format="JSON with stance, counterStance, citations[], quiz[]",
        constraints=(
            "Use retrieved chunks as source-of-truth",
            "Provide balanced arguments",
            "Include relevant citations",
            "Create educational quiz questions",
        ),
        heading="TOPIC",
        extra_fields='"keyTakeaways": ["Key point 1", "Key point 2", "Key point 3"]',
    ),
    "analysis": TaskDefinition(
        key="analysis",
        description="Analyze constitutional concepts and provide detailed explanations",
        output_format="JSON debate core plus constitutionalBasis, keyPrinciples, implications",
        constraints=(
            "Focus on constitutional principles",
            "Explain implications clearly",
            "Provide historical context where relevant",
            "Use accessible language for the specified proficiency level",
        ),
        heading="CONCEPT",
        extra_fields=(
            '"constitutionalBasis": "Articles and provisions that establish this concept",\n'
            '  "keyPrinciples": ["Principle 1", "Principle 2"],\n'
            '  "implications": "Practical implications for democracy and governance"'
        ),
    ),
    "comparison": TaskDefinition(
        key="comparison",
        description="Compare and contrast different constitutional concepts or doctrines",
        output_format="JSON debate core plus similarities, differences, conclusion",
        constraints=(
            "Identify key similarities and differences",
            "Provide balanced analysis",
            "Include relevant constitutional references",
            "Draw meaningful conclusions",
        ),
        heading="CONCEPTS TO COMPARE",
        extra_fields=(
            '"similarities": ["Similarity 1", "Similarity 2"],\n'
            '  "differences": ["Difference 1", "Difference 2"],\n'
            '  "conclusion": "Synthesized conclusion about the comparison"'
        ),
    ),
    "explanation": TaskDefinition(
        key="explanation",
        description="Explain complex constitutional concepts in simple terms",
        output_format="JSON debate core plus simpleDefinition, examples, commonMisconceptions",
        constraints=(
            "Use simple, clear language",
            "Provide concrete examples",
            "Break down complex concepts",
            "Include practical implications",
        ),
        heading="CONCEPT TO EXPLAIN",
        extra_fields=(
            '"simpleDefinition": "One-sentence definition in simple terms",\n'
            '  "examples": [{"scenario": "Real-world scenario", "explanation": "How the concept applies"}],\n'
            '  "commonMisconceptions": ["Misconception 1", "Misconception 2"]'
        ),
    ),
    "quiz": TaskDefinition(
        key="quiz",
        description="Create an assessment on a constitutional topic with supporting arguments",
        output_format="JSON debate core with at least three quiz items",
        constraints=(
            "Write at least three multiple choice questions",
            "Ground every question in the provided citations",
            "Give an explanation for each correct answer",
            "Match difficulty to the proficiency level",
        ),
        heading="QUIZ TOPIC",
        extra_fields='"difficulty": "beginner | intermediate | advanced"',
    ),
}


class ZeroShotStrategy(PromptStrategy):
    name = "zero-shot"

    def task_definition(self, task_type: str) -> TaskDefinition:
        """Definition for task_type; unknown types use the debate definition."""
        return _TASKS.get(task_type, _TASKS["debate"])

    def build_messages(
        self,
        query: str,
        proficiency: str,
        chunks: Sequence[ScoredChunk],
        options: PromptOptions,
    ) -> PromptBundle:
        task = self.task_definition(options.task_type)

        instructions = "\n".join(f"{i + 1}. {c}" for i, c in enumerate(task.constraints))
        user = f"""TASK: {task.description}.

{task.heading}: {query}
USER PROFICIENCY: {proficiency}
CITATIONS TO USE:
{format_chunks(chunks, limit=300, empty=_NO_CHUNKS)}

REQUIRED OUTPUT FORMAT (JSON):
{{
  "stance": "Main argument on the topic (150 words max)",
  "counterStance": "Opposing viewpoint or counter-argument (150 words max)",
  "citations": [{{"id": "unique_identifier", "source": "source_name", "snippet": "relevant_text_excerpt"}}],
  "quiz": [{{"q": "Multiple choice question", "options": ["A", "B", "C", "D"], "answerIndex": 0, "explanation": "Why this is correct"}}],
  {task.extra_fields}
}}

INSTRUCTIONS:
{instructions}
{len(task.constraints) + 1}. Return ONLY valid JSON - no additional commentary"""

        messages = [PromptMessage("user", _SYSTEM), PromptMessage("user", user)]
        if options.additional_context:
            messages.append(PromptMessage("user", f"ADDITIONAL CONTEXT: {options.additional_context}"))

        return PromptBundle(
            messages=tuple(messages),
            metadata=PromptMetadata(
                strategy_name=self.name,
                task_description=task.description,
                output_format=task.output_format,
                constraints=task.constraints,
                features=_FEATURES,
                details={"taskType": task.key, "promptLength": len(user)},
            ),
        )
