"""One-shot prompting: a single worked example per task type fixes the output shape."""

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from civicscoach.models import PromptBundle, PromptMessage, PromptMetadata, ScoredChunk
from civicscoach.strategies.base import PromptOptions, PromptStrategy, format_chunks

_SYSTEM = """You are CivicsCoach, an expert AI assistant specializing in Indian Constitutional Law and Political Science. You have comprehensive knowledge of constitutional principles, legal doctrines, and political systems.

Your capabilities include:
- Analyzing constitutional concepts and legal principles
- Generating balanced debates and arguments
- Explaining complex legal concepts in accessible terms
- Comparing different constitutional doctrines
- Providing evidence-based analysis using constitutional sources

You will be provided with ONE example to demonstrate the expected output format and style. Use this example to understand the required structure, depth, and approach for your response."""

_NO_CHUNKS = "No specific citations provided. Use your constitutional knowledge to provide accurate information."

_FEATURES = (
    "single_example_provided",
    "format_demonstration",
    "structured_output_format",
)

_ARTICLE_368 = {
    "id": "article368",
    "source": "Constitution of India, Article 368",
    "snippet": "Article 368 provides the procedure for amending the Constitution, requiring special "
               "majorities in both houses of Parliament.",
}


@dataclass(frozen=True)
class WorkedExample:
    task_type: str
    verb: str               # "debate", "analysis", ... as used in the prompt headings
    heading: str            # what the topic line is called
    topic: str
    output: dict[str, Any]
    constraints: tuple[str, ...]


_EXAMPLES: dict[str, WorkedExample] = {
    "debate": WorkedExample(
        task_type="debate",
        verb="debate",
        heading="TOPIC",
        topic="Should the President have veto power over constitutional amendments?",
        output={
            "stance": "The President should have veto power over constitutional amendments to serve as a "
                      "check on Parliament's power. This would prevent hasty constitutional changes and "
                      "ensure amendments reflect broad consensus.",
            "counterStance": "Giving the President veto power over constitutional amendments could create "
                             "unnecessary delays and political gridlock. Amendments already require special "
                             "majorities, so additional executive oversight may be redundant.",
            "citations": [
                dict(_ARTICLE_368, relevance="Shows the current amendment procedure and the absence of a "
                                             "presidential veto."),
            ],
            "quiz": [
                {
                    "q": "What majority is required in Parliament to pass a constitutional amendment?",
                    "options": ["Simple majority", "Two-thirds majority", "Three-fourths majority",
                                "Unanimous consent"],
                    "answerIndex": 1,
                    "explanation": "A two-thirds majority of members present and voting in each house.",
                }
            ],
            "keyTakeaways": [
                "Constitutional amendments currently require only parliamentary approval",
                "The President has no veto power over constitutional amendments",
                "Special majorities provide some protection against hasty changes",
            ],
        },
        constraints=(
            "Use retrieved chunks as source-of-truth",
            "Provide balanced arguments",
            "Include relevant citations",
            "Create educational quiz questions",
            "Follow the exact format shown in the example",
        ),
    ),
    "analysis": WorkedExample(
        task_type="analysis",
        verb="analysis",
        heading="CONCEPT",
        topic="Fundamental Rights vs Directive Principles",
        output={
            "stance": "Fundamental Rights are justiciable guarantees of individual liberty and deserve "
                      "priority, because an unenforceable promise protects no one.",
            "counterStance": "Directive Principles carry the Constitution's social and economic vision; "
                             "courts now read rights in harmony with them rather than above them.",
            "citations": [
                {"id": "part3", "source": "Constitution of India, Part III",
                 "snippet": "Articles 12-35 set out the enforceable Fundamental Rights."},
                {"id": "part4", "source": "Constitution of India, Part IV",
                 "snippet": "Articles 36-51 set out the non-justiciable Directive Principles."},
            ],
            "quiz": [
                {
                    "q": "Which Part of the Constitution contains the Directive Principles?",
                    "options": ["Part III", "Part IV", "Part IVA", "Part V"],
                    "answerIndex": 1,
                }
            ],
            "constitutionalBasis": "Part III (Articles 12-35) and Part IV (Articles 36-51).",
            "keyPrinciples": [
                "Fundamental Rights are enforceable in courts",
                "Directive Principles guide state policy but are not legally binding",
                "Both aim to establish a just and equitable society",
            ],
            "implications": "This balance allows progressive social reform while keeping individual "
                            "liberty protections.",
        },
        constraints=(
            "Focus on constitutional principles",
            "Explain implications clearly",
            "Provide historical context where relevant",
            "Use accessible language for the specified proficiency level",
            "Match the structure and depth of the provided example",
        ),
    ),
    "comparison": WorkedExample(
        task_type="comparison",
        verb="comparison",
        heading="CONCEPTS TO COMPARE",
        topic="Parliamentary vs Presidential Systems",
        output={
            "stance": "India's parliamentary system keeps the executive answerable to the legislature "
                      "every day it holds office.",
            "counterStance": "A presidential system offers fixed terms and a clearer separation of powers, "
                             "trading day-to-day accountability for stability.",
            "citations": [
                {"id": "art74_75", "source": "Constitution of India, Articles 74-75",
                 "snippet": "The Council of Ministers with the Prime Minister at the head aids and advises "
                            "the President."},
            ],
            "quiz": [
                {
                    "q": "To which house is the Council of Ministers collectively responsible?",
                    "options": ["Rajya Sabha", "Lok Sabha", "Both houses", "The President"],
                    "answerIndex": 1,
                }
            ],
            "similarities": ["Both aim for democratic governance", "Both have checks and balances"],
            "differences": ["Accountability mechanisms differ", "Election of the executive differs"],
            "conclusion": "India's parliamentary system balances accountability with governance "
                          "effectiveness, though it needs strong institutional safeguards.",
        },
        constraints=(
            "Identify key similarities and differences",
            "Provide balanced analysis",
            "Include relevant constitutional references",
            "Draw meaningful conclusions",
            "Follow the comparison structure shown in the example",
        ),
    ),
    "explanation": WorkedExample(
        task_type="explanation",
        verb="explanation",
        heading="CONCEPT",
        topic="Separation of Powers",
        output={
            "stance": "Separating law-making, enforcement and adjudication keeps any one branch from "
                      "holding all power.",
            "counterStance": "India's Constitution does not separate powers strictly; ministers sit in "
                             "Parliament and the executive can legislate by ordinance.",
            "citations": [
                {"id": "art50", "source": "Constitution of India, Article 50",
                 "snippet": "The State shall take steps to separate the judiciary from the executive."},
            ],
            "quiz": [
                {
                    "q": "Which branch interprets the laws?",
                    "options": ["Legislature", "Executive", "Judiciary", "Election Commission"],
                    "answerIndex": 2,
                }
            ],
            "simpleDefinition": "Dividing government work among separate branches so no one branch has "
                                "all the power.",
            "examples": [
                {"scenario": "Parliament passes a law",
                 "explanation": "The government enforces it and courts settle disputes about it."}
            ],
            "commonMisconceptions": ["The three branches never interact"],
        },
        constraints=(
            "Use simple, clear language",
            "Provide concrete examples",
            "Break down complex concepts",
            "Include practical implications",
            "Match the explanation style and structure of the example",
        ),
    ),
}


def worked_example(task_type: str) -> WorkedExample:
    """Example for task_type; task types without one use the debate example."""
    return _EXAMPLES.get(task_type, _EXAMPLES["debate"])


class OneShotStrategy(PromptStrategy):
    name = "one-shot"

    def build_messages(
        self,
        query: str,
        proficiency: str,
        chunks: Sequence[ScoredChunk],
        options: PromptOptions,
    ) -> PromptBundle:
        example = worked_example(options.task_type)
        instructions = "\n".join(f"- {c}" for c in example.constraints)

        user = f"""TASK: Generate a structured {example.verb} on the following topic using one-shot prompting.

{example.heading}: {query}
USER PROFICIENCY: {proficiency}
CITATIONS TO USE:
{format_chunks(chunks, limit=300, empty=_NO_CHUNKS)}

HERE IS ONE EXAMPLE OF THE EXPECTED OUTPUT FORMAT:

EXAMPLE TOPIC: "{example.topic}"
EXAMPLE OUTPUT:
{json.dumps(example.output, indent=2, ensure_ascii=False)}

NOW GENERATE YOUR RESPONSE FOR THE GIVEN TOPIC:
- Follow the EXACT same structure and format as the example
- Provide at least {options.min_citations} citations where possible
{instructions}
- Adapt language complexity to match user proficiency level
- Return ONLY valid JSON - no additional commentary"""

        messages = [PromptMessage("user", _SYSTEM), PromptMessage("user", user)]
        if options.additional_context:
            messages.append(PromptMessage("user", f"ADDITIONAL CONTEXT: {options.additional_context}"))

        return PromptBundle(
            messages=tuple(messages),
            metadata=PromptMetadata(
                strategy_name=self.name,
                task_description=f"Generate a structured {example.verb} guided by one worked example",
                output_format="JSON matching the example: " + ", ".join(example.output),
                constraints=example.constraints,
                features=_FEATURES,
                details={
                    "taskType": example.task_type,
                    "exampleTopic": example.topic,
                    "promptLength": len(user),
                },
            ),
        )
