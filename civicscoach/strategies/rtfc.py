"""RTFC prompting: role, task, format, context and constraints as separate sections.

The role section is the instruction message. The other four sections are joined
into the user message. The audience block follows the request context, and a
specialization block is appended for beginners, academic research and public
policy requests.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from civicscoach.models import PromptBundle, PromptMessage, PromptMetadata, ScoredChunk
from civicscoach.strategies.base import PromptOptions, PromptStrategy


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


_QUALIFICATIONS = (
    "Expert knowledge of constitutional principles and legal doctrines",
    "Deep understanding of Indian political systems and governance",
    "Experience in constitutional analysis and legal interpretation",
    "Proficiency in political science and democratic theory",
)
_CAPABILITIES = (
    "Analyze constitutional concepts with precision and clarity",
    "Generate balanced debates with evidence-based arguments",
    "Explain complex legal concepts in accessible language",
    "Compare constitutional doctrines and their implications",
    "Create educational content with quiz questions and key takeaways",
)
_PERSONALITY = (
    "Professional and authoritative yet approachable",
    "Balanced and objective in analysis",
    "Respectful of constitutional principles and democratic values",
)

_ROLE = (
    "You are CivicsCoach, an expert AI assistant specializing in Indian Constitutional Law "
    "and Political Science.\n\n"
    f"QUALIFICATIONS:\n{_bullets(_QUALIFICATIONS)}\n\n"
    f"CAPABILITIES:\n{_bullets(_CAPABILITIES)}\n\n"
    f"PERSONALITY:\n{_bullets(_PERSONALITY)}\n\n"
    "Your responses must reflect your expertise and maintain the highest standards of accuracy, "
    "objectivity, and educational value."
)


@dataclass(frozen=True)
class RTFCTask:
    key: str
    name: str
    objective: str
    requirements: tuple[str, ...]
    complexity: str
    expected_outcome: str


@dataclass(frozen=True)
class Audience:
    audience: str
    background: str
    objectives: tuple[str, ...]


_TASKS: dict[str, RTFCTask] = {
    "debate": RTFCTask(
        key="debate",
        name="Structured Constitutional Debate Generation",
        objective="Create a balanced, evidence-based debate on constitutional topics",
        requirements=(
            "Generate opposing viewpoints with equal weight",
            "Support arguments with constitutional citations",
            "Create educational quiz questions",
            "Provide key takeaways for learning",
        ),
        complexity="High - requires balanced analysis and evidence synthesis",
        expected_outcome="Comprehensive debate structure ready for educational use",
    ),
    "analysis": RTFCTask(
        key="analysis",
        name="Constitutional Concept Analysis",
        objective="Provide comprehensive analysis of constitutional concepts",
        requirements=(
            "Define and explain the concept clearly",
            "Provide constitutional basis and references",
            "Include historical context and evolution",
            "Analyze current relevance and implications",
        ),
        complexity="Medium to High - requires depth and breadth of knowledge",
        expected_outcome="Detailed analysis suitable for different proficiency levels",
    ),
    "comparison": RTFCTask(
        key="comparison",
        name="Constitutional Concept Comparison",
        objective="Compare and contrast constitutional concepts systematically",
        requirements=(
            "Identify key similarities and differences",
            "Analyze relative strengths and weaknesses",
            "Provide practical implications",
            "Draw meaningful conclusions",
        ),
        complexity="High - requires analytical thinking and balanced assessment",
        expected_outcome="Clear comparison with actionable insights",
    ),
    "explanation": RTFCTask(
        key="explanation",
        name="Simplified Constitutional Explanation",
        objective="Explain complex constitutional concepts in simple terms",
        requirements=(
            "Use clear, accessible language",
            "Provide concrete examples and analogies",
            "Break down complex ideas into understandable parts",
            "Include practical applications",
        ),
        complexity="Medium - requires simplification without losing accuracy",
        expected_outcome="Clear understanding for target proficiency level",
    ),
    "quiz": RTFCTask(
        key="quiz",
        name="Educational Quiz Generation",
        objective="Create assessment questions to test understanding",
        requirements=(
            "Generate multiple choice questions",
            "Provide correct answers with explanations",
            "Ensure questions test different cognitive levels",
            "Align with learning objectives",
        ),
        complexity="Medium - requires educational design principles",
        expected_outcome="Effective assessment tools for learning evaluation",
    ),
}

_AUDIENCES: dict[str, Audience] = {
    "constitutionalEducation": Audience(
        audience="Students and learners of constitutional law",
        background="Indian constitutional framework and democratic principles",
        objectives=(
            "Understanding constitutional concepts",
            "Learning democratic governance",
            "Developing civic awareness",
            "Building analytical skills",
        ),
    ),
    "academicResearch": Audience(
        audience="Researchers and scholars",
        background="Advanced constitutional law and political science",
        objectives=(
            "Deep analysis of constitutional issues",
            "Critical evaluation of arguments",
            "Contribution to academic discourse",
        ),
    ),
    "publicPolicy": Audience(
        audience="Policy makers and practitioners",
        background="Practical governance and policy implementation",
        objectives=(
            "Understanding policy implications",
            "Evaluating governance effectiveness",
            "Identifying implementation challenges",
        ),
    ),
    "generalPublic": Audience(
        audience="General public and citizens",
        background="Basic understanding of democracy and governance",
        objectives=(
            "Civic education and awareness",
            "Understanding democratic rights",
            "Making informed decisions",
        ),
    ),
}

# (heading, requirements, limitations)
_CONSTRAINTS: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    (
        "LEGAL AND CONSTITUTIONAL CONSTRAINTS",
        (
            "All constitutional references must be accurate",
            "Supreme Court judgments must be correctly cited",
            "Constitutional provisions must be accurately quoted",
        ),
        (
            "Cannot provide legal advice",
            "Cannot predict court decisions",
            "Must acknowledge areas of legal uncertainty",
        ),
    ),
    (
        "EDUCATIONAL STANDARDS",
        (
            "Content must be factually accurate",
            "Complex concepts must be broken down appropriately",
        ),
        (
            "Cannot oversimplify complex legal concepts",
            "Must encourage critical thinking",
        ),
    ),
    (
        "ETHICAL GUIDELINES",
        (
            "Must maintain objectivity and balance",
            "Must avoid political bias or advocacy",
        ),
        (
            "Cannot advocate for specific political positions",
            "Must respect diverse viewpoints",
        ),
    ),
    (
        "TECHNICAL REQUIREMENTS",
        (
            "Output must be in the specified JSON format",
            "All required fields must be present",
            "Citations must be properly formatted",
        ),
        (
            "Cannot generate non-JSON responses",
            "Cannot omit required fields",
        ),
    ),
)

_SPECIALIZATIONS = {
    "beginner": (
        "BEGINNER-FRIENDLY REQUIREMENTS",
        ("Use simple, clear language", "Provide concrete examples",
         "Avoid complex legal jargon", "Focus on fundamental concepts"),
    ),
    "academic": (
        "ACADEMIC REQUIREMENTS",
        ("Maintain scholarly rigor and depth", "Provide detailed citations and references",
         "Demonstrate critical thinking and evaluation"),
    ),
    "policy": (
        "POLICY FOCUS REQUIREMENTS",
        ("Emphasize practical implications", "Consider implementation challenges",
         "Address real-world governance issues"),
    ),
}

_FORMAT = """REQUIRED OUTPUT FORMAT:

STRUCTURE: JSON object with specific fields

FIELD REQUIREMENTS:
stance:
  - Type: string (150 words max)
  - Description: Main argument supporting the topic
  - Requirements: Clear, logical, evidence-based

counterStance:
  - Type: string (150 words max)
  - Description: Opposing viewpoint or counter-argument
  - Requirements: Balanced, reasonable, well-argued

citations:
  - Type: array of {{"id", "source", "snippet", "relevance"}}
  - Requirements: Must support arguments; at least {min_citations} where possible

quiz:
  - Type: array of {{"q", "options", "answerIndex", "explanation"}}
  - Requirements: Educational, relevant, clear

keyTakeaways:
  - Type: array of strings
  - Requirements: Concise, memorable

VALIDATION: Must be valid JSON with all required fields

IMPORTANT: You must return ONLY valid JSON in the exact format specified above. No additional commentary or text outside the JSON structure."""

_FEATURES = ("role_defined", "task_specified", "format_enforced", "context_provided", "constraints_applied")


def specialization(context: str, proficiency: str) -> str | None:
    """Extra requirement block for the request, if any. Beginners take precedence."""
    if proficiency == "beginner":
        return "beginner"
    if context == "academicResearch":
        return "academic"
    if context == "publicPolicy":
        return "policy"
    return None


def _task_section(task: RTFCTask, query: str) -> str:
    return f"""TASK: {task.name}

OBJECTIVE: {task.objective}

TOPIC: {query}

REQUIREMENTS:
{_bullets(task.requirements)}

COMPLEXITY: {task.complexity}

EXPECTED OUTCOME: {task.expected_outcome}"""


def _context_section(audience: Audience, proficiency: str, chunks: Sequence[ScoredChunk]) -> str:
    if chunks:
        evidence = "\n\n".join(
            f"ID: {c.id}\nSource: {c.metadata.get('source', 'CivicsCoach corpus')}\nContent: {c.text}"
            for c in chunks
        )
    else:
        evidence = "No chunks retrieved. Say so in a citation marked \"unsourced\": true."
    return f"""CONTEXT AND BACKGROUND:

AUDIENCE: {audience.audience}
BACKGROUND: {audience.background}

LEARNING OBJECTIVES:
{_bullets(audience.objectives)}

USER PROFICIENCY LEVEL: {proficiency}

RELEVANT CONSTITUTIONAL CHUNKS:
{evidence}

Use these constitutional chunks as your primary source of truth. Ensure all arguments and claims are supported by these sources."""


def _constraints_section(additional_context: str | None) -> str:
    parts = ["CONSTRAINTS AND REQUIREMENTS:"]
    for heading, requirements, _ in _CONSTRAINTS:
        parts.append(f"{heading}:\n{_bullets(requirements)}")
    if additional_context:
        parts.append(f"ADDITIONAL CONSTRAINTS:\n• {additional_context}")
    parts.append("LIMITATIONS:\n" + _bullets([lim for _, _, limits in _CONSTRAINTS for lim in limits]))
    return "\n\n".join(parts)


class RTFCStrategy(PromptStrategy):
    name = "rtfc"

    def build_messages(
        self,
        query: str,
        proficiency: str,
        chunks: Sequence[ScoredChunk],
        options: PromptOptions,
    ) -> PromptBundle:
        task = _TASKS.get(options.task_type, _TASKS["debate"])
        audience = _AUDIENCES.get(options.context, _AUDIENCES["constitutionalEducation"])
        special = specialization(options.context, proficiency)

        sections = [
            _task_section(task, query),
            _FORMAT.format(min_citations=options.min_citations),
            _context_section(audience, proficiency, chunks),
            _constraints_section(options.additional_context),
        ]
        features = list(_FEATURES)
        if special:
            heading, requirements = _SPECIALIZATIONS[special]
            sections.append(f"{heading}:\n{_bullets(requirements)}")
            features.append(f"specialized_{special}")
        user = "\n\n".join(sections)

        return PromptBundle(
            messages=(PromptMessage("user", _ROLE), PromptMessage("user", user)),
            metadata=PromptMetadata(
                strategy_name=self.name,
                task_description=task.objective,
                output_format="JSON with stance, counterStance, citations[], quiz[], keyTakeaways[]",
                constraints=tuple(r for _, requirements, _ in _CONSTRAINTS for r in requirements),
                features=tuple(features),
                details={
                    "taskType": task.key,
                    "audience": audience.audience,
                    "specialization": special,
                    "promptLength": len(user),
                },
            ),
        )
