"""Pure dataclasses for the CivicsCoach generation pipeline. No logic, no deps."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class ComplexityProfile:
    level: str                     # "simple", "moderate", "complex"
    has_complex_terms: bool = False
    has_multiple_concepts: bool = False
    has_creative_elements: bool = False
    word_count: int = 0


@dataclass(frozen=True)
class PresetRange:
    min: float
    max: float
    default: float


@dataclass(frozen=True)
class PresetTables:
    """Read-only preset tables, keyed context -> task type."""

    temperature: Mapping[str, Mapping[str, float]]
    top_p: Mapping[str, Mapping[str, PresetRange]]
    top_k: Mapping[str, Mapping[str, PresetRange]]
    default_context: str = "constitutionalEducation"
    default_task_type: str = "debate"


@dataclass(frozen=True)
class ResolvedGenerationConfig:
    temperature: float             # [0, 2]
    top_p: float                   # [0, 1]
    top_k: int                     # [1, 20]


@dataclass(frozen=True)
class CorpusChunk:
    id: str
    text: str
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoredChunk:
    id: str
    text: str
    metadata: Mapping[str, Any]
    score: float


@dataclass(frozen=True)
class PromptMessage:
    role: Role
    content: str


@dataclass(frozen=True)
class PromptMetadata:
    strategy_name: str             # "chain-of-thought", "zero-shot", "dynamic"
    task_description: str
    output_format: str
    constraints: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PromptBundle:
    messages: tuple[PromptMessage, ...]
    metadata: PromptMetadata


@dataclass(frozen=True)
class TokenUsage:
    input: int
    output: int
    total: int


@dataclass
class GenerationResult:
    text: str
    usage: TokenUsage | None
    raw: Any                       # opaque upstream payload
    config_echo: dict[str, Any] = field(default_factory=dict)
    demo: bool = False             # True when served from the rate-limit fallback


@dataclass(frozen=True)
class ValidatedDebate:
    stance: Any
    counter_stance: Any
    citations: Any
    quiz: Any = ()
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class DebateRequest:
    query: str
    context: str = "constitutionalEducation"
    task_type: str = "debate"
    proficiency: str = "intermediate"
    top_k: float | None = None
    temperature: float | None = None
    top_p: float | None = None
    use_cot: bool = True
    use_zero_shot: bool = False
    use_dynamic_prompting: bool = True
    previous_responses: list[Any] = field(default_factory=list)
    additional_context: str | None = None
