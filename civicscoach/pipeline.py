"""Request pipeline: analyze, resolve, retrieve, assemble, invoke, validate.

``handle_request`` is the only place errors become failure payloads; every
stage below it either is total or raises a CoachError subclass.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import asdict
from typing import Any

from civicscoach import complexity, retrieval
from civicscoach.corpus import load_corpus
from civicscoach.errors import CoachError, InputError
from civicscoach.models import CorpusChunk, DebateRequest
from civicscoach.presets import PresetResolver
from civicscoach.providers.base import GenerationProvider
from civicscoach.providers.gemini import GeminiProvider
from civicscoach.strategies.assembler import assemble
from civicscoach.strategies.base import PromptOptions
from civicscoach.tokens import analyze_messages, efficiency
from civicscoach.validator import ParseError, SchemaError, debate_to_dict, validate
from config.config_loader import AppConfig, DefaultsConfig

logger = logging.getLogger(__name__)


def _optional_number(body: Mapping[str, Any], key: str) -> float | None:
    value = body.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise InputError(f"{key} must be a number")
    try:
        number = float(value)
    except OverflowError:
        # integer literal too large for a float
        number = math.inf if value > 0 else -math.inf
    except (TypeError, ValueError) as exc:
        raise InputError(f"{key} must be a number") from exc
    # inf is left for the resolver to clamp
    if math.isnan(number):
        raise InputError(f"{key} must be a number")
    return number


_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


def _flag(body: Mapping[str, Any], key: str, default: bool) -> bool:
    """Read a boolean flag; "true"/"false" strings count, unrecognised strings use default."""
    value = body.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return default
    return bool(value)


def request_from_body(body: Mapping[str, Any] | None, defaults: DefaultsConfig) -> DebateRequest:
    """Build a DebateRequest from a JSON body.

    Raises:
        InputError: Missing/empty query or a non-numeric override.
    """
    body = body or {}
    query = body.get("query")
    if not isinstance(query, str) or not query.strip():
        raise InputError("Query is required")

    previous = body.get("previousResponses") or []
    if not isinstance(previous, list):
        previous = [previous]

    additional = body.get("additionalContext")
    return DebateRequest(
        query=query,
        context=str(body.get("context") or defaults.context),
        task_type=str(body.get("taskType") or defaults.task_type),
        proficiency=str(body.get("proficiency") or defaults.proficiency),
        top_k=_optional_number(body, "topK"),
        temperature=_optional_number(body, "temperature"),
        top_p=_optional_number(body, "top_p"),
        use_cot=_flag(body, "useCoT", True),
        use_zero_shot=_flag(body, "useZeroShot", False),
        use_dynamic_prompting=_flag(body, "useDynamicPrompting", True),
        previous_responses=list(previous),
        additional_context=str(additional) if additional else None,
    )


class DebatePipeline:
    """One request-scoped run per call; holds only read-only collaborators."""

    def __init__(
        self,
        resolver: PresetResolver,
        corpus: Sequence[CorpusChunk],
        provider: GenerationProvider,
        defaults: DefaultsConfig,
        max_output_tokens: int = 2048,
    ) -> None:
        self._resolver = resolver
        self._corpus = tuple(corpus)
        self._provider = provider
        self.defaults = defaults
        self._max_output_tokens = max_output_tokens

    async def generate(self, request: DebateRequest, strategy: str | None = None) -> dict[str, Any]:
        """Run the pipeline and return the success payload.

        Raises:
            ProviderError: Invocation failed (config, auth, upstream).
            ParseError: Output held no parseable JSON.
            SchemaError: Parsed JSON lacks required keys.
        """
        profile = complexity.analyze(request.query)
        params = self._resolver.resolve_all(
            request.context,
            request.task_type,
            profile,
            request.proficiency,
            temperature=request.temperature,
            top_p=request.top_p,
            top_k=request.top_k,
        )
        logger.info(
            "Resolved %s/%s/%s (%s): temperature=%.3f top_p=%.3f top_k=%d",
            request.context,
            request.task_type,
            request.proficiency,
            profile.level,
            params.temperature,
            params.top_p,
            params.top_k,
        )

        chunks = retrieval.rank(request.query, self._corpus, params.top_k)
        logger.debug("Retrieved %s", [(c.id, c.score) for c in chunks])

        options = PromptOptions(
            task_type=request.task_type,
            context=request.context,
            complexity=profile,
            min_citations=self.defaults.min_citations,
            additional_context=request.additional_context,
            previous_responses=tuple(request.previous_responses),
        )
        bundle = assemble(
            request.query,
            request.proficiency,
            chunks,
            options,
            use_cot=request.use_cot,
            use_zero_shot=request.use_zero_shot,
            use_dynamic_prompting=request.use_dynamic_prompting,
            forced=strategy,
        )
        estimate = analyze_messages(bundle.messages)
        logger.info(
            "Prompt strategy %s, ~%d input tokens",
            bundle.metadata.strategy_name,
            estimate.total_estimated_tokens,
        )

        result = await self._provider.invoke(
            bundle.messages, params, self._max_output_tokens, query=request.query
        )

        validated = validate(result.text)
        if isinstance(validated, (ParseError, SchemaError)):
            logger.warning("Model output rejected: %s", validated.detail)
            raise validated

        meta = bundle.metadata
        metadata = {
            "temperature": params.temperature,
            "topP": params.top_p,
            "topK": params.top_k,
            "maxOutputTokens": self._max_output_tokens,
            "complexity": asdict(profile),
            "queryComplexity": profile.level,
            "hasCreativeElements": profile.has_creative_elements,
            "context": request.context,
            "taskType": request.task_type,
            "proficiency": request.proficiency,
            "useCoT": request.use_cot,
            "retrievedChunks": len(chunks),
            "retrievalScores": [{"id": c.id, "score": c.score} for c in chunks],
            "promptingStrategy": meta.strategy_name,
            "taskDescription": meta.task_description,
            "outputFormat": meta.output_format,
            "constraints": list(meta.constraints),
            "features": list(meta.features),
            "strategyDetails": dict(meta.details),
            "tokens": asdict(result.usage) if result.usage else {"input": 0, "output": 0, "total": 0},
            "estimatedInputTokens": estimate.total_estimated_tokens,
            "tokenEfficiency": efficiency(result.usage),
            "demo": result.demo,
        }
        return {"ok": True, "data": debate_to_dict(validated), "metadata": metadata, "raw": result.raw}


def failure_payload(exc: CoachError) -> dict[str, Any]:
    payload: dict[str, Any] = {"ok": False, "error": exc.message}
    if exc.details() is not None:
        payload["details"] = exc.details()
    if isinstance(exc, ParseError):
        payload["raw"] = exc.raw
    elif isinstance(exc, SchemaError):
        payload["parsed"] = exc.parsed
    return payload


async def handle_request(
    pipeline: DebatePipeline,
    body: Mapping[str, Any] | None,
    strategy: str | None = None,
) -> tuple[int, dict[str, Any]]:
    """Run one request end to end. Returns (http_status, payload); never raises."""
    try:
        request = request_from_body(body, pipeline.defaults)
        return 200, await pipeline.generate(request, strategy)
    except CoachError as exc:
        logger.error("Debate generation failed (%d): %s", exc.status, exc)
        return exc.status, failure_payload(exc)
    except Exception as exc:
        logger.exception("Unexpected debate generation error")
        return 500, {"ok": False, "error": str(exc)}


def build_pipeline(config: AppConfig, provider: GenerationProvider | None = None) -> DebatePipeline:
    """Wire the pipeline from loaded configuration."""
    return DebatePipeline(
        resolver=PresetResolver(config.presets),
        corpus=load_corpus(config.corpus_path),
        provider=provider or GeminiProvider(config.generation),
        defaults=config.defaults,
        max_output_tokens=config.generation.max_output_tokens,
    )
