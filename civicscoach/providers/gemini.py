"""Gemini provider using google-genai SDK with native async."""

import asyncio
import json
import logging
import os
import time
from collections.abc import Sequence

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from civicscoach.fallback import DEMO_RAW, fallback_payload
from civicscoach.models import GenerationResult, PromptMessage, ResolvedGenerationConfig, TokenUsage
from civicscoach.providers.base import (
    ConfigurationError,
    GenerationProvider,
    UpstreamAuthError,
    UpstreamError,
)
from civicscoach.tokens import analyze_messages
from config.config_loader import GenerationConfig

logger = logging.getLogger(__name__)

_PROVIDER = "gemini"
_RATE_LIMITED = 429
_AUTH_FAILED = (401, 403)
_DEMO_USAGE = TokenUsage(input=100, output=200, total=300)


def to_contents(messages: Sequence[PromptMessage]) -> list[dict]:
    """Convert prompt messages to Gemini ``contents`` (assistant turns become ``model``)."""
    return [
        {"role": "user" if m.role == "user" else "model", "parts": [{"text": m.content}]}
        for m in messages
    ]


class GeminiProvider(GenerationProvider):
    """Google Gemini provider via google-genai SDK.

    A missing API key does not fail construction; every invoke() then raises
    ConfigurationError so the failure surfaces per request.
    """

    def __init__(self, config: GenerationConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        self._client = genai.Client(api_key=api_key) if api_key else None

    def name(self) -> str:
        return _PROVIDER

    def model_string(self) -> str:
        return self._config.model

    def _config_echo(self, config: ResolvedGenerationConfig, max_output_tokens: int, demo: bool) -> dict:
        return {
            "model": self._config.model,
            "temperature": config.temperature,
            "topP": config.top_p,
            "topK": config.top_k,
            "maxOutputTokens": max_output_tokens,
            "stopSequences": list(self._config.stop_sequences),
            "demo": demo,
        }

    def _demo_result(
        self,
        messages: Sequence[PromptMessage],
        config: ResolvedGenerationConfig,
        max_output_tokens: int,
        query: str | None,
    ) -> GenerationResult:
        lookup = query if query is not None else (messages[-1].content if messages else "")
        logger.warning("Gemini rate limited, returning demo response")
        return GenerationResult(
            text=json.dumps(fallback_payload(lookup)),
            usage=_DEMO_USAGE,
            raw=dict(DEMO_RAW),
            config_echo=self._config_echo(config, max_output_tokens, demo=True),
            demo=True,
        )

    async def invoke(
        self,
        messages: Sequence[PromptMessage],
        config: ResolvedGenerationConfig,
        max_output_tokens: int,
        query: str | None = None,
    ) -> GenerationResult:
        if self._client is None:
            raise ConfigurationError(
                _PROVIDER,
                f"{self._config.api_key_env} is required. Please set it in your .env file.",
            )

        estimate = analyze_messages(messages)
        logger.debug(
            "Gemini request: %d messages, ~%d input tokens, temperature=%.3f top_p=%.3f",
            estimate.total_messages,
            estimate.total_estimated_tokens,
            config.temperature,
            config.top_p,
        )

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model,
                    contents=to_contents(messages),
                    config=genai_types.GenerateContentConfig(
                        temperature=config.temperature,
                        top_p=config.top_p,
                        max_output_tokens=max_output_tokens,
                        stop_sequences=list(self._config.stop_sequences),
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise UpstreamError(_PROVIDER, f"Request timed out after {self._config.timeout_sec}s") from exc
        except genai_errors.APIError as exc:
            if exc.code == _RATE_LIMITED:
                return self._demo_result(messages, config, max_output_tokens, query)
            if exc.code in _AUTH_FAILED:
                raise UpstreamAuthError(
                    _PROVIDER, f"Invalid {self._config.api_key_env}. Please check your API key."
                ) from exc
            raise UpstreamError(_PROVIDER, f"Gemini API error: {exc.message or exc}") from exc
        except Exception as exc:
            raise UpstreamError(_PROVIDER, f"Gemini API error: {exc}") from exc

        latency = time.monotonic() - start

        usage: TokenUsage | None = None
        if response.usage_metadata:
            meta = response.usage_metadata
            usage = TokenUsage(
                input=meta.prompt_token_count or 0,
                output=meta.candidates_token_count or 0,
                total=meta.total_token_count or 0,
            )

        logger.info("Gemini call: %.2fs, %s tokens", latency, usage.total if usage else None)

        return GenerationResult(
            text=response.text or "",
            usage=usage,
            raw=response.model_dump(mode="json", exclude_none=True),
            config_echo=self._config_echo(config, max_output_tokens, demo=False),
            demo=False,
        )
