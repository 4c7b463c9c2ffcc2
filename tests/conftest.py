"""Shared pytest fixtures."""

import json
from collections.abc import Sequence
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from civicscoach.models import (
    ComplexityProfile,
    CorpusChunk,
    GenerationResult,
    PromptMessage,
    ResolvedGenerationConfig,
    TokenUsage,
)
from civicscoach.pipeline import DebatePipeline
from civicscoach.presets import PresetResolver
from civicscoach.providers.base import GenerationProvider
from config.config_loader import AppConfig, DefaultsConfig, GenerationConfig, load_config

VALID_DEBATE = {
    "stance": "Parliament may amend but not destroy the Constitution.",
    "counterStance": "The doctrine hands unelected judges a veto over amendments.",
    "citations": [{"id": "basic_structure", "source": "Kesavananda Bharati", "snippet": "basic structure"}],
    "quiz": [{"q": "Which case?", "options": ["Kesavananda", "Golak Nath"], "answerIndex": 0}],
}


@pytest.fixture
def app_config(monkeypatch) -> AppConfig:
    """The shipped settings.yaml, loaded without an API key in the environment."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    return load_config()


@pytest.fixture
def resolver(app_config: AppConfig) -> PresetResolver:
    return PresetResolver(app_config.presets)


@pytest.fixture
def sample_generation_config() -> GenerationConfig:
    return GenerationConfig(
        sdk="google-genai",
        model="gemini-test",
        api_key_env="TEST_GEMINI_KEY",
        timeout_sec=5,
        max_output_tokens=512,
    )


@pytest.fixture
def sample_defaults_config(tmp_path: Path) -> DefaultsConfig:
    return DefaultsConfig(
        context="constitutionalEducation",
        task_type="debate",
        proficiency="intermediate",
        min_citations=2,
        output_dir=tmp_path / "output",
    )


@pytest.fixture
def sample_corpus() -> tuple[CorpusChunk, ...]:
    return (
        CorpusChunk("money", "Article 110 defines Money Bills.", {"source": "Constitution"}),
        CorpusChunk("weather", "The monsoon arrives in June.", {}),
        CorpusChunk("basic", "The Basic Structure Doctrine limits amendment power.", {"source": "SC"}),
        CorpusChunk("rajya", "The Rajya Sabha cannot reject a Money Bill.", {}),
    )


@pytest.fixture
def sample_config() -> ResolvedGenerationConfig:
    return ResolvedGenerationConfig(temperature=0.1, top_p=0.7, top_k=4)


@pytest.fixture
def moderate_profile() -> ComplexityProfile:
    return ComplexityProfile(level="moderate")


class MockProvider(GenerationProvider):
    """Test double GenerationProvider."""

    def __init__(self, provider_name: str = "mock", text: str | None = None, demo: bool = False) -> None:
        self._name = provider_name
        self._text = text if text is not None else json.dumps(VALID_DEBATE)
        self._demo = demo
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because invoke is defined in the class body below.
        self.invoke = AsyncMock(  # type: ignore[assignment]
            return_value=GenerationResult(
                text=self._text,
                usage=TokenUsage(input=120, output=80, total=200),
                raw={"mock": True},
                config_echo={"demo": demo},
                demo=demo,
            )
        )

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def invoke(  # type: ignore[override]
        self,
        messages: Sequence[PromptMessage],
        config: ResolvedGenerationConfig,
        max_output_tokens: int,
        query: str | None = None,
    ) -> GenerationResult:
        """Default implementation; replaced by AsyncMock in __init__."""
        return GenerationResult(text=self._text, usage=None, raw={}, demo=self._demo)


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def make_pipeline(app_config: AppConfig, sample_corpus, sample_defaults_config):
    """Factory: a pipeline over the shipped presets and the sample corpus."""

    def _make(provider: GenerationProvider) -> DebatePipeline:
        return DebatePipeline(
            resolver=PresetResolver(app_config.presets),
            corpus=sample_corpus,
            provider=provider,
            defaults=sample_defaults_config,
            max_output_tokens=512,
        )

    return _make
