"""Tests for civicscoach/pipeline.py: request parsing, orchestration, failure mapping."""

import json
import math
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import errors as genai_errors

from civicscoach.errors import InputError
from civicscoach.pipeline import build_pipeline, failure_payload, handle_request, request_from_body
from civicscoach.providers.base import UpstreamError
from civicscoach.providers.gemini import GeminiProvider
from civicscoach.validator import SchemaError
from tests.conftest import VALID_DEBATE, MockProvider

BASIC_STRUCTURE = "What is the Basic Structure Doctrine?"


# --- request parsing ---


def test_request_defaults(sample_defaults_config):
    request = request_from_body({"query": "Explain Article 370"}, sample_defaults_config)
    assert request.context == "constitutionalEducation"
    assert request.task_type == "debate"
    assert request.proficiency == "intermediate"
    assert request.use_cot is True
    assert request.use_zero_shot is False
    assert request.use_dynamic_prompting is True
    assert request.top_k is None and request.temperature is None and request.top_p is None


def test_request_reads_body_keys(sample_defaults_config):
    body = {
        "query": "Q",
        "context": "generalPublic",
        "taskType": "explanation",
        "proficiency": "beginner",
        "topK": "3",
        "temperature": 0.9,
        "top_p": 0.5,
        "useCoT": False,
        "useZeroShot": True,
        "useDynamicPrompting": False,
        "previousResponses": [{"stance": "s"}],
        "additionalContext": "extra",
    }
    request = request_from_body(body, sample_defaults_config)
    assert request.context == "generalPublic"
    assert request.task_type == "explanation"
    assert request.top_k == 3
    assert request.temperature == 0.9
    assert request.top_p == 0.5
    assert request.use_cot is False
    assert request.use_zero_shot is True
    assert request.use_dynamic_prompting is False
    assert request.previous_responses == [{"stance": "s"}]
    assert request.additional_context == "extra"


@pytest.mark.parametrize("body", [None, {}, {"query": ""}, {"query": "   "}, {"query": 42}])
def test_request_requires_query(sample_defaults_config, body):
    with pytest.raises(InputError, match="Query is required"):
        request_from_body(body, sample_defaults_config)


@pytest.mark.parametrize("value", ["abc", True, [1], "nan", math.nan])
def test_request_rejects_non_numeric_override(sample_defaults_config, value):
    with pytest.raises(InputError, match="topK must be a number"):
        request_from_body({"query": "Q", "topK": value}, sample_defaults_config)


def test_request_keeps_fractional_and_infinite_overrides(sample_defaults_config):
    request = request_from_body({"query": "Q", "topK": 4.6, "temperature": "inf", "top_p": -math.inf},
                                sample_defaults_config)
    assert request.top_k == pytest.approx(4.6)
    assert request.temperature == math.inf
    assert request.top_p == -math.inf


def test_request_maps_huge_integer_to_infinity(sample_defaults_config):
    request = request_from_body({"query": "Q", "topK": 10**400, "temperature": -(10**400)}, sample_defaults_config)
    assert request.top_k == math.inf
    assert request.temperature == -math.inf


@pytest.mark.parametrize(
    "body,expected",
    [
        ({"useZeroShot": "false"}, (True, False, True)),
        ({"useZeroShot": "TRUE"}, (True, True, True)),
        ({"useCoT": "false", "useDynamicPrompting": "False"}, (False, False, False)),
        ({"useCoT": "true", "useDynamicPrompting": "true"}, (True, False, True)),
        ({"useCoT": 0, "useZeroShot": 1}, (False, True, True)),
        ({"useCoT": "maybe", "useZeroShot": "maybe"}, (True, False, True)),
        ({"useCoT": None, "useZeroShot": None, "useDynamicPrompting": None}, (True, False, True)),
    ],
)
def test_request_flags_parse_consistently(sample_defaults_config, body, expected):
    request = request_from_body({"query": "Q", **body}, sample_defaults_config)
    assert (request.use_cot, request.use_zero_shot, request.use_dynamic_prompting) == expected



# --- end to end through handle_request ---


async def test_missing_query_is_400_and_provider_not_called(make_pipeline, mock_provider):
    pipeline = make_pipeline(mock_provider)
    status, payload = await handle_request(pipeline, {"query": ""})
    assert status == 400
    assert payload == {"ok": False, "error": "Query is required"}
    mock_provider.invoke.assert_not_awaited()


async def test_success_payload(make_pipeline, mock_provider):
    pipeline = make_pipeline(mock_provider)
    status, payload = await handle_request(pipeline, {"query": BASIC_STRUCTURE})

    assert status == 200
    assert payload["ok"] is True
    assert payload["data"]["stance"] == VALID_DEBATE["stance"]
    assert payload["data"]["counterStance"] == VALID_DEBATE["counterStance"]
    assert payload["raw"] == {"mock": True}

    metadata = payload["metadata"]
    assert metadata["queryComplexity"] == "complex"
    assert metadata["complexity"]["has_complex_terms"] is True
    assert metadata["topK"] == 6
    assert metadata["topP"] == pytest.approx(0.75)
    assert metadata["temperature"] == pytest.approx(0.1)
    assert metadata["maxOutputTokens"] == 512
    # sample corpus holds only four chunks
    assert metadata["retrievedChunks"] == 4
    assert metadata["retrievalScores"][0]["id"] == "basic"
    assert metadata["promptingStrategy"] == "dynamic"
    assert metadata["tokens"] == {"input": 120, "output": 80, "total": 200}
    assert metadata["estimatedInputTokens"] > 0
    assert metadata["tokenEfficiency"] == pytest.approx(80 / 120)
    assert metadata["demo"] is False

    messages, params, max_tokens = mock_provider.invoke.call_args.args
    assert messages[-1].content.startswith(f"QUERY: {BASIC_STRUCTURE}")
    assert params.top_k == 6
    assert max_tokens == 512
    assert mock_provider.invoke.call_args.kwargs["query"] == BASIC_STRUCTURE


async def test_overrides_reach_the_provider(make_pipeline, mock_provider):
    pipeline = make_pipeline(mock_provider)
    body = {"query": BASIC_STRUCTURE, "topK": 2, "temperature": 0.9, "top_p": 0.5}
    status, payload = await handle_request(pipeline, body)

    assert status == 200
    assert payload["metadata"]["topK"] == 2
    assert payload["metadata"]["temperature"] == pytest.approx(0.9)
    assert payload["metadata"]["topP"] == pytest.approx(0.5)
    assert payload["metadata"]["retrievedChunks"] == 2


@pytest.mark.parametrize(
    "raw,key,expected",
    [
        ('"topK": 1e400', "topK", 20),
        ('"topK": -1e400', "topK", 1),
        ('"temperature": 1e400', "temperature", 2.0),
        ('"temperature": -1e400', "temperature", 0.0),
        ('"top_p": 1e400', "topP", 1.0),
        ('"top_p": -1e400', "topP", 0.0),
        ('"topK": 4.6', "topK", 5),
    ],
)
async def test_out_of_range_overrides_are_clamped(make_pipeline, mock_provider, raw, key, expected):
    body = json.loads(f'{{"query": "{BASIC_STRUCTURE}", {raw}}}')
    status, payload = await handle_request(make_pipeline(mock_provider), body)
    assert status == 200
    assert payload["metadata"][key] == pytest.approx(expected)
    params = mock_provider.invoke.call_args.args[1]
    assert isinstance(params.top_k, int)


@pytest.mark.parametrize("key", ["topK", "temperature", "top_p"])
async def test_nan_override_is_400(make_pipeline, mock_provider, key):
    body = json.loads(f'{{"query": "{BASIC_STRUCTURE}", "{key}": NaN}}')
    status, payload = await handle_request(make_pipeline(mock_provider), body)
    assert status == 400
    assert payload == {"ok": False, "error": f"{key} must be a number"}
    mock_provider.invoke.assert_not_awaited()


async def test_string_false_flag_keeps_default_strategy(make_pipeline, mock_provider):
    _, payload = await handle_request(make_pipeline(mock_provider), {"query": "Q", "useZeroShot": "false"})
    assert payload["metadata"]["promptingStrategy"] == "dynamic"



async def test_flags_select_strategy(make_pipeline, mock_provider):
    pipeline = make_pipeline(mock_provider)

    _, zero_shot = await handle_request(pipeline, {"query": "Q", "useZeroShot": True})
    assert zero_shot["metadata"]["promptingStrategy"] == "zero-shot"

    _, cot = await handle_request(pipeline, {"query": "Q", "useCoT": False, "useDynamicPrompting": False})
    assert cot["metadata"]["promptingStrategy"] == "chain-of-thought"
    assert cot["metadata"]["useCoT"] is False
    assert "reasoning_suppressed" in cot["metadata"]["features"]


async def test_forced_strategy_overrides_flags(make_pipeline, mock_provider):
    pipeline = make_pipeline(mock_provider)
    _, payload = await handle_request(pipeline, {"query": "Q", "useZeroShot": True}, "chain-of-thought")
    assert payload["metadata"]["promptingStrategy"] == "chain-of-thought"


async def test_rate_limit_is_demo_success(make_pipeline, monkeypatch, sample_generation_config):
    monkeypatch.setenv(sample_generation_config.api_key_env, "test-key")
    provider = GeminiProvider(sample_generation_config)
    provider._client = MagicMock()
    provider._client.aio.models.generate_content = AsyncMock(
        side_effect=genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
        )
    )
    pipeline = make_pipeline(provider)

    for query in (BASIC_STRUCTURE, "Compare Lok Sabha and Rajya Sabha"):
        status, payload = await handle_request(pipeline, {"query": query})
        assert status == 200
        assert payload["ok"] is True
        assert payload["metadata"]["demo"] is True
        data = payload["data"]
        assert data["stance"] and data["counterStance"]
        assert len(data["citations"]) >= 1
        assert len(data["quiz"]) >= 1


async def test_schema_failure_echoes_parsed(make_pipeline):
    pipeline = make_pipeline(MockProvider(text='{"stance":"a"}'))
    status, payload = await handle_request(pipeline, {"query": "Q"})
    assert status == 500
    assert payload == {
        "ok": False,
        "error": "Schema validation failed",
        "details": "Missing keys: counterStance, citations",
        "parsed": {"stance": "a"},
    }


async def test_parse_failure_echoes_raw(make_pipeline):
    pipeline = make_pipeline(MockProvider(text="I cannot answer that."))
    status, payload = await handle_request(pipeline, {"query": "Q"})
    assert status == 500
    assert payload["error"] == "Could not parse model output"
    assert payload["details"] == "No JSON found in model output"
    assert payload["raw"] == "I cannot answer that."


async def test_missing_api_key_is_500(make_pipeline, monkeypatch, sample_generation_config):
    monkeypatch.delenv(sample_generation_config.api_key_env, raising=False)
    pipeline = make_pipeline(GeminiProvider(sample_generation_config))
    status, payload = await handle_request(pipeline, {"query": "Q"})
    assert status == 500
    assert payload == {"ok": False, "error": "TEST_GEMINI_KEY is required. Please set it in your .env file."}


async def test_upstream_error_message_passed_through(make_pipeline, mock_provider):
    mock_provider.invoke.side_effect = UpstreamError("mock", "Gemini API error: overloaded")
    status, payload = await handle_request(make_pipeline(mock_provider), {"query": "Q"})
    assert status == 500
    assert payload["error"] == "Gemini API error: overloaded"


async def test_unexpected_error_is_500(make_pipeline, mock_provider):
    mock_provider.invoke.side_effect = RuntimeError("kaboom")
    status, payload = await handle_request(make_pipeline(mock_provider), {"query": "Q"})
    assert status == 500
    assert payload == {"ok": False, "error": "kaboom"}


def test_failure_payload_without_details():
    assert failure_payload(InputError("Query is required")) == {"ok": False, "error": "Query is required"}
    schema = SchemaError("Not an object", [1])
    assert failure_payload(schema)["parsed"] == [1]


def test_build_pipeline_from_config(app_config, mock_provider):
    pipeline = build_pipeline(app_config, provider=mock_provider)
    assert pipeline.defaults is app_config.defaults
