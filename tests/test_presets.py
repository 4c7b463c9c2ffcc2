"""Tests for civicscoach/presets.py. The resolver is pure, so these are table-driven."""

import itertools
import math

import pytest

from civicscoach.complexity import analyze
from civicscoach.models import ComplexityProfile, PresetRange
from civicscoach.presets import TEMPERATURE, TOP_K, TOP_P, resolve

CONTEXTS = ["constitutionalEducation", "academicResearch", "publicPolicy", "generalPublic", "creativeTasks"]
TASK_TYPES = ["debate", "analysis", "comparison", "explanation", "quiz"]
PROFICIENCIES = ["beginner", "intermediate", "advanced"]
PROFILES = [
    ComplexityProfile(level=level, has_creative_elements=creative)
    for level in ("simple", "moderate", "complex")
    for creative in (False, True)
]


def test_scenario_explain_article_370_top_p(resolver):
    config = resolver.resolve_all("generalPublic", "explanation", analyze("Explain Article 370"), "beginner")
    assert config.top_p == pytest.approx(0.75)


def test_scenario_basic_structure_top_k(resolver):
    profile = analyze("What is the Basic Structure Doctrine?")
    config = resolver.resolve_all("constitutionalEducation", "debate", profile, "intermediate")
    assert config.top_k == 6
    assert config.top_p == pytest.approx(0.75)
    assert config.temperature == pytest.approx(0.1)


def test_temperature_scales_with_proficiency(resolver):
    profile = ComplexityProfile(level="moderate")
    tables = resolver.tables
    base = resolve(TEMPERATURE, tables, "generalPublic", "explanation", profile, "intermediate")
    assert base == pytest.approx(0.5)
    assert resolve(TEMPERATURE, tables, "generalPublic", "explanation", profile, "beginner") == pytest.approx(0.4)
    assert resolve(TEMPERATURE, tables, "generalPublic", "explanation", profile, "advanced") == pytest.approx(0.55)


def test_top_k_proficiency_direction(resolver):
    profile = ComplexityProfile(level="moderate")
    tables = resolver.tables
    # academicResearch/analysis: {min 5, max 10, default 7}
    assert resolve(TOP_K, tables, "academicResearch", "analysis", profile, "intermediate") == 7
    assert resolve(TOP_K, tables, "academicResearch", "analysis", profile, "beginner") == 8
    assert resolve(TOP_K, tables, "academicResearch", "analysis", profile, "advanced") == 6


def test_top_p_creative_step(resolver):
    tables = resolver.tables
    plain = resolve(TOP_P, tables, "publicPolicy", "debate", ComplexityProfile(level="moderate"), "intermediate")
    creative = resolve(
        TOP_P, tables, "publicPolicy", "debate",
        ComplexityProfile(level="moderate", has_creative_elements=True), "intermediate",
    )
    assert plain == pytest.approx(0.8)
    assert creative == pytest.approx(0.85)


@pytest.mark.parametrize(
    "context,task_type,profile,proficiency",
    list(itertools.product(CONTEXTS, TASK_TYPES, PROFILES, PROFICIENCIES)),
)
def test_results_stay_within_preset_ranges(resolver, context, task_type, profile, proficiency):
    tables = resolver.tables
    config = resolver.resolve_all(context, task_type, profile, proficiency)

    top_p_range: PresetRange = tables.top_p[context][task_type]
    top_k_range: PresetRange = tables.top_k[context][task_type]
    assert top_p_range.min - 1e-9 <= config.top_p <= top_p_range.max + 1e-9
    assert top_k_range.min <= config.top_k <= top_k_range.max
    assert isinstance(config.top_k, int)
    assert 0.0 <= config.temperature <= 2.0


@pytest.mark.parametrize(
    "dim,override,expected",
    [
        (TEMPERATURE, 0.7, 0.7),
        (TEMPERATURE, 5.0, 2.0),
        (TEMPERATURE, -1.0, 0.0),
        (TOP_P, 0.33, 0.33),
        (TOP_P, 1.5, 1.0),
        (TOP_P, -0.2, 0.0),
        (TOP_K, 9, 9),
        (TOP_K, 50, 20),
        (TOP_K, 0, 1),
        (TOP_K, 4.6, 5),
        (TEMPERATURE, math.inf, 2.0),
        (TEMPERATURE, -math.inf, 0.0),
        (TOP_P, math.inf, 1.0),
        (TOP_P, -math.inf, 0.0),
        (TOP_K, math.inf, 20),
        (TOP_K, -math.inf, 1),
    ],
)
def test_override_is_clamped_to_absolute_bounds(resolver, dim, override, expected):
    # Overrides ignore presets, complexity and proficiency entirely.
    for profile, proficiency in [(ComplexityProfile(level="simple"), "beginner"),
                                 (ComplexityProfile(level="complex"), "advanced")]:
        value = resolve(dim, resolver.tables, "generalPublic", "quiz", profile, proficiency, override=override)
        assert value == pytest.approx(expected)


@pytest.mark.parametrize("dim", [TEMPERATURE, TOP_P, TOP_K])
def test_nan_override_is_treated_as_absent(resolver, dim):
    profile = ComplexityProfile(level="complex")
    args = (dim, resolver.tables, "academicResearch", "analysis", profile, "advanced")
    assert resolve(*args, override=math.nan) == resolve(*args)


def test_integral_override_is_an_int(resolver):
    value = resolve(TOP_K, resolver.tables, "generalPublic", "quiz", ComplexityProfile(level="simple"), "beginner",
                    override=math.inf)
    assert value == 20 and isinstance(value, int)


def test_override_outside_preset_range_is_kept(resolver):
    # constitutionalEducation/debate top_k range is 3..6; an override of 12 is honored.
    config = resolver.resolve_all(
        "constitutionalEducation", "debate", ComplexityProfile(level="moderate"), "intermediate", top_k=12
    )
    assert config.top_k == 12


def test_unknown_context_and_task_fall_back_to_default_pair(resolver):
    profile = ComplexityProfile(level="moderate")
    unknown = resolver.resolve_all("martianLaw", "sonnet", profile, "intermediate")
    default = resolver.resolve_all("constitutionalEducation", "debate", profile, "intermediate")
    assert unknown == default


def test_unknown_proficiency_applies_no_adjustment(resolver):
    profile = ComplexityProfile(level="moderate")
    odd = resolver.resolve_all("generalPublic", "debate", profile, "expert")
    intermediate = resolver.resolve_all("generalPublic", "debate", profile, "intermediate")
    assert odd == intermediate


def test_resolution_is_deterministic(resolver):
    profile = analyze("Compare Lok Sabha and Rajya Sabha powers")
    results = {resolver.resolve_all("publicPolicy", "comparison", profile, "advanced") for _ in range(5)}
    assert len(results) == 1
