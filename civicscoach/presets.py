"""Sampling-parameter resolution from context/task/proficiency presets.

Each tunable dimension (temperature, top-p, top-k) is described by a
``Dimension`` and resolved by the same pure function, ``resolve``. Values are
clamped into the preset's ``[min, max]`` (intersected with the dimension's
absolute bounds) after every adjustment, so the result is always in range
whatever the inputs.

Override semantics: a non-null override is clamped to the absolute bounds and
returned as-is; presets, complexity and proficiency are ignored. Infinite
overrides clamp to the nearer bound; NaN counts as no override.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass

from civicscoach.models import ComplexityProfile, PresetRange, PresetTables, ResolvedGenerationConfig


@dataclass(frozen=True)
class Dimension:
    name: str
    lower: float
    upper: float
    integral: bool = False
    # Additive adjustments; 0 disables the rule.
    simple_step: float = 0.0         # subtracted for simple queries
    complex_step: float = 0.0        # added for complex queries
    creative_step: float = 0.0       # added when the query has creative intent
    proficiency_step: float = 0.0    # beginner -step / advanced +step; negative reverses
    # Multiplicative proficiency scaling (temperature only).
    beginner_scale: float | None = None
    advanced_scale: float | None = None


TEMPERATURE = Dimension(
    name="temperature",
    lower=0.0,
    upper=2.0,
    beginner_scale=0.8,
    advanced_scale=1.1,
)

TOP_P = Dimension(
    name="top_p",
    lower=0.0,
    upper=1.0,
    simple_step=0.05,
    complex_step=0.05,
    creative_step=0.05,
    proficiency_step=0.05,
)

# Beginners get more supporting context, advanced users less.
TOP_K = Dimension(
    name="top_k",
    lower=1,
    upper=20,
    integral=True,
    simple_step=1,
    complex_step=2,
    proficiency_step=-1,
)


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _lookup(table: Mapping, context: str, task_type: str, tables: PresetTables):
    by_task = table.get(context)
    if by_task is None or task_type not in by_task:
        return table[tables.default_context][tables.default_task_type]
    return by_task[task_type]


def _finish(dim: Dimension, value: float) -> float | int:
    if dim.integral:
        return int(round(value))
    return round(value, 4)


def resolve(
    dim: Dimension,
    tables: PresetTables,
    context: str,
    task_type: str,
    complexity: ComplexityProfile,
    proficiency: str,
    override: float | None = None,
) -> float | int:
    """Resolve one dimension. Pure: no I/O, no logging, no shared state."""
    if override is not None and not math.isnan(override):
        value = _clamp(float(override), dim.lower, dim.upper)
        return int(round(value)) if dim.integral else value

    table = getattr(tables, dim.name)
    preset = _lookup(table, context, task_type, tables)

    if not isinstance(preset, PresetRange):
        # Bare scalar preset: proficiency scaling, absolute bounds only.
        value = float(preset)
        if proficiency == "beginner" and dim.beginner_scale is not None:
            value *= dim.beginner_scale
        elif proficiency == "advanced" and dim.advanced_scale is not None:
            value *= dim.advanced_scale
        return _finish(dim, _clamp(value, dim.lower, dim.upper))

    lower = max(dim.lower, preset.min)
    upper = min(dim.upper, preset.max)
    value = _clamp(preset.default, lower, upper)

    if complexity.level == "simple":
        value = _clamp(value - dim.simple_step, lower, upper)
    elif complexity.level == "complex":
        value = _clamp(value + dim.complex_step, lower, upper)

    if complexity.has_creative_elements:
        value = _clamp(value + dim.creative_step, lower, upper)

    if proficiency == "beginner":
        value = _clamp(value - dim.proficiency_step, lower, upper)
    elif proficiency == "advanced":
        value = _clamp(value + dim.proficiency_step, lower, upper)

    return _finish(dim, _clamp(value, lower, upper))


class PresetResolver:
    """Resolves all three dimensions against one immutable set of preset tables."""

    def __init__(self, tables: PresetTables) -> None:
        self._tables = tables

    @property
    def tables(self) -> PresetTables:
        return self._tables

    def resolve_all(
        self,
        context: str,
        task_type: str,
        complexity: ComplexityProfile,
        proficiency: str,
        temperature: float | None = None,
        top_p: float | None = None,
        top_k: float | None = None,
    ) -> ResolvedGenerationConfig:
        args = (self._tables, context, task_type, complexity, proficiency)
        return ResolvedGenerationConfig(
            temperature=float(resolve(TEMPERATURE, *args, override=temperature)),
            top_p=float(resolve(TOP_P, *args, override=top_p)),
            top_k=int(resolve(TOP_K, *args, override=top_k)),
        )
