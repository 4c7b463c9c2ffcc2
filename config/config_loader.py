"""Load settings.yaml into typed dataclasses and immutable preset tables."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import yaml

from civicscoach.models import PresetRange, PresetTables

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

# Generation SDKs the provider layer can drive.
SUPPORTED_SDKS = ("google-genai",)


@dataclass
class GenerationConfig:
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_output_tokens: int
    stop_sequences: list[str] = field(default_factory=lambda: ["</reasoning>"])


@dataclass
class DefaultsConfig:
    context: str
    task_type: str
    proficiency: str
    min_citations: int = 2
    output_dir: Path = Path("./output")


@dataclass
class InboxConfig:
    dir: Path
    archive_dir: Path


@dataclass
class AppConfig:
    generation: GenerationConfig
    defaults: DefaultsConfig
    presets: PresetTables
    inbox: InboxConfig
    corpus_path: Path | None = None
    api_key_available: bool = False


def _freeze_ranges(raw: dict) -> MappingProxyType:
    return MappingProxyType({
        context: MappingProxyType({
            task_type: PresetRange(
                min=float(values["min"]),
                max=float(values["max"]),
                default=float(values["default"]),
            )
            for task_type, values in tasks.items()
        })
        for context, tasks in raw.items()
    })


def _freeze_scalars(raw: dict) -> MappingProxyType:
    return MappingProxyType({
        context: MappingProxyType({task_type: float(v) for task_type, v in tasks.items()})
        for context, tasks in raw.items()
    })


def build_preset_tables(raw: dict, default_context: str, default_task_type: str) -> PresetTables:
    """Build read-only preset tables from the raw ``presets`` section.

    Raises ValueError if the default context/task pair is missing from any table,
    since every unknown lookup falls back to it.
    """
    tables = PresetTables(
        temperature=_freeze_scalars(raw["temperature"]),
        top_p=_freeze_ranges(raw["top_p"]),
        top_k=_freeze_ranges(raw["top_k"]),
        default_context=default_context,
        default_task_type=default_task_type,
    )
    for name in ("temperature", "top_p", "top_k"):
        table = getattr(tables, name)
        if default_task_type not in table.get(default_context, {}):
            raise ValueError(
                f"Preset table '{name}' has no entry for default "
                f"{default_context}/{default_task_type}"
            )
    return tables


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError for an
    unsupported generation sdk.
    Logs a warning for a missing API key but does not raise; the invoker
    reports it as a ConfigurationError per request.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    gen_raw = raw["generation"]
    generation = GenerationConfig(
        sdk=str(gen_raw["sdk"]),
        model=str(gen_raw["model"]),
        api_key_env=str(gen_raw["api_key_env"]),
        timeout_sec=int(gen_raw["timeout_sec"]),
        max_output_tokens=int(gen_raw["max_output_tokens"]),
        stop_sequences=list(gen_raw.get("stop_sequences", ["</reasoning>"])),
    )
    if generation.sdk not in SUPPORTED_SDKS:
        raise ValueError(
            f"Unsupported generation sdk '{generation.sdk}'; expected one of {', '.join(SUPPORTED_SDKS)}"
        )

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        context=str(defaults_raw["context"]),
        task_type=str(defaults_raw["task_type"]),
        proficiency=str(defaults_raw["proficiency"]),
        min_citations=int(defaults_raw.get("min_citations", 2)),
        output_dir=Path(defaults_raw.get("output_dir", "./output")),
    )

    inbox_raw = raw.get("inbox", {})
    inbox = InboxConfig(
        dir=Path(inbox_raw.get("dir", "./inbox")),
        archive_dir=Path(inbox_raw.get("archive_dir", "./inbox/archive")),
    )

    presets = build_preset_tables(raw["presets"], defaults.context, defaults.task_type)

    corpus_raw = raw.get("corpus") or {}
    corpus_path = Path(corpus_raw["path"]) if corpus_raw.get("path") else None

    api_key = os.environ.get(generation.api_key_env, "").strip()
    if api_key:
        logger.info("Generation provider available: %s via %s", generation.model, generation.sdk)
    else:
        logger.warning(
            "No API key for %s — set %s in .env, generation requests will fail",
            generation.model,
            generation.api_key_env,
        )

    return AppConfig(
        generation=generation,
        defaults=defaults,
        presets=presets,
        inbox=inbox,
        corpus_path=corpus_path,
        api_key_available=bool(api_key),
    )
