"""Parse and schema-check generated debate JSON.

``validate`` never raises: it returns either a ValidatedDebate or one of the
error instances below, which the pipeline raises at its own discretion.
"""

import json
import re
from typing import Any

from civicscoach.errors import CoachError
from civicscoach.models import ValidatedDebate

REQUIRED_KEYS = ("stance", "counterStance", "citations")

_OBJECT_START = re.compile(r"\{")
_decoder = json.JSONDecoder()


class ParseError(CoachError):
    """Model output contained no parseable JSON object."""

    def __init__(self, detail: str, raw: str) -> None:
        super().__init__("Could not parse model output")
        self.detail = detail
        self.raw = raw

    def details(self) -> str:
        return self.detail


class SchemaError(CoachError):
    """Parsed JSON lacks required debate keys."""

    def __init__(self, detail: str, parsed: Any, missing: tuple[str, ...] = ()) -> None:
        super().__init__("Schema validation failed")
        self.detail = detail
        self.parsed = parsed
        self.missing = missing

    def details(self) -> str:
        return self.detail


def parse_json_maybe(text: str) -> Any | ParseError:
    """Parse text as JSON, else the first balanced {...} object embedded in it."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    text = text or ""
    found_brace = False
    for match in _OBJECT_START.finditer(text):
        found_brace = True
        try:
            value, _ = _decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        return value

    if found_brace:
        return ParseError("Could not parse JSON from model output", text)
    return ParseError("No JSON found in model output", text)


def check_schema(obj: Any) -> ValidatedDebate | SchemaError:
    if not isinstance(obj, dict):
        return SchemaError("Not an object", obj)
    missing = tuple(k for k in REQUIRED_KEYS if k not in obj)
    if missing:
        return SchemaError(f"Missing keys: {', '.join(missing)}", obj, missing)
    extra = {k: v for k, v in obj.items() if k not in (*REQUIRED_KEYS, "quiz")}
    return ValidatedDebate(
        stance=obj["stance"],
        counter_stance=obj["counterStance"],
        citations=obj["citations"],
        quiz=obj.get("quiz", []),
        extra=extra,
    )


def validate(text: str) -> ValidatedDebate | ParseError | SchemaError:
    parsed = parse_json_maybe(text)
    if isinstance(parsed, ParseError):
        return parsed
    return check_schema(parsed)


def debate_to_dict(debate: ValidatedDebate) -> dict[str, Any]:
    """Serialise back to the wire shape, extra model fields included."""
    return {
        "stance": debate.stance,
        "counterStance": debate.counter_stance,
        "citations": debate.citations,
        "quiz": debate.quiz,
        **debate.extra,
    }
