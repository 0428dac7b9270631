"""
Model Output Schemas

The assessment contract changed over time:

- V1: rating + summary
- V2: V1 + productivity_insight + american_dream_impact
- V3: rating + summary + paired scores and tooltips (current)

`parse_assessment` strips code fences, decodes the JSON object, and checks it
against the requested version before anything is written.
"""

import json
import numbers
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..config import TOOLTIP_MAX_CHARS
from ..errors import ParseError, ValidationError


class SchemaVersion(Enum):
    V1 = "v1"
    V2 = "v2"
    V3 = "v3"


@dataclass(frozen=True)
class SchemaSpec:
    """Required fields, numeric bounds and column mapping for one version."""
    version: SchemaVersion
    required_fields: Tuple[str, ...]
    score_fields: Tuple[str, ...] = ()
    tooltip_fields: Tuple[str, ...] = ()
    # model field -> report column, where they differ
    column_names: Dict[str, str] = field(default_factory=dict)
    # JSON shape shown to the model
    prompt_shape: str = ""


RATING_BOUNDS = (1.0, 10.0)
SCORE_BOUNDS = (0.0, 100.0)

SCHEMAS: Dict[SchemaVersion, SchemaSpec] = {
    SchemaVersion.V1: SchemaSpec(
        version=SchemaVersion.V1,
        required_fields=("rating", "summary"),
        prompt_shape="""{
  "rating": number (1-10, 1 = catastrophic for American workers, 10 = transformative opportunity),
  "summary": string (800-1000 characters)
}""",
    ),
    SchemaVersion.V2: SchemaSpec(
        version=SchemaVersion.V2,
        required_fields=("rating", "summary", "productivity_insight", "american_dream_impact"),
        prompt_shape="""{
  "rating": number (1-10, 1 = catastrophic for American workers, 10 = transformative opportunity),
  "summary": string (800-1000 characters),
  "productivity_insight": string (200-250 characters, productivity vs. labor value trends),
  "american_dream_impact": string (200-250 characters, impact on the American Dream)
}""",
    ),
    SchemaVersion.V3: SchemaSpec(
        version=SchemaVersion.V3,
        required_fields=(
            "rating",
            "summary",
            "prod_labor_score",
            "prod_labor_tip",
            "american_dream_score",
            "american_dream_tooltip",
        ),
        score_fields=("prod_labor_score", "american_dream_score"),
        tooltip_fields=("prod_labor_tip", "american_dream_tooltip"),
        column_names={"prod_labor_tip": "prod_labor_tooltip"},
        prompt_shape="""{
  "rating": number (1-10),
  "summary": string (500-700 words),
  "prod_labor_score": number (0-100),
  "prod_labor_tip": string (<=120 chars),
  "american_dream_score": number (0-100),
  "american_dream_tooltip": string (<=120 chars)
}""",
    ),
}

DEFAULT_SCHEMA = SchemaVersion.V3


@dataclass
class Assessment:
    """A validated model assessment, keyed by report column."""
    version: SchemaVersion
    fields: Dict[str, Any]

    @property
    def rating(self) -> float:
        return self.fields["rating"]

    def to_columns(self) -> Dict[str, Any]:
        return dict(self.fields)


_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` markers the model may add despite instructions."""
    return _FENCE_RE.sub("", text).strip()


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _check_range(name: str, value: Any, bounds: Tuple[float, float], raw_text: str) -> float:
    low, high = bounds
    if not _is_number(value):
        raise ValidationError(
            f"{name} must be a number between {low:g} and {high:g}", raw_text
        )
    try:
        number = float(value)
    except OverflowError:
        # JSON integers have no size limit
        raise ValidationError(
            f"{name} must be a number between {low:g} and {high:g}, got an oversized integer",
            raw_text,
        ) from None
    if number != number or not low <= number <= high:
        raise ValidationError(
            f"{name} must be a number between {low:g} and {high:g}, got {value}", raw_text
        )
    return number


def parse_assessment(raw_text: str, version: SchemaVersion = DEFAULT_SCHEMA) -> Assessment:
    """
    Parse and validate raw model output.

    Args:
        raw_text: The model's text response.
        version: Schema version whose required fields and bounds apply.

    Returns:
        Assessment with values keyed by report column.

    Raises:
        ParseError: If the text is not a JSON object after stripping fences.
        ValidationError: If a required field is missing/empty or a numeric
            field is out of range or of the wrong type.
    """
    spec = SCHEMAS[version]
    cleaned = strip_code_fences(raw_text or "")

    try:
        data = json.loads(cleaned)
    except ValueError as e:
        # JSONDecodeError, or an integer literal past the digit limit
        raise ParseError(f"Invalid JSON in AI response: {e}", raw_text) from e
    if not isinstance(data, dict):
        raise ParseError("AI response is not a JSON object", raw_text)

    missing = [name for name in spec.required_fields if _is_empty(data.get(name))]
    if missing:
        raise ValidationError(
            f"Missing required fields in AI response: {', '.join(missing)}", raw_text
        )

    fields: Dict[str, Any] = {}
    fields["rating"] = _check_range("rating", data["rating"], RATING_BOUNDS, raw_text)
    for name in spec.score_fields:
        fields[name] = _check_range(name, data[name], SCORE_BOUNDS, raw_text)

    for name in spec.required_fields:
        if name in fields:
            continue
        value = data[name]
        if not isinstance(value, str):
            raise ValidationError(f"{name} must be a string", raw_text)
        value = value.strip()
        if name in spec.tooltip_fields:
            value = value[:TOOLTIP_MAX_CHARS].rstrip()
        fields[spec.column_names.get(name, name)] = value

    return Assessment(version=version, fields=fields)


def score_tooltip_columns(version: SchemaVersion = DEFAULT_SCHEMA) -> List[Tuple[str, str]]:
    """(score column, tooltip column) pairs that must be stored together."""
    spec = SCHEMAS[version]
    return [
        (score, spec.column_names.get(tooltip, tooltip))
        for score, tooltip in zip(spec.score_fields, spec.tooltip_fields)
    ]


def parse_version(value: Optional[str]) -> SchemaVersion:
    """Resolve 'v1'/'v2'/'v3' (case-insensitive); None gives the default."""
    if not value:
        return DEFAULT_SCHEMA
    try:
        return SchemaVersion(value.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown schema version: {value}") from None
