import json

import pytest

from conftest import v3_payload
from dream_monitor.analysis.schema import (
    SchemaVersion,
    parse_assessment,
    parse_version,
    score_tooltip_columns,
    strip_code_fences,
)
from dream_monitor.errors import ParseError, ValidationError


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'


def test_parse_v3_maps_tip_to_tooltip_column():
    assessment = parse_assessment(json.dumps(v3_payload()))
    cols = assessment.to_columns()

    assert assessment.rating == 7.2
    assert cols["prod_labor_score"] == 45.0
    assert cols["prod_labor_tooltip"] == "Output per hour rises faster than pay."
    assert "prod_labor_tip" not in cols
    assert cols["american_dream_tooltip"].startswith("Mobility")


def test_fenced_output_parses():
    text = "```json\n" + json.dumps(v3_payload()) + "\n```"
    assert parse_assessment(text).rating == 7.2


def test_invalid_json_is_parse_error():
    with pytest.raises(ParseError) as excinfo:
        parse_assessment("The outlook is mixed. Rating: 6")
    assert excinfo.value.raw_text == "The outlook is mixed. Rating: 6"


def test_json_array_is_parse_error():
    with pytest.raises(ParseError):
        parse_assessment("[1, 2, 3]")


def test_missing_fields_are_listed():
    payload = v3_payload()
    del payload["summary"]
    payload["american_dream_tooltip"] = "   "

    with pytest.raises(ValidationError) as excinfo:
        parse_assessment(json.dumps(payload))
    assert "summary" in str(excinfo.value)
    assert "american_dream_tooltip" in str(excinfo.value)


@pytest.mark.parametrize("rating", [0, 11, -3, 10.5, 10**400, -(10**400)])
def test_rating_out_of_range(rating):
    with pytest.raises(ValidationError, match="rating"):
        parse_assessment(json.dumps(v3_payload(rating=rating)))


def test_oversized_score_is_validation_error():
    with pytest.raises(ValidationError, match="american_dream_score"):
        parse_assessment(json.dumps(v3_payload(american_dream_score=10**400)))


def test_integer_past_digit_limit_is_rejected():
    text = json.dumps(v3_payload()).replace('"rating": 7.2', '"rating": 1' + "0" * 5000)
    assert "0" * 5000 in text
    with pytest.raises((ParseError, ValidationError)):
        parse_assessment(text)


@pytest.mark.parametrize("rating", [1, 10, 5.5])
def test_rating_bounds_inclusive(rating):
    assert parse_assessment(json.dumps(v3_payload(rating=rating))).rating == rating


def test_rating_must_be_numeric():
    with pytest.raises(ValidationError):
        parse_assessment(json.dumps(v3_payload(rating="7")))
    with pytest.raises(ValidationError):
        parse_assessment(json.dumps(v3_payload(rating=True)))


def test_score_out_of_range():
    with pytest.raises(ValidationError, match="american_dream_score"):
        parse_assessment(json.dumps(v3_payload(american_dream_score=101)))


def test_tooltips_truncated():
    long_tip = "x" * 300
    cols = parse_assessment(json.dumps(v3_payload(prod_labor_tip=long_tip))).to_columns()
    assert len(cols["prod_labor_tooltip"]) == 120


def test_v1_only_needs_rating_and_summary():
    text = json.dumps({"rating": 4, "summary": "Displacement is accelerating."})
    cols = parse_assessment(text, SchemaVersion.V1).to_columns()
    assert cols == {"rating": 4.0, "summary": "Displacement is accelerating."}


def test_v2_requires_insights():
    text = json.dumps({"rating": 4, "summary": "s"})
    with pytest.raises(ValidationError, match="productivity_insight"):
        parse_assessment(text, SchemaVersion.V2)


def test_score_tooltip_columns_and_version_parsing():
    assert score_tooltip_columns() == [
        ("prod_labor_score", "prod_labor_tooltip"),
        ("american_dream_score", "american_dream_tooltip"),
    ]
    assert score_tooltip_columns(SchemaVersion.V1) == []
    assert parse_version(None) is SchemaVersion.V3
    assert parse_version("V2") is SchemaVersion.V2
    with pytest.raises(ValueError):
        parse_version("v9")
