import re

import pytest

from sql_script_generator import PLACEHOLDER_IDENTIFIER, parse_reference, to_sql_identifier

IDENTIFIER_RE = re.compile(r"^[A-Z_][A-Z0-9_]*$")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Course", "COURSE"),
        ("  Course Fee ", "COURSE_FEE"),
        ("Price (€)", "PRICE"),
        ("price-per-unit", "PRICE_PER_UNIT"),
        ("1st Place", "_1ST_PLACE"),
        ("_1abc_", "_1ABC"),
        ("__internal__", "INTERNAL"),
        ("", PLACEHOLDER_IDENTIFIER),
        ("   ", PLACEHOLDER_IDENTIFIER),
        ("@@@", PLACEHOLDER_IDENTIFIER),
        (None, PLACEHOLDER_IDENTIFIER),
    ],
)
def test_sanitized_names(raw, expected):
    assert to_sql_identifier(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["", "!!", "9", "42 items", "Größe", "a b c", "_", "x__y", "Ünïcödé 123", "__9__", "MainRelation"],
)
def test_sanitizer_is_total_and_idempotent(raw):
    once = to_sql_identifier(raw)
    assert once
    assert IDENTIFIER_RE.match(once)
    assert to_sql_identifier(once) == once


def test_parse_reference():
    assert parse_reference("UNI_COURSE_DETAILS(COURSE)") == ("UNI_COURSE_DETAILS", "COURSE")


def test_parse_reference_rejects_malformed_text():
    with pytest.raises(ValueError):
        parse_reference("COURSE_DETAILS.COURSE")
