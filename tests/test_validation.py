import pytest
from fastapi import HTTPException

from finscope.core.validation import parse_amount, parse_optional_amount


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (2500, 2500.0),
        (2500.5, 2500.5),
        ("2500.50", 2500.5),
        ("2,500.50", 2500.5),
        ("2.500,50", 2500.5),
        ("£2,500.50", 2500.5),
        ("1,234", 1234.0),
        ("12,5", 12.5),
        ("(1,234.56)", -1234.56),
        ("-40", -40.0),
        (" $ 99 ", 99.0),
    ],
)
def test_parse_amount_formats(raw, expected):
    assert parse_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize(
    "raw", [None, "", "   ", "abc", "12..5", True, float("nan"), float("inf"), float("-inf"), "nan", "Infinity"]
)
def test_parse_amount_rejects_invalid(raw):
    with pytest.raises(HTTPException) as exc_info:
        parse_amount(raw, "Monthly income")

    assert exc_info.value.status_code == 400


def test_parse_amount_error_names_field():
    with pytest.raises(HTTPException) as exc_info:
        parse_amount(None, "Monthly income")

    assert exc_info.value.detail == "Monthly income is required"


@pytest.mark.parametrize("raw", [None, "", "  "])
def test_parse_optional_amount_blank_is_none(raw):
    assert parse_optional_amount(raw, "Credit score") is None


def test_parse_optional_amount_parses_value():
    assert parse_optional_amount("720", "Credit score") == 720.0
