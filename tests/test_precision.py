"""Tests for decimal parsing, arithmetic and formatting."""

from decimal import Decimal

import pytest

from diet_planner.services.precision import (
    format_polish_number,
    parse_polish_number_safe,
    precise_add,
    precise_divide,
    precise_multiply,
    to_decimal,
    validate_quantity_input,
)


@pytest.mark.parametrize("value", [150, 140, 149.9, 0.1, 12.34])
def test_multiply_by_one_does_not_drift(value: float) -> None:
    assert precise_multiply(value, 1) == float(round(Decimal(repr(value)), 1))


def test_multiply_regression_values() -> None:
    assert precise_multiply(150, 1) == 150.0
    assert precise_multiply(140, 1) == 140.0
    assert precise_multiply("1,5", 3) == 4.5


def test_multiply_rounds_half_up() -> None:
    assert precise_multiply(0.25, 1) == 0.3
    assert precise_multiply(1.005, 1, 2) == 1.01


def test_divide_by_zero_returns_zero() -> None:
    assert precise_divide(150, 0) == 0.0
    assert precise_divide(150, "") == 0.0
    assert precise_divide(150, None) == 0.0


def test_divide_and_add() -> None:
    assert precise_divide(100, 3) == 33.3
    assert precise_divide(100, 3, 3) == 33.333
    assert precise_add(0.1, 0.2, 2) == 0.3


@pytest.mark.parametrize(
    ("comma", "dot"), [("12,5", "12.5"), ("0,05", "0.05"), ("-3,75", "-3.75")]
)
def test_parsing_is_separator_insensitive(comma: str, dot: str) -> None:
    assert to_decimal(comma) == to_decimal(dot)
    assert parse_polish_number_safe(comma) == parse_polish_number_safe(dot)
    assert float(to_decimal(comma)) == parse_polish_number_safe(comma)


def test_to_decimal_invalid_input_is_zero() -> None:
    assert to_decimal("abc") == 0
    assert to_decimal(None) == 0
    assert to_decimal("") == 0
    assert to_decimal(float("nan")) == 0
    assert to_decimal(float("inf")) == 0
    assert to_decimal("Infinity") == 0


def test_parse_rejects_malformed_strings() -> None:
    assert parse_polish_number_safe("1,2,3") == 0.0
    assert parse_polish_number_safe("1.2.3") == 0.0
    assert parse_polish_number_safe("12abc", default=7.0) == 7.0
    assert parse_polish_number_safe("   ") == 0.0
    assert parse_polish_number_safe(None, default=1.0) == 1.0
    assert parse_polish_number_safe(float("nan"), default=2.0) == 2.0


def test_parse_accepts_numbers() -> None:
    assert parse_polish_number_safe(" 7,25 ") == 7.25
    assert parse_polish_number_safe(3) == 3.0
    assert parse_polish_number_safe(Decimal("1.5")) == 1.5


def test_validate_quantity_clamps_to_minimum() -> None:
    result = validate_quantity_input("0,05")

    assert result.is_valid is False
    assert result.value == 0.1
    assert result.error == "Wartość musi być większa niż 0.1"


def test_validate_quantity_clamps_to_maximum() -> None:
    result = validate_quantity_input("10000")

    assert result.is_valid is False
    assert result.value == 9999
    assert result.error == "Wartość nie może być większa niż 9999"


def test_validate_quantity_accepts_valid_input() -> None:
    result = validate_quantity_input("150,5")

    assert result.is_valid is True
    assert result.value == 150.5
    assert result.error is None


def test_validate_quantity_garbage_clamps_to_minimum() -> None:
    result = validate_quantity_input("abc", minimum=1, maximum=10)

    assert result.is_valid is False
    assert result.value == 1.0
    assert result.error == "Wartość musi być większa niż 1"


def test_format_polish_number() -> None:
    assert format_polish_number(12.5) == "12,5"
    assert format_polish_number(12.0) == "12"
    assert format_polish_number(1.25) == "1,3"
    assert format_polish_number(1.256, 2) == "1,26"
    assert format_polish_number(1234.5) == "1234,5"
    assert format_polish_number(None) == "0"
    assert format_polish_number(-0.04) == "0"
    assert format_polish_number(float("inf")) == "0"


@pytest.mark.parametrize("text", ["12,5", "0,1", "150", "-2,5"])
def test_format_round_trips_parsed_values(text: str) -> None:
    formatted = format_polish_number(parse_polish_number_safe(text))

    assert parse_polish_number_safe(formatted) == parse_polish_number_safe(text)


def test_to_decimal_rejects_what_parse_rejects() -> None:
    for text in ["1_000", "1e3", "1E-2", "0x10", "1,000.5", "+5", " 1 000 "]:
        assert to_decimal(text) == 0
        assert parse_polish_number_safe(text) == 0.0
    assert precise_add("1_000", 1) == 1.0
    assert precise_multiply("1e3", 2) == 0.0


def test_large_magnitudes_do_not_raise() -> None:
    assert format_polish_number("9" * 29) == "1" + "0" * 29
    assert precise_add("9" * 29, 1) == 1e29
    assert precise_multiply(1e20, 1e10) == 1e30
    assert precise_divide(1e30, 0.5) == 2e30


def test_large_decimal_places_are_capped() -> None:
    assert format_polish_number(1.5, 500) == "1,5"
    assert format_polish_number(0.1, 10_000) == "0,1"
    assert precise_add(0.1, 0.2, decimals=1000) == 0.3
