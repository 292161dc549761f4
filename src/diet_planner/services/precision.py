"""Exact decimal arithmetic for user-entered quantities.

Binary floats turn ``150 * 1`` into ``149.9`` once rounding is chained, so
every operation here converts its operands to :class:`decimal.Decimal`,
computes exactly and rounds once (half-up) at the end. Input is accepted with
either a Polish comma or a dot as the decimal separator. Nothing in this
module raises on bad input: it logs a warning and falls back to zero or to the
caller's default.
"""

import logging
import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation

_logger = logging.getLogger(__name__)

_CONTEXT = Context(prec=28, rounding=ROUND_HALF_UP)
_ZERO = Decimal(0)
_POLISH_NUMBER = re.compile(r"-?\d*[,.]?\d*")
# Floats carry no digits beyond this many decimal places.
_MAX_PLACES = 400

QUANTITY_MIN = 0.1
QUANTITY_MAX = 9999

Numeric = int | float | str | Decimal | None


@dataclass(frozen=True)
class QuantityValidation:
    """Result of clamping a quantity typed by the user."""

    is_valid: bool
    value: float
    error: str | None = None


def to_decimal(value: Numeric) -> Decimal:
    """Convert user input to an exact decimal, mapping anything invalid to 0."""
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else _ZERO
    if isinstance(value, str):
        normalized = _normalize_polish(value)
        if not normalized:
            return _ZERO
        try:
            return Decimal(normalized)
        except InvalidOperation:
            _logger.warning("Invalid number format: %r, defaulting to 0", value)
            return _ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            _logger.warning("Invalid number value: %r, defaulting to 0", value)
            return _ZERO
        # repr gives the shortest round-tripping form, so 0.1 stays 0.1.
        return Decimal(repr(value))
    return _ZERO


def round_decimal(value: Decimal, decimals: int = 1) -> float:
    """Round half-up to ``decimals`` places and return a float."""
    rounded = _quantize(value, decimals)
    if rounded is None:
        return 0.0
    result = float(rounded)
    if not math.isfinite(result):
        _logger.warning("Result out of float range: %s, returning 0", value)
        return 0.0
    return result


def precise_multiply(a: Numeric, b: Numeric, decimals: int = 1) -> float:
    """Multiply exactly and round once."""
    result = _CONTEXT.multiply(to_decimal(a), to_decimal(b))
    return round_decimal(result, decimals)


def precise_divide(a: Numeric, b: Numeric, decimals: int = 1) -> float:
    """Divide exactly and round once; a zero or empty divisor yields 0."""
    divisor = to_decimal(b)
    if divisor.is_zero():
        _logger.warning("Division by zero: %r / %r, returning 0", a, b)
        return 0.0
    result = _CONTEXT.divide(to_decimal(a), divisor)
    return round_decimal(result, decimals)


def precise_add(a: Numeric, b: Numeric, decimals: int = 1) -> float:
    """Add exactly and round once."""
    result = _CONTEXT.add(to_decimal(a), to_decimal(b))
    return round_decimal(result, decimals)


def parse_polish_number_safe(value: Numeric, default: float = 0.0) -> float:
    """Parse a Polish formatted number, returning ``default`` on rejection.

    Strings with more than one comma, more than one dot or any character
    other than digits, a leading minus and one separator are rejected.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return float(value) if value.is_finite() else default
    if isinstance(value, int | float):
        number = float(value)
        return number if math.isfinite(number) else default
    if not isinstance(value, str):
        return default

    normalized = _normalize_polish(value)
    if not normalized:
        return default
    try:
        parsed = float(normalized)
    except ValueError:
        _logger.warning("Failed to parse number: %r", value)
        return default
    return parsed if math.isfinite(parsed) else default


def validate_quantity_input(
    value: Numeric,
    minimum: float = QUANTITY_MIN,
    maximum: float = QUANTITY_MAX,
) -> QuantityValidation:
    """Parse a quantity and clamp it to ``[minimum, maximum]``."""
    parsed = parse_polish_number_safe(value)
    if parsed < minimum:
        return QuantityValidation(
            is_valid=False,
            value=float(minimum),
            error=f"Wartość musi być większa niż {_format_bound(minimum)}",
        )
    if parsed > maximum:
        return QuantityValidation(
            is_valid=False,
            value=float(maximum),
            error=f"Wartość nie może być większa niż {_format_bound(maximum)}",
        )
    return QuantityValidation(is_valid=True, value=parsed)


def format_polish_number(value: Numeric, decimals: int | None = None) -> str:
    """Format a number with a decimal comma, dropping trailing zeros.

    ``decimals`` caps the fractional digits (one by default); ``None`` or
    non-finite input renders as ``"0"``.
    """
    number = parse_polish_number_safe(value, 0.0)
    places = 1 if decimals is None else max(decimals, 0)
    rounded = _quantize(to_decimal(number), places)
    if rounded is None:
        return "0"
    text = f"{rounded:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in {"", "-0"}:
        return "0"
    return text.replace(".", ",")


def _normalize_polish(value: str) -> str | None:
    """Return ``value`` with a dot separator, or None when it is not a plain number.

    Exponents, digit grouping and repeated separators are rejected.
    """
    trimmed = value.strip()
    if not trimmed:
        return None
    if trimmed.count(",") > 1 or trimmed.count(".") > 1:
        _logger.warning("Invalid number format (multiple separators): %r", value)
        return None
    if not _POLISH_NUMBER.fullmatch(trimmed):
        _logger.warning("Invalid number format (non-numeric chars): %r", value)
        return None
    return trimmed.replace(",", ".")


def _quantize(value: Decimal, places: int) -> Decimal | None:
    """Round half-up to ``places`` with enough precision for the whole result."""
    places = min(places, _MAX_PLACES)
    exponent = Decimal(1).scaleb(-places)
    digits = max(value.adjusted(), 0) + max(places, 0) + 2
    context = Context(prec=max(_CONTEXT.prec, digits), rounding=ROUND_HALF_UP)
    try:
        return value.quantize(exponent, context=context)
    except InvalidOperation:
        _logger.warning("Cannot round %s to %s places, returning 0", value, places)
        return None


def _format_bound(bound: float) -> str:
    number = float(bound)
    return str(int(number)) if number.is_integer() else str(number)
