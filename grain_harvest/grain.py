"""
Exact fixed-point arithmetic for Grain, the currency distributed by harvests.

A Grain amount is stored as an integer count of attograin (10^-18 grain).
Amounts are only ever combined with other amounts using integer arithmetic.
Floating point enters the system in exactly two places:

- `scale_by_ratio`, which multiplies an amount by a ratio and rounds the
  exact product to the nearest attograin (round-half-to-even)
- `from_approximate_float`, which is meant for fixtures and config literals

Ratios (float, int or Fraction) and amounts (Grain) are separate types;
mixing them with `+`, `-` or comparisons raises TypeError.
"""
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Iterable, Union

from grain_harvest.errors import InvalidNumberError

DECIMAL_PRECISION = 18
_SCALE = 10 ** DECIMAL_PRECISION

Ratio = Union[float, int, Fraction]


@dataclass(frozen=True, order=True)
class Grain:
    """An immutable amount of grain, in attograin"""
    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"Grain must wrap an int, got {type(self.value).__name__}")

    def __add__(self, other: "Grain") -> "Grain":
        if not isinstance(other, Grain):
            return NotImplemented
        return Grain(self.value + other.value)

    def __sub__(self, other: "Grain") -> "Grain":
        if not isinstance(other, Grain):
            return NotImplemented
        return Grain(self.value - other.value)

    def __neg__(self) -> "Grain":
        return Grain(-self.value)

    def __str__(self) -> str:
        return str(self.value)


ZERO = Grain(0)
ONE = Grain(_SCALE)


def add(a: Grain, b: Grain) -> Grain:
    return a + b


def subtract(a: Grain, b: Grain) -> Grain:
    """Exact difference; may be negative, callers check sign where it matters"""
    return a - b


def compare(a: Grain, b: Grain) -> int:
    """Return -1, 0 or 1 as a is less than, equal to, or greater than b"""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def sum_grains(amounts: Iterable[Grain]) -> Grain:
    total = ZERO
    for amount in amounts:
        total = total + amount
    return total


def _exact_ratio(ratio: Ratio) -> Fraction:
    if isinstance(ratio, Grain):
        raise TypeError("ratio must be a number, not Grain; use proportion() to divide amounts")
    if isinstance(ratio, bool):
        raise TypeError("ratio must be a number, not bool")
    if isinstance(ratio, (int, Fraction)):
        return Fraction(ratio)
    if isinstance(ratio, float):
        if not math.isfinite(ratio):
            raise InvalidNumberError(ratio)
        return Fraction(ratio)
    raise TypeError(f"ratio must be float, int or Fraction, got {type(ratio).__name__}")


def scale_by_ratio(amount: Grain, ratio: Ratio) -> Grain:
    """
    Multiply an amount by a ratio, rounding to the nearest attograin.

    Float ratios are taken at their exact binary value, and ties round to
    even, so the result is reproducible across platforms.

    Raises:
        InvalidNumberError: If ratio is infinite or NaN
        TypeError: If ratio is not a real number
    """
    return Grain(round(amount.value * _exact_ratio(ratio)))


def proportion(numerator: Grain, denominator: Grain) -> Fraction:
    """Exact ratio of two amounts"""
    if denominator == ZERO:
        raise ZeroDivisionError("proportion of a zero grain amount")
    return Fraction(numerator.value, denominator.value)


def from_approximate_float(x: float) -> Grain:
    """
    Build an amount from a human-entered decimal such as 14 or 0.1.

    The float is read through its shortest decimal representation, so
    from_approximate_float(0.1) is exactly one tenth of ONE. Only for test
    fixtures and configuration literals, never for computed amounts.
    """
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        raise TypeError(f"expected a float, got {type(x).__name__}")
    if not math.isfinite(x):
        raise InvalidNumberError(x)
    return Grain(round(Fraction(Decimal(repr(float(x)))) * _SCALE))


def from_decimal_string(text: str) -> Grain:
    """Exactly parse a decimal grain literal like "1.5" or "-0.25" """
    try:
        parsed = Decimal(text.strip())
    except InvalidOperation as e:
        raise ValueError(f"not a decimal number: {text!r}") from e
    if not parsed.is_finite():
        raise InvalidNumberError(text)
    scaled = Fraction(parsed) * _SCALE
    if scaled.denominator != 1:
        raise ValueError(f"more than {DECIMAL_PRECISION} decimal places: {text!r}")
    return Grain(scaled.numerator)


def from_string(text: str) -> Grain:
    """Parse the raw attograin integer string used in serialized harvests"""
    stripped = text.strip()
    digits = stripped[1:] if stripped.startswith("-") else stripped
    if not digits.isdigit():
        raise ValueError(f"not an integer grain string: {text!r}")
    return Grain(int(stripped))


def format(amount: Grain, decimals: int = 0, suffix: str = "") -> str:
    """
    Render an amount for display.

    The whole part gets comma thousands separators and the fractional part is
    truncated (not rounded) to `decimals` places. Never parse the result back
    into an amount.

    Examples:
        format(ONE) == "1"
        format(from_decimal_string("1234.5678"), 2, "g") == "1,234.56g"
    """
    if not isinstance(decimals, int) or isinstance(decimals, bool) or not 0 <= decimals <= DECIMAL_PRECISION:
        raise ValueError(f"decimals must be an integer in [0, {DECIMAL_PRECISION}], got {decimals!r}")
    sign = "-" if amount.value < 0 else ""
    whole, fraction = divmod(abs(amount.value), _SCALE)
    text = f"{whole:,}"
    if decimals:
        text += "." + str(fraction).zfill(DECIMAL_PRECISION)[:decimals]
    return f"{sign}{text}{suffix}"
