from __future__ import annotations

import functools
import re
from decimal import Decimal, InvalidOperation, localcontext
from fractions import Fraction
from typing import Any, Union

from pydantic_core import core_schema

# One siacoin expressed in hastings, the smallest indivisible unit.
SIACOIN_PRECISION = 10 ** 24

MAX_UINT64 = 2 ** 64 - 1

# Network fee charged on contract value (3.9%).
TAX_RATE = Fraction(39, 1000)

_UNITS = {
    "pS": 10 ** 12,
    "nS": 10 ** 15,
    "uS": 10 ** 18,
    "mS": 10 ** 21,
    "SC": 10 ** 24,
    "KS": 10 ** 27,
    "MS": 10 ** 30,
    "GS": 10 ** 33,
    "TS": 10 ** 36,
}

_AMOUNT_RE = re.compile(r"^\s*([0-9]+(?:\.[0-9]+)?)\s*([A-Za-z]*)\s*$")


class NegativeCurrencyError(ValueError):
    pass


@functools.total_ordering
class Currency:
    """
    Non-negative arbitrary-precision amount measured in hastings.

    Instances are immutable. Arithmetic truncates toward zero the same way
    integer division does, so every operation stays in whole hastings.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Currency expects an int, got {type(value).__name__}")
        if value < 0:
            raise NegativeCurrencyError(f"negative currency value: {value}")
        self._value = value

    # ------------------ construction ------------------

    @classmethod
    def parse(cls, text: str) -> "Currency":
        """
        Parse "500SC", "1.5KS", "100mS", "42H" or a bare hasting count.
        """
        match = _AMOUNT_RE.match(str(text))
        if match is None:
            raise ValueError(f"cannot parse currency amount {text!r}")
        number, unit = match.groups()
        if unit in ("", "H"):
            if "." in number:
                raise ValueError(f"hastings cannot be fractional: {text!r}")
            return cls(int(number))
        multiplier = _UNITS.get(unit)
        if multiplier is None:
            raise ValueError(f"unknown currency unit {unit!r} in {text!r}")
        try:
            with localcontext() as ctx:
                ctx.prec = len(number) + 40
                amount = Decimal(number) * multiplier
        except InvalidOperation as exc:
            raise ValueError(f"cannot parse currency amount {text!r}") from exc
        if amount != amount.to_integral_value():
            raise ValueError(f"{text!r} is not a whole number of hastings")
        return cls(int(amount))

    @classmethod
    def coerce(cls, value: Any) -> "Currency":
        if isinstance(value, Currency):
            return value
        if isinstance(value, bool):
            raise ValueError("booleans are not currency amounts")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            return cls.parse(value)
        raise ValueError(f"cannot convert {type(value).__name__} to Currency")

    # ------------------ arithmetic ------------------

    def add(self, other: "Currency") -> "Currency":
        return Currency(self._value + other._value)

    def sub(self, other: "Currency") -> "Currency":
        if other._value > self._value:
            raise NegativeCurrencyError(f"{self} - {other} would be negative")
        return Currency(self._value - other._value)

    def mul64(self, n: int) -> "Currency":
        return Currency(self._value * n)

    def mul_rat(self, ratio: Fraction) -> "Currency":
        if ratio < 0:
            raise NegativeCurrencyError(f"cannot multiply currency by {ratio}")
        return Currency(self._value * ratio.numerator // ratio.denominator)

    def mul_float(self, x: float) -> "Currency":
        # Fraction(float) is exact, so no precision is lost before truncation.
        return self.mul_rat(Fraction(x))

    def mul_tax(self) -> "Currency":
        return self.mul_rat(TAX_RATE)

    def div64(self, n: int) -> "Currency":
        if n == 0:
            raise ZeroDivisionError("currency divided by zero")
        return Currency(self._value // n)

    def div(self, other: "Currency") -> "Currency":
        if other._value == 0:
            raise ZeroDivisionError("currency divided by zero currency")
        return Currency(self._value // other._value)

    # ------------------ inspection ------------------

    def is_zero(self) -> bool:
        return self._value == 0

    def cmp(self, other: "Currency") -> int:
        return (self._value > other._value) - (self._value < other._value)

    def big(self) -> int:
        return self._value

    def uint64(self) -> int:
        """Value as an unsigned 64-bit integer, saturating at 2**64 - 1."""
        return min(self._value, MAX_UINT64)

    def human_string(self) -> str:
        if self._value < _UNITS["pS"]:
            return f"{self._value} H"
        unit, scale = "pS", _UNITS["pS"]
        for name, size in _UNITS.items():
            if self._value >= size:
                unit, scale = name, size
        with localcontext() as ctx:
            ctx.prec = len(str(self._value)) + 4
            amount = (Decimal(self._value) / Decimal(scale)).quantize(Decimal("0.001"))
            return f"{amount.normalize():f} {unit}"

    # ------------------ dunder ------------------

    def __add__(self, other: "Currency") -> "Currency":
        return self.add(other)

    def __sub__(self, other: "Currency") -> "Currency":
        return self.sub(other)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Currency):
            return self._value == other._value
        return NotImplemented

    def __lt__(self, other: "Currency") -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(("Currency", self._value))

    def __bool__(self) -> bool:
        return self._value != 0

    def __int__(self) -> int:
        return self._value

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"Currency({self._value})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(str, when_used="json"),
        )


ZERO = Currency(0)
SMALLEST_NONZERO = Currency(1)


def siacoins(amount: Union[int, str]) -> Currency:
    """Shorthand for building an amount from whole or decimal siacoins."""
    return Currency.parse(f"{amount}SC")
