"""
Resource Quantity
Exact decimal resource quantities with Kubernetes-style canonical formatting
"""

import re
from decimal import Decimal, Context, ROUND_UP
from typing import Tuple, Union

from kubernetes.utils import parse_quantity

DECIMAL_SI = "DecimalSI"
BINARY_SI = "BinarySI"
DECIMAL_EXPONENT = "DecimalExponent"

# Wide enough that summing cluster-sized quantities never rounds
_CONTEXT = Context(prec=64)

_NANO = Decimal("1e-9")

_DECIMAL_SUFFIXES = {
    -9: "n",
    -6: "u",
    -3: "m",
    0: "",
    3: "k",
    6: "M",
    9: "G",
    12: "T",
    15: "P",
    18: "E",
}

_BINARY_SUFFIXES = ["", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei"]

_EXPONENT_PATTERN = re.compile(r"^[+-]?[0-9.]+[eE][+-]?[0-9]+$")


def _detect_format(text: str) -> str:
    """Infer the quantity format from its suffix"""
    if len(text) >= 2 and text.endswith("i"):
        return BINARY_SI
    if _EXPONENT_PATTERN.match(text):
        return DECIMAL_EXPONENT
    return DECIMAL_SI


def _canonical_decimal(value: Decimal) -> Tuple[int, int]:
    """
    Split a non-negative value into (mantissa, exponent) with the exponent
    lowered to a multiple of three and the mantissa an integer.
    """
    _, digits, exponent = value.as_tuple()
    mantissa = int("".join(str(d) for d in digits) or "0")

    while mantissa and mantissa % 10 == 0:
        mantissa //= 10
        exponent += 1

    remainder = exponent % 3
    if remainder == 1:
        mantissa *= 10
        exponent -= 1
    elif remainder == 2:
        mantissa *= 100
        exponent -= 2

    return mantissa, exponent


class Quantity:
    """Immutable resource quantity: exact decimal value plus display format"""

    __slots__ = ("value", "format")

    def __init__(self, value: Union[int, str, Decimal] = 0, format: str = DECIMAL_SI):
        value = Decimal(value)
        if not value.is_finite():
            raise ValueError(f"Quantity must be finite, got {value}")
        if value.as_tuple().exponent < -9:
            value = value.quantize(_NANO, rounding=ROUND_UP)
        self.value = value
        self.format = format

    @classmethod
    def parse(cls, quantity: Union[str, int, float, Decimal]) -> "Quantity":
        """
        Parse a Kubernetes quantity string such as '500m', '2Gi' or '1e3'.

        Raises:
            ValueError: if the string is not a valid quantity
        """
        if isinstance(quantity, Quantity):
            return quantity
        text = str(quantity).strip()
        return cls(parse_quantity(text), _detect_format(text))

    def is_zero(self) -> bool:
        return self.value == 0

    def __add__(self, other: "Quantity") -> "Quantity":
        if not isinstance(other, Quantity):
            return NotImplemented
        fmt = other.format if self.is_zero() else self.format
        return Quantity(_CONTEXT.add(self.value, other.value), fmt)

    def __float__(self) -> float:
        return float(self.value)

    def __eq__(self, other) -> bool:
        if isinstance(other, Quantity):
            return self.value == other.value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __repr__(self) -> str:
        return f"Quantity('{self}')"

    def __str__(self) -> str:
        """Canonical text form, e.g. '1500m', '512Mi', '2k'"""
        if self.is_zero():
            return "0"

        sign = "-" if self.value < 0 else ""
        magnitude = abs(self.value)

        fmt = self.format
        if fmt == BINARY_SI:
            # Small or fractional byte counts read better in decimal
            if magnitude < 1024 or magnitude != magnitude.to_integral_value():
                fmt = DECIMAL_SI

        if fmt == BINARY_SI:
            number = int(magnitude)
            power = 0
            while number % 1024 == 0 and power < len(_BINARY_SUFFIXES) - 1:
                number //= 1024
                power += 1
            return f"{sign}{number}{_BINARY_SUFFIXES[power]}"

        mantissa, exponent = _canonical_decimal(magnitude)
        if fmt == DECIMAL_EXPONENT:
            suffix = f"e{exponent}" if exponent else ""
        elif exponent > 18:
            suffix = f"e{exponent}"
        else:
            suffix = _DECIMAL_SUFFIXES[exponent]
        return f"{sign}{mantissa}{suffix}"
