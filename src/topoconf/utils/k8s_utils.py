from decimal import Decimal, InvalidOperation
from typing import Optional, Union

INT64_MAX = 2**63 - 1
INT64_MIN = -(2**63)

_BINARY_SUFFIXES = {
    "Ki": 1024,
    "Mi": 1024**2,
    "Gi": 1024**3,
    "Ti": 1024**4,
    "Pi": 1024**5,
    "Ei": 1024**6,
}

_DECIMAL_SUFFIXES = {
    "n": Decimal("0.000000001"),
    "u": Decimal("0.000001"),
    "m": Decimal("0.001"),
    "k": Decimal(1000),
    "M": Decimal(1000**2),
    "G": Decimal(1000**3),
    "T": Decimal(1000**4),
    "P": Decimal(1000**5),
    "E": Decimal(1000**6),
}


def parse_quantity(quantity: Union[str, int, float, Decimal]) -> Decimal:
    """
    Parse kubernetes quantity to Decimal.
    Adapted from kubernetes-python utils.

    Raises:
        ValueError: If the quantity is not a valid Kubernetes quantity.
    """
    if quantity is None or isinstance(quantity, bool):
        raise ValueError(f"invalid quantity: {quantity!r}")
    if isinstance(quantity, (int, float, Decimal)):
        return Decimal(quantity)

    quantity = str(quantity).strip()
    number = quantity
    multiplier: Union[int, Decimal] = 1

    # Binary SI suffixes take precedence over the single-letter decimal ones
    if quantity[-2:] in _BINARY_SUFFIXES:
        number = quantity[:-2]
        multiplier = _BINARY_SUFFIXES[quantity[-2:]]
    elif quantity[-1:] in _DECIMAL_SUFFIXES:
        number = quantity[:-1]
        multiplier = _DECIMAL_SUFFIXES[quantity[-1:]]

    try:
        value = Decimal(number)
    except InvalidOperation as e:
        raise ValueError(f"invalid quantity: {quantity!r}") from e
    if not value.is_finite():
        raise ValueError(f"invalid quantity: {quantity!r}")

    try:
        return value * multiplier
    except ArithmeticError as e:
        raise ValueError(f"quantity out of range: {quantity!r}") from e


def quantity_as_int64(quantity: Union[str, int, float, Decimal]) -> Optional[int]:
    """
    Returns the quantity as an exact int64, or None when it has a fractional
    part, does not fit in 64 bits, or cannot be parsed.
    """
    try:
        value = parse_quantity(quantity)
        # int64 never needs more than 19 digits
        if value.adjusted() > 18 or value != value.to_integral_value():
            return None
        result = int(value)
    except (ValueError, ArithmeticError):
        return None
    if result < INT64_MIN or result > INT64_MAX:
        return None
    return result
