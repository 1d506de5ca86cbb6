"""Decimal money helpers shared by the schedule generator and allocator."""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from microledger.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from microledger.exceptions import InvalidAmountError

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Convert a number or numeric string to Decimal.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.

    Raises
    ------
    TypeError
        If the value is not numeric.
    decimal.InvalidOperation
        If a string cannot be parsed.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Booleans are not money")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, (float, str)):
        return Decimal(str(value).strip())
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")


def quantize_money(value: Decimal, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> Decimal:
    """Round to the money quantum (half up)."""
    return value.quantize(config.money_quantum, rounding=ROUND_HALF_UP)


def floor_to_unit(value: Decimal, unit: Decimal) -> Decimal:
    """Round down to a multiple of ``unit`` (e.g. 916.67 -> 900 for unit 100)."""
    return (value / unit).to_integral_value(rounding=ROUND_FLOOR) * unit


def clamp_non_negative(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO


def validate_payment_amount(value: Any) -> Decimal:
    """Return the payment amount as Decimal or raise InvalidAmountError."""
    try:
        amount = to_decimal(value)
    except (TypeError, InvalidOperation) as exc:
        raise InvalidAmountError(f"Payment amount {value!r} is not a number") from exc

    if not amount.is_finite():
        raise InvalidAmountError(f"Payment amount {value!r} is not finite")
    if amount <= ZERO:
        raise InvalidAmountError(f"Payment amount must be positive, got {amount}")
    return amount
