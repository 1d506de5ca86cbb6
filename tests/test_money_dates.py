"""Tests for money and calendar helpers."""

from datetime import date
from decimal import Decimal, InvalidOperation

import pytest

from microledger.config import EngineConfig
from microledger.engine.dates import add_months, add_periods, duration_in_months, duration_in_weeks
from microledger.engine.money import (
    clamp_non_negative,
    floor_to_unit,
    quantize_money,
    to_decimal,
    validate_payment_amount,
)
from microledger.exceptions import InvalidAmountError
from microledger.models import Periodicity


class TestToDecimal:
    """Tests for to_decimal."""

    def test_float_uses_shortest_repr(self) -> None:
        assert to_decimal(0.1) == Decimal("0.1")

    def test_string_and_int(self) -> None:
        assert to_decimal(" 1500.50 ") == Decimal("1500.50")
        assert to_decimal(7) == Decimal(7)

    def test_decimal_passes_through(self) -> None:
        value = Decimal("3.14")
        assert to_decimal(value) is value

    @pytest.mark.parametrize("value", [True, None, [1]])
    def test_rejects_non_numbers(self, value) -> None:
        with pytest.raises(TypeError):
            to_decimal(value)

    def test_rejects_bad_strings(self) -> None:
        with pytest.raises(InvalidOperation):
            to_decimal("twelve")


class TestRounding:
    """Tests for quantize_money and floor_to_unit."""

    def test_quantize_rounds_half_up(self) -> None:
        assert quantize_money(Decimal("10.005")) == Decimal("10.01")
        assert quantize_money(Decimal("10.004")) == Decimal("10.00")

    def test_quantize_with_custom_quantum(self) -> None:
        config = EngineConfig(money_quantum=Decimal("1"))
        assert quantize_money(Decimal("10.5"), config) == Decimal("11")

    @pytest.mark.parametrize(
        "value,unit,expected",
        [
            (Decimal("916.67"), Decimal("100"), Decimal("900")),
            (Decimal("900"), Decimal("100"), Decimal("900")),
            (Decimal("99.99"), Decimal("100"), Decimal("0")),
            (Decimal("916.67"), Decimal("1"), Decimal("916")),
        ],
    )
    def test_floor_to_unit(self, value: Decimal, unit: Decimal, expected: Decimal) -> None:
        assert floor_to_unit(value, unit) == expected

    def test_clamp_non_negative(self) -> None:
        assert clamp_non_negative(Decimal("-0.01")) == Decimal("0")
        assert clamp_non_negative(Decimal("5")) == Decimal("5")


class TestValidatePaymentAmount:
    """Tests for validate_payment_amount."""

    def test_valid_amount(self) -> None:
        assert validate_payment_amount("250.75") == Decimal("250.75")

    @pytest.mark.parametrize("value", [0, -1, "", "abc", None, float("inf"), Decimal("NaN")])
    def test_invalid_amounts(self, value) -> None:
        with pytest.raises(InvalidAmountError):
            validate_payment_amount(value)


class TestDates:
    """Tests for calendar arithmetic."""

    def test_add_months_clamps_to_month_end(self) -> None:
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 11, 15), 2) == date(2025, 1, 15)

    def test_add_periods_from_start(self) -> None:
        start = date(2024, 1, 31)

        assert add_periods(start, Periodicity.MONTHLY, 2) == date(2024, 3, 31)
        assert add_periods(start, Periodicity.DAILY, 1) == date(2024, 2, 1)
        assert add_periods(start, Periodicity.WEEKLY, 2) == date(2024, 2, 14)
        assert add_periods(start, Periodicity.BIWEEKLY, 2) == date(2024, 3, 1)

    @pytest.mark.parametrize(
        "periodicity,count,weeks",
        [
            (Periodicity.WEEKLY, 6, Decimal(6)),
            (Periodicity.BIWEEKLY, 4, Decimal(8)),
            (Periodicity.MONTHLY, 12, Decimal(48)),
            (Periodicity.DAILY, 14, Decimal(2)),
        ],
    )
    def test_duration_in_weeks(self, periodicity: Periodicity, count: int, weeks: Decimal) -> None:
        assert duration_in_weeks(periodicity, count) == weeks

    def test_duration_in_months(self) -> None:
        assert duration_in_months(Periodicity.MONTHLY, 12) == Decimal(12)
        assert duration_in_months(Periodicity.WEEKLY, 6) == Decimal("1.5")
        assert duration_in_months(Periodicity.DAILY, 28) == Decimal(1)
