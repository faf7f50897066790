from __future__ import annotations

from typing import Protocol

FREE_DAYS = 14
FEE_PER_DAY = 0.50


def _require_days(days: int) -> None:
    """
    Validates that days is a non-negative integer.
    """
    if isinstance(days, bool) or not isinstance(days, int):
        raise ValueError("days must be an integer")
    if days < 0:
        raise ValueError("days cannot be negative")


def calculate_late_fee(days: int, free_days: int = FREE_DAYS, per_day: float = FEE_PER_DAY) -> float:
    """
    Late fee for a checkout of the given length.

    Fee rule:
        nothing for the first `free_days` days, then `per_day` for each day after.

    Example:
        21 days => (21 - 14) * 0.50 = 3.50
    """
    _require_days(days)
    if days <= free_days:
        return 0.0
    return round((days - free_days) * per_day, 2)


class FeePolicy(Protocol):
    def calculate(self, days: int) -> float:
        ...


class LateFeePolicy:
    """Day-based late fee. This is the default policy."""

    def __init__(self, free_days: int = FREE_DAYS, per_day: float = FEE_PER_DAY) -> None:
        if free_days < 0 or per_day < 0:
            raise ValueError("free_days and per_day must be non-negative")
        self.free_days = free_days
        self.per_day = per_day

    def calculate(self, days: int) -> float:
        return calculate_late_fee(days, self.free_days, self.per_day)


class FlatFeePolicy:
    """Same fee for every checkout, whatever its length."""

    def __init__(self, amount: float) -> None:
        if amount < 0:
            raise ValueError("amount must be non-negative")
        self.amount = round(float(amount), 2)

    def calculate(self, days: int) -> float:
        _require_days(days)
        return self.amount
