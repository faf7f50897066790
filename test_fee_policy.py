import pytest

from fee_policy import FlatFeePolicy, LateFeePolicy, calculate_late_fee


@pytest.mark.parametrize("days", [0, 1, 7, 13, 14])
def test_no_fee_within_free_period(days):
    assert calculate_late_fee(days) == 0


@pytest.mark.parametrize(
    "days,expected",
    [
        (15, 0.5),
        (21, 3.5),  # scenario from the checkout walkthrough
        (30, 8.0),
        (100, 43.0),
    ],
)
def test_fee_after_free_period(days, expected):
    assert calculate_late_fee(days) == expected


@pytest.mark.parametrize("bad", [-1, 2.5, "21", None, True])
def test_invalid_days_rejected(bad):
    with pytest.raises(ValueError):
        calculate_late_fee(bad)


def test_late_fee_policy_custom_terms():
    policy = LateFeePolicy(free_days=7, per_day=1.25)
    assert policy.calculate(7) == 0
    assert policy.calculate(10) == 3.75


def test_late_fee_policy_rejects_negative_terms():
    with pytest.raises(ValueError):
        LateFeePolicy(free_days=-1)


def test_flat_fee_policy_ignores_length():
    policy = FlatFeePolicy(1.5)
    assert policy.calculate(1) == 1.5
    assert policy.calculate(60) == 1.5
    with pytest.raises(ValueError):
        policy.calculate(-3)
