"""Tests for saturating quantity arithmetic."""

import pytest

from cardtracker.services.availability import calculate_availability
from cardtracker.services.quantity_guard import MAXIMUM_QUANTITY, clamp, clamp_delta

INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class TestClamp:
    @pytest.mark.parametrize("value", [0, 1, 7, 1_000_000, INT32_MAX])
    def test_in_range_values_unchanged(self, value: int) -> None:
        """Values already in [0, INT32_MAX] pass through."""
        assert clamp(value) == value

    @pytest.mark.parametrize("value", [-1, -500, -(2**31), INT64_MIN])
    def test_negative_values_floor_at_zero(self, value: int) -> None:
        """Anything below zero becomes zero."""
        assert clamp(value) == 0

    @pytest.mark.parametrize("value", [INT32_MAX + 1, 2**40, INT64_MAX])
    def test_large_values_cap_at_int32_max(self, value: int) -> None:
        """Anything above INT32_MAX becomes INT32_MAX."""
        assert clamp(value) == INT32_MAX

    def test_maximum_constant(self) -> None:
        assert MAXIMUM_QUANTITY == INT32_MAX


class TestClampDelta:
    def test_simple_addition(self) -> None:
        assert clamp_delta(3, 4) == 7

    def test_negative_delta_floors_at_zero(self) -> None:
        """Removing more than held leaves zero, not a negative count."""
        assert clamp_delta(3, -10) == 0

    def test_overflowing_delta_saturates(self) -> None:
        """Adding to a full counter stays at the maximum."""
        assert clamp_delta(INT32_MAX, 1) == INT32_MAX
        assert clamp_delta(INT32_MAX - 1, INT32_MAX) == INT32_MAX

    def test_extreme_negative_delta(self) -> None:
        assert clamp_delta(INT32_MAX, INT64_MIN) == 0

    def test_result_always_in_range(self) -> None:
        """Every combination lands in [0, INT32_MAX]."""
        samples = [0, 1, INT32_MAX, -1, INT64_MIN, INT64_MAX, 2**31, -(2**31)]
        for current in (0, 1, 42, INT32_MAX):
            for delta in samples:
                result = clamp_delta(current, delta)
                assert 0 <= result <= INT32_MAX


class TestCalculateAvailability:
    def test_without_assignment(self) -> None:
        assert calculate_availability(owned=8, proxy=2) == (8, 10)

    def test_assigned_reduces_both(self) -> None:
        assert calculate_availability(owned=4, proxy=2, assigned=3) == (1, 3)

    def test_over_assigned_floors_at_zero(self) -> None:
        """A deck claiming more than owned never reports negative availability."""
        assert calculate_availability(owned=1, proxy=1, assigned=5) == (0, 0)

    def test_with_proxies_saturates(self) -> None:
        assert calculate_availability(owned=INT32_MAX, proxy=INT32_MAX) == (INT32_MAX, INT32_MAX)
