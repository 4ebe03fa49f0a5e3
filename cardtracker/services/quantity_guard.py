"""
Saturating arithmetic for card quantities.

Every quantity stored by the application lives in [0, INT32_MAX].
These helpers are the only way counters are changed: callers never
add a delta with raw `+` and store the result directly.

Python integers do not overflow, so the sum is always exact before
it is clamped. A huge positive delta saturates at INT32_MAX and a
huge negative delta saturates at 0; neither wraps.
"""

MINIMUM_QUANTITY = 0
MAXIMUM_QUANTITY = 2**31 - 1  # INT32_MAX, the column width


def clamp(value: int) -> int:
    """
    Clamp a quantity into [0, INT32_MAX].

    For values already within the 32-bit range this is max(value, 0).
    """
    if value < MINIMUM_QUANTITY:
        return MINIMUM_QUANTITY
    if value > MAXIMUM_QUANTITY:
        return MAXIMUM_QUANTITY
    return value


def clamp_delta(current: int, delta: int) -> int:
    """Add a signed delta to a quantity and clamp the result."""
    return clamp(current + delta)
