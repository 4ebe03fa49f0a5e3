"""Derived availability figures for owned and proxy copies."""

from cardtracker.services.quantity_guard import clamp, clamp_delta


def calculate_availability(owned: int, proxy: int, assigned: int = 0) -> tuple[int, int]:
    """
    Copies free for use, without and with proxies.

    `assigned` is what a deck already claims; results floor at zero.
    """
    available = clamp_delta(owned, -assigned)
    available_with_proxies = clamp(owned + proxy - assigned)
    return available, available_with_proxies
