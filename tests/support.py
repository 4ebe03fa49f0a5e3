"""Shared test data types and helpers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Catalog:
    """Ids of the users and printings created for a test."""

    admin_id: int
    user_id: int
    other_user_id: int
    bolt_alpha_id: int
    bolt_beta_id: int
    pikachu_id: int


def as_user(user_id: int) -> dict[str, str]:
    """Request headers identifying the caller."""
    return {"X-User-Id": str(user_id)}
