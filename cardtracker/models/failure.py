"""
Problem details: unified error classification.

Every user-visible failure is classified and rendered as an
RFC 7807 problem document (`application/problem+json`).

Taxonomy:
- NotFound: unknown printing, user, deck or record
- ValidationFailure: structural request-shape violations
- Conflict: state guards such as the last-administrator rule
- Forbidden: caller lacks rights to the resource
- BadRequest: malformed route parameters

A missing or invalid X-User-Id header is NOT a problem document;
it is answered with a plain-text 400 (see MissingUserHeaderError).
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

PROBLEM_CONTENT_TYPE = "application/problem+json"


class FailureKind(str, Enum):
    """Classification of failure types."""

    BAD_REQUEST = "bad_request"
    VALIDATION_FAILED = "validation_failed"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProblemType:
    """Fixed type URI, title and default detail for one status code."""

    type: str
    title: str
    status: int
    default_detail: str


PROBLEM_TYPES: dict[int, ProblemType] = {
    400: ProblemType(
        "https://api.tradingcardgame.tracker/errors/bad-request",
        "Bad Request",
        400,
        "The request parameters were invalid.",
    ),
    403: ProblemType(
        "https://api.tradingcardgame.tracker/errors/forbidden",
        "Forbidden",
        403,
        "You do not have access to this resource.",
    ),
    404: ProblemType(
        "https://api.tradingcardgame.tracker/errors/not-found",
        "Not Found",
        404,
        "The requested resource could not be found.",
    ),
    409: ProblemType(
        "https://api.tradingcardgame.tracker/errors/conflict",
        "Conflict",
        409,
        "A conflicting resource state was detected.",
    ),
    500: ProblemType(
        "https://api.tradingcardgame.tracker/errors/internal-server-error",
        "Internal Server Error",
        500,
        "An unexpected error occurred while processing the request.",
    ),
}


class ProblemDetails(BaseModel):
    """Problem document returned for every classified failure."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = "about:blank"
    title: str
    status: int
    detail: str | None = None
    instance: str | None = None
    trace_id: str | None = Field(default=None, alias="traceId")
    errors: dict[str, list[str]] | None = Field(
        default=None,
        description="Field-level messages (validation problems only)",
    )


def create_problem(
    status_code: int,
    *,
    instance: str | None = None,
    title: str | None = None,
    detail: str | None = None,
    problem_type: str | None = None,
    errors: dict[str, list[str]] | None = None,
    trace_id: str | None = None,
) -> ProblemDetails:
    """
    Build a problem document, filling unset fields from PROBLEM_TYPES.

    Explicit title/detail always win over the per-status defaults.
    """
    known = PROBLEM_TYPES.get(status_code)
    if known is not None:
        problem_type = problem_type or known.type
        title = title or known.title
        detail = detail or known.default_detail

    return ProblemDetails(
        type=problem_type or "about:blank",
        title=title or "Error",
        status=status_code,
        detail=detail,
        instance=instance,
        trace_id=trace_id,
        errors=errors,
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        detail: str | None = None,
        title: str | None = None,
        status_code: int = 400,
        errors: dict[str, list[str]] | None = None,
    ):
        self.kind = kind
        self.detail = detail
        self.title = title
        self.status_code = status_code
        self.errors = errors
        super().__init__(detail or title or kind.value)

    def to_problem(self, instance: str | None = None, trace_id: str | None = None) -> ProblemDetails:
        """Convert to a problem document."""
        return create_problem(
            self.status_code,
            instance=instance,
            title=self.title,
            detail=self.detail,
            errors=self.errors,
            trace_id=trace_id,
        )


class BadRequestError(KnownError):
    """Malformed route or query parameter."""

    def __init__(self, detail: str, title: str | None = None):
        super().__init__(FailureKind.BAD_REQUEST, detail=detail, title=title, status_code=400)


class ValidationFailedError(KnownError):
    """One or more request fields failed validation."""

    def __init__(
        self,
        errors: dict[str, list[str]],
        title: str = "One or more validation errors occurred.",
        detail: str | None = None,
    ):
        super().__init__(
            FailureKind.VALIDATION_FAILED,
            detail=detail,
            title=title,
            status_code=400,
            errors=errors,
        )

    @classmethod
    def for_field(cls, field: str, *messages: str) -> "ValidationFailedError":
        return cls({field: list(messages)})


class ForbiddenError(KnownError):
    """Caller is identified but may not touch this resource."""

    def __init__(self, detail: str = "Administrator access required."):
        super().__init__(FailureKind.FORBIDDEN, detail=detail, title="Forbidden", status_code=403)


class NotFoundError(KnownError):
    """A referenced user, printing, deck or record does not exist."""

    def __init__(self, detail: str):
        super().__init__(FailureKind.NOT_FOUND, detail=detail, status_code=404)


class ConflictError(KnownError):
    """The request conflicts with current resource state."""

    def __init__(self, detail: str, title: str | None = None):
        super().__init__(FailureKind.CONFLICT, detail=detail, title=title, status_code=409)


class LastAdministratorError(ConflictError):
    """
    Removing or demoting this user would leave no administrators.

    Title and detail are fixed; clients match on them.
    """

    TITLE = "Cannot remove last administrator"
    DETAIL = "At least one administrator must remain."

    def __init__(self) -> None:
        super().__init__(detail=self.DETAIL, title=self.TITLE)


class MissingUserHeaderError(Exception):
    """
    The X-User-Id header is absent, non-numeric, or names no user.

    Rendered as a plain-text 400, not a problem document.
    """

    MESSAGE = "X-User-Id header required."

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)
