from cardtracker.models.failure import (
    PROBLEM_CONTENT_TYPE,
    PROBLEM_TYPES,
    BadRequestError,
    ConflictError,
    FailureKind,
    ForbiddenError,
    KnownError,
    LastAdministratorError,
    MissingUserHeaderError,
    NotFoundError,
    ProblemDetails,
    ProblemType,
    ValidationFailedError,
    create_problem,
)
from cardtracker.models.quantities import DeckCardAvailability, MoveResult

__all__ = [
    "PROBLEM_CONTENT_TYPE",
    "PROBLEM_TYPES",
    "BadRequestError",
    "ConflictError",
    "DeckCardAvailability",
    "FailureKind",
    "ForbiddenError",
    "KnownError",
    "LastAdministratorError",
    "MissingUserHeaderError",
    "MoveResult",
    "NotFoundError",
    "ProblemDetails",
    "ProblemType",
    "ValidationFailedError",
    "create_problem",
]
