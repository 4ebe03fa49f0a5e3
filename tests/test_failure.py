"""Tests for problem document classification."""

from cardtracker.models.failure import (
    PROBLEM_TYPES,
    BadRequestError,
    ConflictError,
    FailureKind,
    ForbiddenError,
    LastAdministratorError,
    MissingUserHeaderError,
    NotFoundError,
    ValidationFailedError,
    create_problem,
)


class TestCreateProblem:
    def test_fills_defaults_for_known_status(self) -> None:
        problem = create_problem(404, instance="/api/x")

        assert problem.type == "https://api.tradingcardgame.tracker/errors/not-found"
        assert problem.title == "Not Found"
        assert problem.status == 404
        assert problem.detail == "The requested resource could not be found."
        assert problem.instance == "/api/x"

    def test_explicit_values_win(self) -> None:
        problem = create_problem(409, title="Custom", detail="Specific")

        assert problem.title == "Custom"
        assert problem.detail == "Specific"
        assert problem.type == PROBLEM_TYPES[409].type

    def test_unknown_status_uses_about_blank(self) -> None:
        problem = create_problem(418)

        assert problem.type == "about:blank"
        assert problem.title == "Error"

    def test_trace_id_serialized_camel_case(self) -> None:
        problem = create_problem(500, trace_id="abc")

        data = problem.model_dump(by_alias=True, exclude_none=True)

        assert data["traceId"] == "abc"
        assert "errors" not in data


class TestKnownErrors:
    def test_not_found(self) -> None:
        error = NotFoundError("Card printing 9 was not found.")

        assert error.kind == FailureKind.NOT_FOUND
        assert error.status_code == 404
        assert error.to_problem().detail == "Card printing 9 was not found."

    def test_bad_request(self) -> None:
        problem = BadRequestError("bad id").to_problem()

        assert problem.status == 400
        assert problem.type.endswith("/bad-request")

    def test_forbidden(self) -> None:
        problem = ForbiddenError().to_problem()

        assert problem.status == 403
        assert problem.title == "Forbidden"

    def test_conflict_default_title(self) -> None:
        problem = ConflictError("taken").to_problem()

        assert problem.title == "Conflict"
        assert problem.type.endswith("/conflict")

    def test_last_administrator(self) -> None:
        """Clients match on the exact title and detail."""
        problem = LastAdministratorError().to_problem(instance="/api/admin/users/1")

        assert problem.status == 409
        assert problem.title == "Cannot remove last administrator"
        assert problem.detail == "At least one administrator must remain."
        assert problem.instance == "/api/admin/users/1"

    def test_validation_failed_carries_errors(self) -> None:
        error = ValidationFailedError.for_field("quantity", "Quantity must be positive.")

        problem = error.to_problem()

        assert problem.errors == {"quantity": ["Quantity must be positive."]}
        assert problem.title == "One or more validation errors occurred."

    def test_missing_header_message(self) -> None:
        assert str(MissingUserHeaderError()) == "X-User-Id header required."
