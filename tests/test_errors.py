import pytest

from services.errors import (
    AuthRequiredError,
    BackendUnavailableError,
    ConflictError,
    ForbiddenError,
    InsufficientStockError,
    LessonNotFoundError,
    LoginRequiredError,
    NotFoundError,
    SportNexusError,
    ValidationError,
)


@pytest.mark.parametrize("exc,status", [
    (ValidationError, 400),
    (AuthRequiredError, 401),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (LessonNotFoundError, 404),
    (ConflictError, 409),
    (InsufficientStockError, 409),
    (BackendUnavailableError, 503),
])
def test_status_codes(exc, status):
    assert issubclass(exc, SportNexusError)
    assert exc.status_code == status


def test_default_and_custom_messages():
    assert ConflictError().message == "This venue is not available for the selected time slot"
    assert NotFoundError("Venue not found").message == "Venue not found"
    assert isinstance(LessonNotFoundError(), NotFoundError)
    assert LoginRequiredError is AuthRequiredError


def test_handler_turns_errors_into_json(app):
    @app.get("/boom")
    def boom():
        raise BackendUnavailableError()

    resp = app.test_client().get("/boom")
    assert resp.status_code == 503
    assert resp.get_json() == {"error": "Backend unavailable"}
