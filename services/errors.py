class SportNexusError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(SportNexusError):
    status_code = 400
    default_message = "Invalid request"


class AuthRequiredError(SportNexusError):
    status_code = 401
    default_message = "Authentication required"


LoginRequiredError = AuthRequiredError


class ForbiddenError(SportNexusError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(SportNexusError):
    status_code = 404
    default_message = "Not found"


class LessonNotFoundError(NotFoundError):
    default_message = "Lesson not found"


class ConflictError(SportNexusError):
    status_code = 409
    default_message = "This venue is not available for the selected time slot"


class InsufficientStockError(SportNexusError):
    status_code = 409
    default_message = "Not enough units available for the selected dates"


class BackendUnavailableError(SportNexusError):
    status_code = 503
    default_message = "Backend unavailable"
