class ApiError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"message": self.message}


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentials(Unauthenticated):
    default_message = "Invalid username or password"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class ServerError(ApiError):
    status_code = 500


def require_text(value, field, required=True, strip=True):
    """Payload string field: stripped text, or None/'' when optional and absent."""
    if value is None or value == '':
        if required:
            raise ValidationError(f"{field} is required")
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    if strip:
        value = value.strip()
    if required and not value:
        raise ValidationError(f"{field} is required")
    return value
