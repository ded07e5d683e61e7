class DomainError(Exception):
    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code: int | None = None
        super().__init__(message)


class NotFoundError(DomainError):
    def __init__(self, entity: str, message: str | None = None, details: dict | None = None):
        code = f"NF_{entity.upper()}_001"
        msg = message or f"{entity} not found"
        super().__init__(code, msg, details)


class ValidationError(DomainError):
    def __init__(self, field: str, message: str, details: dict | None = None):
        code = f"VAL_{field.upper()}_001"
        msg = f"Validation failed for {field}: {message}"
        super().__init__(code, msg, details or {"field": field})


class BusinessRuleError(DomainError):
    def __init__(self, message: str, code: str = "BR_001", details: dict | None = None):
        super().__init__(code, message, details)


class ConflictError(DomainError):
    def __init__(self, message: str, code: str = "CF_001", details: dict | None = None):
        super().__init__(code, message, details)


class AuthenticationError(DomainError):
    def __init__(self, message: str, code: str = "AUTH_001", details: dict | None = None):
        super().__init__(code, message, details)


class AuthorizationError(DomainError):
    def __init__(self, message: str, code: str = "AUTH_006", details: dict | None = None):
        super().__init__(code, message, details)


class NetworkError(DomainError):
    """The request never produced a response (connection refused, timeout)."""

    def __init__(self, message: str, code: str = "NET_001", details: dict | None = None):
        super().__init__(code, message, details)


class ServerError(DomainError):
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "SRV_001",
        details: dict | None = None,
    ):
        super().__init__(code, message, details)
        self.status_code = status_code


def error_from_response(status_code: int, message: str, details: dict | None = None) -> DomainError:
    """Map a non-2xx API response onto the domain error taxonomy."""
    if status_code == 400:
        error: DomainError = ValidationError("request", message, details)
        # keep the server's wording rather than the "Validation failed for" prefix
        error.message = message
        error.args = (message,)
    elif status_code == 401:
        error = AuthenticationError(message, details=details)
    elif status_code == 403:
        error = AuthorizationError(message, details=details)
    elif status_code == 404:
        error = NotFoundError("resource", message, details)
    elif status_code == 409:
        error = ConflictError(message, details=details)
    elif status_code == 422:
        error = BusinessRuleError(message, details=details)
    else:
        return ServerError(message, status_code=status_code, details=details)
    error.status_code = status_code
    return error


def user_message(exc: Exception, fallback: str) -> str:
    """Text shown to the user for a failed operation."""
    if isinstance(exc, DomainError) and exc.message:
        return exc.message
    return str(exc) or fallback
