from __future__ import annotations


class ServiceError(Exception):
    status_code = 500
    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(ServiceError):
    status_code = 404
    kind = "not_found"


class InsufficientCredits(ServiceError):
    status_code = 402
    kind = "insufficient_credits"

    def __init__(self, required: int, available: int) -> None:
        super().__init__(f"Insufficient credits: required: {required}, available: {available}")
        self.required = int(required)
        self.available = int(available)


class ValidationError(ServiceError):
    status_code = 400
    kind = "validation_error"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AuthenticationError(ServiceError):
    status_code = 401
    kind = "authentication_error"


class PermissionDenied(ServiceError):
    status_code = 403
    kind = "permission_denied"


class Conflict(ServiceError):
    status_code = 409
    kind = "conflict"


class PaymentError(ServiceError):
    status_code = 502
    kind = "payment_error"
