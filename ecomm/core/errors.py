"""
Domain errors raised by the services layer.

Every error carries the HTTP status it maps to; ecomm.main turns them into
a JSON {"message": ...} body at the request boundary.
"""


class EcommError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(EcommError):
    status_code = 400
    default_message = "Invalid request"


# riders send malformed coordinates as "invalid input"
InvalidInput = ValidationError


class InsufficientStock(ValidationError):
    default_message = "Selected size not available or insufficient stock"


class EmptyCart(ValidationError):
    default_message = "Cart is empty"


class InvalidStatus(ValidationError):
    default_message = "Invalid status"


class Unauthorized(EcommError):
    status_code = 401
    default_message = "Invalid credentials"


class Forbidden(EcommError):
    status_code = 403
    default_message = "Access denied"


class NotFound(EcommError):
    status_code = 404
    default_message = "Not found"


class Conflict(EcommError):
    status_code = 409
    default_message = "Already exists"


class InvalidTransition(EcommError):
    status_code = 409

    def __init__(self, current: str = None, target: str = None, message: str = None):
        self.current = current
        self.target = target
        if message is None:
            message = f"Cannot move order from '{current}' to '{target}'"
        super().__init__(message)


class InternalError(EcommError):
    status_code = 500
