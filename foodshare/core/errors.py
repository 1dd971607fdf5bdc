"""Error taxonomy shared by repositories, services and the HTTP surface.

Every error carries the HTTP status it maps to; ``main.py`` installs a single
handler that renders them as ``{"message": ...}``.
"""


class FoodShareError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FoodShareError):
    status_code = 400
    default_message = "Validation error"


class AuthError(FoodShareError):
    status_code = 401
    default_message = "Not authenticated"


class ForbiddenError(FoodShareError):
    status_code = 403
    default_message = "Not authorized"


class NotFoundError(FoodShareError):
    status_code = 404
    default_message = "Not found"


class ConflictError(FoodShareError):
    # duplicate email is reported as 400 to existing clients
    status_code = 400
    default_message = "Already exists"


class InvalidTransitionError(ConflictError):
    status_code = 409
    default_message = "Status transition not allowed"


class InvalidTokenError(FoodShareError):
    status_code = 400
    default_message = "Invalid or expired token"


class EmailDeliveryError(FoodShareError):
    status_code = 502
    default_message = "Failed to send email"
