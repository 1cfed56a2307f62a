"""
Error taxonomy shared by the stores and the GraphQL layer.

Every class carries a ``code`` that is surfaced to clients in the
GraphQL error extensions. Messages never include internal state.
"""


class ServiceError(Exception):
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal error"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def extensions(self):
        return {"code": self.code}


class Unauthorized(ServiceError):
    code = "UNAUTHENTICATED"
    default_message = "Unauthorized"


class InvalidCredentials(ServiceError):
    code = "UNAUTHENTICATED"
    default_message = "invalid credentials"


class InvalidToken(ServiceError):
    code = "UNAUTHENTICATED"
    default_message = "invalid token"


class ValidationFailed(ServiceError):
    code = "BAD_USER_INPUT"
    default_message = "Invalid input"


class DuplicateName(ValidationFailed):
    default_message = "Name already exists"


class DuplicateUsername(ValidationFailed):
    default_message = "Username already exists"


class InvalidRole(ValidationFailed):
    default_message = "Unknown role"


class NotFound(ServiceError):
    code = "NOT_FOUND"
    default_message = "Not found"
