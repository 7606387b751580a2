"""Error taxonomy shared by the auth layer, services and storage.

Learn: Every error carries a stable `code` and an HTTP `status_code`.
The API layer turns them into one envelope shape:

    {"errors": [{"message": "...", "code": "UNAUTHENTICATED"}]}

InvalidToken is the odd one out — it never reaches a caller. The
request identity resolver absorbs it and the request simply proceeds
anonymously. Lookup misses are not errors at all: they come back as
None / null.
"""


class DeepThoughtsError(Exception):
    """Base class for errors that map to an API error envelope."""

    status_code: int = 400
    code: str = "BAD_REQUEST"
    message: str = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class BadUserInput(DeepThoughtsError):
    """Operation variables are missing or malformed."""

    status_code = 422
    code = "BAD_USER_INPUT"
    message = "Invalid operation variables"

    def __init__(self, message: str | None = None, details: list | None = None):
        super().__init__(message)
        self.details = details or []


class UnknownOperation(DeepThoughtsError):
    status_code = 404
    code = "UNKNOWN_OPERATION"
    message = "Unknown operation"


class Unauthenticated(DeepThoughtsError):
    """No identity on the request context, but the operation needs one."""

    status_code = 401
    code = "UNAUTHENTICATED"
    message = "You need to be logged in!"


class InvalidCredentials(DeepThoughtsError):
    """Login failed.

    Raised with the same message for an unknown email and a wrong
    password, so callers can't probe which accounts exist.
    """

    status_code = 401
    code = "INVALID_CREDENTIALS"
    message = "Incorrect credentials"


class Conflict(DeepThoughtsError):
    status_code = 409
    code = "CONFLICT"
    message = "Resource already exists"


class InvalidToken(Exception):
    """Token signature or age check failed. Carries no reason."""

    def __init__(self):
        super().__init__("Invalid token")
