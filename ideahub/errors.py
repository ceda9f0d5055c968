"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``ideahub.main`` maps each one to its status code and a
``{"error": message}`` body.
"""

from typing import Optional


class IdeaHubError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(IdeaHubError):
    status_code = 400
    default_message = "Invalid input"


class Conflict(IdeaHubError):
    status_code = 409
    default_message = "Conflict"


class DuplicateEmail(Conflict):
    # The signup contract reports an existing account as a plain 400.
    status_code = 400
    default_message = "User already exists"


class Unauthorized(IdeaHubError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidCredentials(Unauthorized):
    default_message = "Invalid credentials"


class Forbidden(IdeaHubError):
    status_code = 403
    default_message = "You do not have access to this resource"


class NotFound(IdeaHubError):
    status_code = 404
    default_message = "Not found"


class StoreError(IdeaHubError):
    """Persistence failure. The message is generic; details go to the log."""

    status_code = 500
    default_message = "Internal server error"
