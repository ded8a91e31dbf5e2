"""Exception hierarchy shared by the service layer.

Services raise these; the API layer translates them into HTTP responses.
"""


class NovelHubError(RuntimeError):
    """Base exception for domain failures."""


class UnauthorizedError(NovelHubError):
    """Raised when a caller presents a missing or invalid credential."""


class PermissionDeniedError(NovelHubError):
    """Raised when an authenticated caller may not act on a resource."""


class ValidationError(NovelHubError):
    """Raised when a request is missing a required identifier or value."""


class NotFoundError(NovelHubError):
    """Raised when a referenced novel, chapter or user does not exist."""


class InvalidTransitionError(NovelHubError):
    """Raised when a chapter status change is not allowed from its current state."""


class StoreUnavailableError(NovelHubError):
    """Raised when the content store cannot be reached at all."""
