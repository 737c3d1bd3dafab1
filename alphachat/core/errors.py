"""
Application error taxonomy.

Every error carries the HTTP status it is rendered with. Messages are safe to
return to clients; provider failures keep the underlying cause in
``__cause__`` for logging only.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or out-of-range input."""
    status_code = 400
    default_message = "Invalid request"


class AuthorizationError(AppError):
    """Caller lacks the role required for the operation."""
    status_code = 403
    default_message = "Admin access required"


class SessionNotFoundError(AppError):
    """Session is missing or expired. The two cases are deliberately indistinguishable."""
    status_code = 404
    default_message = "Chat session not found or expired"


class QuotaExceededError(AppError):
    """Daily usage limit for the caller's subscription tier is reached."""
    status_code = 429

    def __init__(self, category: str, used: int, limit: int):
        self.category = category
        self.used = used
        self.limit = limit
        super().__init__(
            f"Daily {category} limit reached ({used}/{limit}). Please upgrade to premium."
        )


class ProviderError(AppError):
    """A remote AI provider call failed."""
    status_code = 500
    default_message = "Failed to generate AI response"

    def __init__(self, provider: str, detail: str = ""):
        self.provider = provider
        self.detail = detail
        super().__init__()


class UnsupportedModelError(AppError):
    """Model id is not part of the catalog."""
    status_code = 500

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"Unsupported model: {model_id}")


class ProviderUnavailableError(AppError):
    """Model is in the catalog but its provider is not configured on this server."""
    status_code = 501

    def __init__(self, model_id: str, provider: str):
        self.model_id = model_id
        self.provider = provider
        super().__init__(f"Model {model_id} is not available: {provider} is not configured")


class StorageError(AppError):
    """Persisting a record failed."""
    status_code = 500
    default_message = "Storage operation failed"


class FeatureNotImplementedError(AppError):
    """The endpoint exists but this server has no backend for it yet."""
    status_code = 501
    default_message = "Not implemented"
