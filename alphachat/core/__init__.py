"""Core module - error taxonomy, logging and pure session state transitions."""

from .errors import (
    AppError,
    ValidationError,
    AuthorizationError,
    SessionNotFoundError,
    QuotaExceededError,
    ProviderError,
    UnsupportedModelError,
    ProviderUnavailableError,
    StorageError,
)

__all__ = [
    'AppError',
    'ValidationError',
    'AuthorizationError',
    'SessionNotFoundError',
    'QuotaExceededError',
    'ProviderError',
    'UnsupportedModelError',
    'ProviderUnavailableError',
    'StorageError',
]
