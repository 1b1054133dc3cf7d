"""Custom exceptions for the PostSync composer."""


class PostSyncError(Exception):
    """Base exception for all PostSync errors."""


class ValidationError(PostSyncError):
    """Raised when user input is rejected.

    Typical causes: unsupported file type, oversized upload, malformed
    numeric input, blank caption, prompt outside the allowed length.
    Shown to the user as an inline message.
    """


class InvalidImageError(ValidationError):
    """Raised when uploaded bytes cannot be decoded as an image."""


class NotReadyError(PostSyncError):
    """Raised when an export is attempted before an image is loaded."""


class ExternalServiceError(PostSyncError):
    """Raised when the image-generation service fails.

    Typical causes: network error, non-2xx response, response without a
    usable image URL. The user may retry the whole request.
    """


class ModelWarmingError(ExternalServiceError):
    """Raised when the upstream model is still loading (HTTP 503)."""


class OAuthStateError(PostSyncError):
    """Raised when an OAuth callback carries an unexpected ``state``."""
