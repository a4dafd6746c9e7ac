"""
Custom Exceptions
=================

Unified exception hierarchy for the content pipeline.

The pipeline distinguishes four families of failure:
- validation errors, raised before any external call and never retried
- provider errors (narration, rendering, publishing, script generation)
- policy rejections from the safety gate
- side-effect errors (cost tracking), which are logged and never raised
"""

from typing import Optional, Dict, Any


class AutotubeError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


class ConfigurationError(AutotubeError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type
        super().__init__(message, details=details, **kwargs)


class ValidationError(AutotubeError):
    """Input validation errors (empty or over-length text, bad arguments)."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]
        if constraint:
            details["constraint"] = constraint
        super().__init__(message, recoverable=False, details=details, **kwargs)


class ProviderError(AutotubeError):
    """Vendor/API-related errors."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if provider:
            details["provider"] = provider
        if status_code:
            details["status_code"] = status_code
        if response_body:
            # Truncate large responses
            details["response_body"] = response_body[:500] if len(response_body) > 500 else response_body

        recoverable = kwargs.pop("recoverable", status_code in (429, 500, 502, 503, 504) if status_code else True)
        super().__init__(message, recoverable=recoverable, details=details, **kwargs)
        self.provider = provider


class RateLimitError(ProviderError):
    """Rate limit exceeded errors."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if retry_after:
            details["retry_after_seconds"] = retry_after
        super().__init__(message, status_code=429, recoverable=True, details=details, **kwargs)


class ScriptGenerationError(ProviderError):
    """Script generation failed (malformed upstream response, quota, auth)."""


class NarrationError(ProviderError):
    """Narration synthesis failed on every configured backend."""


class RenderError(ProviderError):
    """Video rendering failed."""

    def __init__(
        self,
        message: str,
        render_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if render_id:
            details["render_id"] = render_id
        super().__init__(message, details=details, **kwargs)


class PublishError(ProviderError):
    """Publishing the rendered video failed."""


class PolicyRejectionError(AutotubeError):
    """Content stopped by a business rule (safety gate, forbidden topic)."""

    def __init__(
        self,
        message: str,
        reasons: Optional[list] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if reasons:
            details["reasons"] = list(reasons)
        super().__init__(message, recoverable=False, details=details, **kwargs)


class TimeoutError(AutotubeError):
    """Operation timeout errors."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, recoverable=True, details=details, **kwargs)


class ResourceNotFoundError(AutotubeError):
    """Resource not found errors."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, recoverable=False, details=details, **kwargs)
