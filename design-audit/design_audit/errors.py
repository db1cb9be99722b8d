"""
Error Taxonomy

Typed errors raised by the core and converted to ``{"error": ...}``
payloads at the service boundary. Every error carries a user-facing
message and the HTTP-style status code the boundary reports.
"""

from typing import Optional


class DesignAuditError(Exception):
    """
    Base class for all expected failures.

    Attributes:
        message: User-facing explanation
        status_code: HTTP-equivalent status reported at the boundary
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict:
        """Serialize as a boundary error payload"""
        return {"error": self.message, "status": self.status_code}


class ConfigurationError(DesignAuditError):
    """A required credential or setting is missing or was rejected"""

    status_code = 500


class InvalidInputError(DesignAuditError):
    """Malformed request input, rejected before any network call"""

    status_code = 400


class ImageExpiredError(InvalidInputError):
    """A remote design image no longer resolves (Figma URLs expire)"""


class NoFramesError(DesignAuditError):
    """The design file contains no exportable frames"""

    status_code = 400


class RateLimitError(DesignAuditError):
    """
    Provider signalled backpressure (HTTP 429).

    Attributes:
        retry_after: Seconds the provider asked us to wait, when it said so
    """

    status_code = 429

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.retry_after is not None:
            payload["retryAfter"] = self.retry_after
        return payload


class AccessDeniedError(DesignAuditError):
    """The provider refused access to the requested resource"""

    status_code = 403


class QuotaError(DesignAuditError):
    """Billing or credits exhausted (HTTP 402)"""

    status_code = 402


class UpstreamError(DesignAuditError):
    """Any other non-success provider response"""

    status_code = 502


class ExportFailedError(UpstreamError):
    """Frames were found but none of them rendered to an image"""
