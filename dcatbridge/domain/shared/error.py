"""Error hierarchy for dcat-bridge.

Error layers:
- DcatError: Base class for all dcat-bridge errors
- DomainError: Share lookup failures (4xx responses)
- InfrastructureError: Upstream and network failures (503 responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class DcatError(Exception):
    """Base class for all dcat-bridge errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (typically 4xx)
# =============================================================================


class DomainError(DcatError):
    """Base class for domain errors."""


class NotFoundError(DomainError):
    """Resource not found, or not visible with the supplied share token."""


# =============================================================================
# Infrastructure Errors (typically 503)
# =============================================================================


class InfrastructureError(DcatError):
    """Base class for infrastructure/system errors."""


class AuthError(InfrastructureError):
    """Client-credentials grant failed; no bearer token is available."""


class UpstreamFetchError(InfrastructureError):
    """Metadata API request failed or returned a malformed payload."""


class FormatProbeError(InfrastructureError):
    """Content type of a download URL could not be read."""


class ServiceLookupError(InfrastructureError):
    """Batched service-layer resolution failed."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
