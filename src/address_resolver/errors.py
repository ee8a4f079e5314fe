"""Error taxonomy for address resolution.

Only :class:`GeocodingNotFound` escapes the public API. Everything else is
raised and absorbed inside the pipeline to move it on to the next stage.
"""

from typing import Any, Optional


class GeocodingError(Exception):
    """Operational error raised while resolving an address."""

    status_code = 500
    error_code = "GEOCODING_ERROR"

    def __init__(
        self,
        message: str,
        *,
        address: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.address = address
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class ProviderError(GeocodingError):
    """A single provider branch failed."""

    error_code = "PROVIDER_ERROR"

    def __init__(self, provider: str, message: str, **kwargs: Any):
        self.provider = provider
        super().__init__(f"[{provider}] {message}", **kwargs)


class MissingCredential(ProviderError):
    """Provider has no API key configured; it is never queried."""

    error_code = "MISSING_CREDENTIAL"


class ProviderNoResult(ProviderError):
    """Provider answered with an empty result set."""

    status_code = 404
    error_code = "PROVIDER_NO_RESULT"


class ProviderTimeout(ProviderError):
    """Provider did not answer within the request timeout."""

    status_code = 504
    error_code = "PROVIDER_TIMEOUT"


class ProviderRequestError(ProviderError):
    """HTTP, transport or payload error from a provider."""

    status_code = 502
    error_code = "PROVIDER_REQUEST_ERROR"


class AllProvidersFailed(GeocodingError):
    """Every branch of one race failed."""

    status_code = 502
    error_code = "ALL_PROVIDERS_FAILED"

    def __init__(self, query: str, failures: list[ProviderError]):
        self.failures = list(failures)
        reasons = "; ".join(f.message for f in self.failures) or "no providers registered"
        super().__init__(
            f"All providers failed for '{query}': {reasons}",
            address=query,
            details={"failures": [f.message for f in self.failures]},
        )


class PlusCodeError(GeocodingError):
    """Base class for plus code problems, never surfaced to callers."""

    status_code = 400
    error_code = "PLUS_CODE_ERROR"


class PlusCodeInvalid(PlusCodeError):
    error_code = "PLUS_CODE_INVALID"


class PlusCodeDecodeError(PlusCodeError):
    error_code = "PLUS_CODE_DECODE_ERROR"


class GeocodingNotFound(GeocodingError):
    """Terminal failure: the address could not be resolved by any stage.

    Treated as unresolvable input that needs correcting by the user, not as a
    transient infrastructure fault.
    """

    status_code = 404
    error_code = "GEOCODING_NOT_FOUND"

    def __init__(self, address: str, message: Optional[str] = None, **kwargs: Any):
        details = kwargs.pop("details", None) or {}
        details.setdefault("address", address)
        super().__init__(
            message or f"No results found for '{address}'",
            address=address,
            details=details,
            **kwargs,
        )
