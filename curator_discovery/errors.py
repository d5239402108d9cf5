"""Exception taxonomy for the discovery pipeline."""

from typing import Optional


class DiscoveryError(Exception):
    """Base class for all pipeline errors."""
    pass


class ConfigurationError(DiscoveryError):
    """Missing or invalid configuration (e.g. no API keys). Never retried."""
    pass


class InferenceError(DiscoveryError):
    """An inference call failed after every attempt was used up."""

    def __init__(self, message: str, model: Optional[str] = None) -> None:
        self.model = model
        if model:
            message = f"{message} (Model: {model})"
        super().__init__(message)


class ProviderHTTPError(DiscoveryError):
    """Non-success HTTP response from an inference provider.

    Raised inside a single attempt so tenacity can decide whether to retry.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        retry_after: Optional[float] = None,
    ) -> None:
        self.status_code = status_code
        self.retry_after = retry_after
        super().__init__(f"HTTP {status_code}: {message}")

    @property
    def is_rate_limit(self) -> bool:
        return self.status_code in (429, 503)


class ModelNotFoundError(ProviderHTTPError):
    """Provider reports the resolved model no longer exists (HTTP 404)."""

    def __init__(self, model: str) -> None:
        super().__init__(404, f"model {model} not found")
        self.model = model


class EmptyCompletionError(DiscoveryError):
    """Provider answered 200 but produced no usable completion."""
    pass


class FetchError(DiscoveryError):
    """Every proxy in the chain failed for a URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        shown = url if len(url) <= 80 else url[:77] + "..."
        super().__init__(f"All proxies failed for {shown}")


class ExtractionError(DiscoveryError):
    """Model output could not be turned into an Opportunity."""
    pass


class ScanInProgressError(DiscoveryError):
    """A scan is already running on this agent."""
    pass
