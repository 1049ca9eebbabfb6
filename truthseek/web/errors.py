"""Search-layer exception taxonomy."""

from typing import Optional


class SearchError(Exception):
    """Base class for every error raised by the search layer."""


class ProviderUnavailable(SearchError):
    """A named provider is not registered, not configured, or not authenticated."""

    def __init__(self, provider: str, reason: Optional[str] = None):
        self.provider = provider
        message = f"Requested search provider '{provider}' is not available"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ProviderCallFailed(SearchError):
    """A registered provider's backend call failed."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        super().__init__(f"{provider} search failed: {reason}")


class NoProvidersAvailable(SearchError):
    """A fan-out search finished without a single successful provider."""

    def __init__(self, failed: Optional[list] = None):
        self.failed = list(failed or [])
        message = "No search providers are available"
        if self.failed:
            message = f"{message} (failed: {', '.join(self.failed)})"
        super().__init__(message)


class AuthenticationFailed(SearchError):
    """A lazily initialised provider could not complete its login handshake."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        super().__init__(f"Failed to authenticate {provider}: {reason}")
