"""
Error taxonomy for content routing
Configuration errors are raised to the caller, provider errors are recovered locally
"""

from typing import Iterable, Optional


class NewsGateError(Exception):
    """Base class for all NewsGate errors"""


class ConfigurationError(NewsGateError):
    """Caller or programmer mistake, never retried"""


class ProviderError(NewsGateError):
    """Runtime provider failure, eligible for fallback"""


class UnsupportedContentType(ConfigurationError, ValueError):
    """Raised when a request names a content type outside the supported set"""
    def __init__(self, content_type: str, supported: Iterable[str]):
        self.content_type = content_type
        self.supported = tuple(supported)
        super().__init__(
            f"Invalid content type '{content_type}'. Supported: {', '.join(self.supported)}"
        )


class ProviderNotRegistered(ConfigurationError, KeyError):
    """Raised when a provider name was never registered"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Provider '{name}' not registered")

    def __str__(self) -> str:
        # KeyError would otherwise quote the whole message
        return self.args[0]


class ProviderUnsupportedType(ProviderError):
    """Raised when a resolved provider cannot serve a content type"""
    def __init__(self, provider: str, content_type: str):
        self.provider = provider
        self.content_type = content_type
        super().__init__(f"Provider '{provider}' does not support content type '{content_type}'")


class AllProvidersFailed(ProviderError):
    """Raised when the fallback cascade runs out of candidates"""
    def __init__(self, content_type: str, attempted: Iterable[str], last_error: Optional[str] = None):
        self.content_type = content_type
        self.attempted = tuple(attempted)
        self.last_error = last_error
        message = f"All providers failed for {content_type} request"
        if self.attempted:
            message += f" (tried: {', '.join(self.attempted)})"
        if last_error:
            message += f": {last_error}"
        super().__init__(message)


class ProviderHealthCheckFailed(ProviderError):
    """Raised when a provider health probe blows up instead of answering"""
    def __init__(self, provider: str, cause: Exception):
        self.provider = provider
        self.cause = cause
        super().__init__(f"Health check failed for '{provider}': {cause}")
