"""Exception types raised by the extraction pipeline."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Required configuration (e.g. an API key) is missing or invalid."""


class ExternalServiceError(RuntimeError):
    """The vision provider call failed or returned an error payload.

    Attributes:
        provider: Backend name ("openai", "gemini", "claude").
        status: HTTP status reported by the provider, if any.
        quota_exhausted: True when the provider reported a quota or
            billing limit rather than a transient failure.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str = "",
        status: int | None = None,
        quota_exhausted: bool = False,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status = status
        self.quota_exhausted = quota_exhausted


class DecodeError(ValueError):
    """Embedded JSON could not be decoded into an extraction.

    Only raised inside the parser; it always falls through to the
    heuristic tier.
    """
