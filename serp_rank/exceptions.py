"""Errors raised by SERP providers and the ranking pipeline."""

from __future__ import annotations


class SerpRankError(Exception):
    """Base class for all serp_rank errors."""


class ProviderNotConfigured(SerpRankError):
    """The selected provider has no API key."""

    def __init__(self, provider: str, env_var: str):
        self.provider = provider
        self.env_var = env_var
        super().__init__(f"{env_var} is not configured")


class ProviderHTTPError(SerpRankError):
    """The provider answered with a non-2xx status."""

    def __init__(self, provider: str, status: int, body: str = ""):
        self.provider = provider
        self.status = status
        self.body = body
        super().__init__(f"{provider} API error: {status} - {body}")


class ProviderResponseError(SerpRankError):
    """The provider answered, but the payload is an error or unreadable."""


class UnknownProviderError(SerpRankError):
    """The configured provider name is not one we have a client for."""


class ProviderRequestError(SerpRankError):
    """The request never got an HTTP answer (connection error, timeout)."""
