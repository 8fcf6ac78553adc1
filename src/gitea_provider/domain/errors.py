from __future__ import annotations
"""Normalized error kinds raised by provider clients.

Callers are expected to branch on `NotFoundError` and treat every other
`GitProviderError` as fatal to the operation.
"""


class GitProviderError(Exception):
    """Base class for every error surfaced by the provider layer."""


class NotFoundError(GitProviderError):
    """The requested resource does not exist (remote 404 or no name match)."""


class DestructiveCallDisallowedError(GitProviderError):
    """A destructive operation was requested without explicit opt-in."""


class InvalidServerDataError(GitProviderError):
    """An object returned by the server is missing required fields."""


class DomainUnsupportedError(GitProviderError):
    """A ref points at a host this provider was not configured for."""


class InvalidArgumentError(GitProviderError):
    """A caller-supplied value cannot be expressed against the remote API."""


class ProviderRequestError(GitProviderError):
    """A remote request failed for any reason other than "not found".

    Attributes:
        error: The original exception, kept for inspection.
        status_code: HTTP status of the failed response, if one was received.
    """

    def __init__(
        self,
        message: str,
        *,
        error: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.status_code = status_code


class PageLimitExceededError(ProviderRequestError):
    """Pagination reached the configured page ceiling with data still coming."""
