from __future__ import annotations

from http import HTTPStatus

from gitea_provider.domain.errors import GitProviderError, NotFoundError, ProviderRequestError

from .transport import Response


def handle_http_error(response: Response | None, error: BaseException | None) -> GitProviderError | None:
    """Map a failed remote call onto one of the normalized error kinds.

    A 404 always becomes `NotFoundError`, whatever the error text says. Any
    other failure, including one where no response was received at all, is
    wrapped in `ProviderRequestError` with the original message kept.

    Returns `None` when there is no error. The caller raises the result.
    """
    if error is None:
        return None
    if isinstance(error, GitProviderError):
        return error

    status_code = response.status_code if response is not None else None
    if status_code == HTTPStatus.NOT_FOUND:
        return NotFoundError(f"the requested resource was not found: {error}")

    return ProviderRequestError(f"gitea request failed: {error}", error=error, status_code=status_code)
