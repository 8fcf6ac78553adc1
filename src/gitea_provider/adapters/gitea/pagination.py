from __future__ import annotations

import logging
from typing import Callable

from gitea_provider.domain.errors import PageLimitExceededError

from .api_types import ListOptions
from .http_errors import handle_http_error
from .transport import GiteaAPIError, Response


LOGGER = logging.getLogger(__name__)

PageFetcher = Callable[[], Response | None]


def all_pages(opts: ListOptions, fetch_page: PageFetcher, *, max_pages: int | None = None) -> None:
    """Drive `fetch_page` over every page until the server runs out of data.

    `fetch_page` fetches the page `opts` currently points at, appends its items
    to an accumulator owned by the caller, and returns the `Response` when the
    page had items or `None` when it was empty. An empty page ends the loop;
    a short but non-empty page does not.

    Transport failures are translated with `handle_http_error` and raised at
    once; nothing is fetched after a failing page. There is no page ceiling
    unless `max_pages` is given. Page `max_pages + 1` is then still fetched to
    see whether the listing ended, and `PageLimitExceededError` is raised only
    when that page has items.
    """
    opts.page = 1
    while True:
        try:
            response = fetch_page()
        except GiteaAPIError as error:
            raise handle_http_error(error.response, error) from error

        if response is None:
            return

        LOGGER.debug(
            "page fetched",
            extra={"event": "gitea.pagination.page", "page": opts.page, "url": response.url},
        )

        if max_pages is not None and opts.page > max_pages:
            raise PageLimitExceededError(f"pagination stopped after {max_pages} pages with data still coming")
        opts.page += 1
