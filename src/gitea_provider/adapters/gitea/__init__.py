"""Gitea implementation of the generic git provider ports."""

from .client import GiteaClient
from .http_errors import handle_http_error
from .pagination import all_pages
from .provider import GiteaProvider, new_gitea_provider
from .transport import GiteaAPIError, GiteaTransport, HttpGiteaTransport, Response

__all__ = [
	"GiteaAPIError",
	"GiteaClient",
	"GiteaProvider",
	"GiteaTransport",
	"HttpGiteaTransport",
	"Response",
	"all_pages",
	"handle_http_error",
	"new_gitea_provider",
]
