from __future__ import annotations
"""Gitea API v1 transport.

`GiteaTransport` is the remote-client capability the rest of the adapter is
written against: every method performs exactly one HTTP request and returns
the typed result together with the `Response` metadata. Failures raise
`GiteaAPIError`, whose `response` is `None` when no HTTP response was
received (DNS, connection refused, timeouts).

Objects the server sent as `null` or as something other than a JSON object
come back as `None`, including list elements, so validation can reject them.
A list endpoint answering with anything but an array raises
`InvalidServerDataError`.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, TypeVar
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from gitea_provider.domain.errors import InvalidServerDataError

from .api_types import (
    Commit,
    CreateKeyOption,
    CreatePullRequestOption,
    CreateRepoOption,
    DeployKey,
    EditRepoOption,
    ListOptions,
    MergePullRequestOption,
    Organization,
    PullRequest,
    Repository,
    Team,
    User,
)


LOGGER = logging.getLogger(__name__)

ApiT = TypeVar("ApiT")


@dataclass(slots=True)
class Response:
    """Metadata of one HTTP exchange, kept apart from the decoded payload."""

    status_code: int
    url: str
    headers: dict[str, str] = field(default_factory=dict)


class GiteaAPIError(RuntimeError):
    """Raised by a transport when a request fails."""

    def __init__(self, message: str, *, response: Response | None = None) -> None:
        super().__init__(message)
        self.response = response


class GiteaTransport(Protocol):
    """Capability contract for talking to a Gitea server."""

    def get_org(self, org: str) -> tuple[Organization | None, Response]: ...

    def list_my_orgs(self, opts: ListOptions) -> tuple[list[Organization | None], Response]: ...

    def list_org_teams(self, org: str, opts: ListOptions) -> tuple[list[Team | None], Response]: ...

    def list_team_members(self, team_id: int, opts: ListOptions) -> tuple[list[User | None], Response]: ...

    def get_repo(self, owner: str, repo: str) -> tuple[Repository | None, Response]: ...

    def list_org_repos(self, org: str, opts: ListOptions) -> tuple[list[Repository | None], Response]: ...

    def list_user_repos(self, username: str, opts: ListOptions) -> tuple[list[Repository | None], Response]: ...

    def create_repo(self, option: CreateRepoOption) -> tuple[Repository | None, Response]: ...

    def create_org_repo(self, org: str, option: CreateRepoOption) -> tuple[Repository | None, Response]: ...

    def edit_repo(self, owner: str, repo: str, option: EditRepoOption) -> tuple[Repository | None, Response]: ...

    def delete_repo(self, owner: str, repo: str) -> Response: ...

    def list_deploy_keys(
        self, owner: str, repo: str, opts: ListOptions
    ) -> tuple[list[DeployKey | None], Response]: ...

    def create_deploy_key(
        self, owner: str, repo: str, option: CreateKeyOption
    ) -> tuple[DeployKey | None, Response]: ...

    def delete_deploy_key(self, owner: str, repo: str, key_id: int) -> Response: ...

    def list_repo_commits(
        self, owner: str, repo: str, sha: str, opts: ListOptions
    ) -> tuple[list[Commit | None], Response]: ...

    def check_repo_team(self, owner: str, repo: str, team: str) -> tuple[Team | None, Response]: ...

    def list_repo_teams(self, owner: str, repo: str) -> tuple[list[Team | None], Response]: ...

    def add_repo_team(self, owner: str, repo: str, team: str) -> Response: ...

    def remove_repo_team(self, owner: str, repo: str, team: str) -> Response: ...

    def list_repo_pull_requests(
        self, owner: str, repo: str, opts: ListOptions
    ) -> tuple[list[PullRequest | None], Response]: ...

    def create_pull_request(
        self, owner: str, repo: str, option: CreatePullRequestOption
    ) -> tuple[PullRequest | None, Response]: ...

    def get_pull_request(self, owner: str, repo: str, index: int) -> tuple[PullRequest | None, Response]: ...

    def merge_pull_request(
        self, owner: str, repo: str, index: int, option: MergePullRequestOption
    ) -> tuple[bool, Response]: ...


class HttpGiteaTransport:
    """`GiteaTransport` over `urllib`, authenticated with an access token."""

    def __init__(
        self,
        *,
        base_url: str,
        token: str | None = None,
        timeout_seconds: float = 30.0,
        urlopen_fn: Callable[..., Any] = urlopen,
    ) -> None:
        self._api_base_url = f"{base_url.rstrip('/')}/api/v1"
        self._token = token
        self._timeout_seconds = timeout_seconds
        self._urlopen_fn = urlopen_fn

    # Organizations and teams

    def get_org(self, org: str) -> tuple[Organization | None, Response]:
        payload, response = self._request("GET", f"/orgs/{_seg(org)}")
        return _parse_object(Organization, payload), response

    def list_my_orgs(self, opts: ListOptions) -> tuple[list[Organization | None], Response]:
        payload, response = self._request("GET", "/user/orgs", query=opts.to_query())
        return _parse_list(Organization, payload, response), response

    def list_org_teams(self, org: str, opts: ListOptions) -> tuple[list[Team | None], Response]:
        payload, response = self._request("GET", f"/orgs/{_seg(org)}/teams", query=opts.to_query())
        return _parse_list(Team, payload, response), response

    def list_team_members(self, team_id: int, opts: ListOptions) -> tuple[list[User | None], Response]:
        payload, response = self._request("GET", f"/teams/{team_id}/members", query=opts.to_query())
        return _parse_list(User, payload, response), response

    # Repositories

    def get_repo(self, owner: str, repo: str) -> tuple[Repository | None, Response]:
        payload, response = self._request("GET", _repo_path(owner, repo))
        return _parse_object(Repository, payload), response

    def list_org_repos(self, org: str, opts: ListOptions) -> tuple[list[Repository | None], Response]:
        payload, response = self._request("GET", f"/orgs/{_seg(org)}/repos", query=opts.to_query())
        return _parse_list(Repository, payload, response), response

    def list_user_repos(self, username: str, opts: ListOptions) -> tuple[list[Repository | None], Response]:
        payload, response = self._request("GET", f"/users/{_seg(username)}/repos", query=opts.to_query())
        return _parse_list(Repository, payload, response), response

    def create_repo(self, option: CreateRepoOption) -> tuple[Repository | None, Response]:
        payload, response = self._request("POST", "/user/repos", body=option.to_dict())
        return _parse_object(Repository, payload), response

    def create_org_repo(self, org: str, option: CreateRepoOption) -> tuple[Repository | None, Response]:
        payload, response = self._request("POST", f"/orgs/{_seg(org)}/repos", body=option.to_dict())
        return _parse_object(Repository, payload), response

    def edit_repo(self, owner: str, repo: str, option: EditRepoOption) -> tuple[Repository | None, Response]:
        payload, response = self._request("PATCH", _repo_path(owner, repo), body=option.to_dict())
        return _parse_object(Repository, payload), response

    def delete_repo(self, owner: str, repo: str) -> Response:
        _, response = self._request("DELETE", _repo_path(owner, repo))
        return response

    # Deploy keys and commits

    def list_deploy_keys(
        self, owner: str, repo: str, opts: ListOptions
    ) -> tuple[list[DeployKey | None], Response]:
        payload, response = self._request("GET", f"{_repo_path(owner, repo)}/keys", query=opts.to_query())
        return _parse_list(DeployKey, payload, response), response

    def create_deploy_key(
        self, owner: str, repo: str, option: CreateKeyOption
    ) -> tuple[DeployKey | None, Response]:
        payload, response = self._request("POST", f"{_repo_path(owner, repo)}/keys", body=option.to_dict())
        return _parse_object(DeployKey, payload), response

    def delete_deploy_key(self, owner: str, repo: str, key_id: int) -> Response:
        _, response = self._request("DELETE", f"{_repo_path(owner, repo)}/keys/{key_id}")
        return response

    def list_repo_commits(
        self, owner: str, repo: str, sha: str, opts: ListOptions
    ) -> tuple[list[Commit | None], Response]:
        query = opts.to_query()
        if sha:
            query["sha"] = sha
        payload, response = self._request("GET", f"{_repo_path(owner, repo)}/commits", query=query)
        return _parse_list(Commit, payload, response), response

    # Team access

    def check_repo_team(self, owner: str, repo: str, team: str) -> tuple[Team | None, Response]:
        payload, response = self._request("GET", f"{_repo_path(owner, repo)}/teams/{_seg(team)}")
        return _parse_object(Team, payload), response

    def list_repo_teams(self, owner: str, repo: str) -> tuple[list[Team | None], Response]:
        payload, response = self._request("GET", f"{_repo_path(owner, repo)}/teams")
        return _parse_list(Team, payload, response), response

    def add_repo_team(self, owner: str, repo: str, team: str) -> Response:
        _, response = self._request("PUT", f"{_repo_path(owner, repo)}/teams/{_seg(team)}")
        return response

    def remove_repo_team(self, owner: str, repo: str, team: str) -> Response:
        _, response = self._request("DELETE", f"{_repo_path(owner, repo)}/teams/{_seg(team)}")
        return response

    # Pull requests

    def list_repo_pull_requests(
        self, owner: str, repo: str, opts: ListOptions
    ) -> tuple[list[PullRequest | None], Response]:
        payload, response = self._request("GET", f"{_repo_path(owner, repo)}/pulls", query=opts.to_query())
        return _parse_list(PullRequest, payload, response), response

    def create_pull_request(
        self, owner: str, repo: str, option: CreatePullRequestOption
    ) -> tuple[PullRequest | None, Response]:
        payload, response = self._request("POST", f"{_repo_path(owner, repo)}/pulls", body=option.to_dict())
        return _parse_object(PullRequest, payload), response

    def get_pull_request(self, owner: str, repo: str, index: int) -> tuple[PullRequest | None, Response]:
        payload, response = self._request("GET", f"{_repo_path(owner, repo)}/pulls/{index}")
        return _parse_object(PullRequest, payload), response

    def merge_pull_request(
        self, owner: str, repo: str, index: int, option: MergePullRequestOption
    ) -> tuple[bool, Response]:
        _, response = self._request(
            "POST", f"{_repo_path(owner, repo)}/pulls/{index}/merge", body=option.to_dict()
        )
        return 200 <= response.status_code < 300, response

    # Plumbing

    def _request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> tuple[Any, Response]:
        url = f"{self._api_base_url}{path}"
        if query:
            url = f"{url}?{urlencode(query)}"

        data = json.dumps(body).encode("utf-8") if body is not None else None
        request = Request(url, data=data, method=method, headers=self._build_headers(with_body=data is not None))

        LOGGER.debug("gitea request", extra={"event": "gitea.request", "method": method, "url": url})

        try:
            with self._urlopen_fn(request, timeout=self._timeout_seconds) as raw:
                status_code = raw.status
                headers = dict(raw.headers.items())
                content = raw.read()
        except HTTPError as error:
            error_headers = dict(error.headers.items()) if error.headers else {}
            response = Response(status_code=error.code, url=url, headers=error_headers)
            raise GiteaAPIError(
                f"Gitea API request {method} {url} failed with HTTP {error.code}: {_error_message(error)}",
                response=response,
            ) from error
        except URLError as error:
            raise GiteaAPIError(f"Gitea API request {method} {url} failed: {error.reason}") from error

        response = Response(status_code=status_code, url=url, headers=headers)
        if not content or not content.strip():
            return None, response

        try:
            return json.loads(content), response
        except json.JSONDecodeError as error:
            raise GiteaAPIError(f"Invalid JSON received from Gitea API for URL: {url}", response=response) from error

    def _build_headers(self, *, with_body: bool) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if with_body:
            headers["Content-Type"] = "application/json"
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers


def _seg(value: str) -> str:
    return quote(value, safe="")


def _repo_path(owner: str, repo: str) -> str:
    return f"/repos/{_seg(owner)}/{_seg(repo)}"


def _parse_object(api_type: type[ApiT], payload: Any) -> ApiT | None:
    # A null, empty or non-object body is handed on as None for validation to reject.
    return api_type.from_dict(payload) if isinstance(payload, dict) else None


def _parse_list(api_type: type[ApiT], payload: Any, response: Response) -> list[ApiT | None]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise InvalidServerDataError(f"expected a JSON array from {response.url}, got {type(payload).__name__}")
    return [_parse_object(api_type, item) for item in payload]


def _error_message(error: HTTPError) -> str:
    try:
        parsed = json.loads(error.read() or b"")
    except (json.JSONDecodeError, OSError, ValueError):
        return str(error.reason)
    if isinstance(parsed, dict) and isinstance(parsed.get("message"), str):
        return parsed["message"]
    return str(error.reason)
