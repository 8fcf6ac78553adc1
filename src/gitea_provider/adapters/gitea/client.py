from __future__ import annotations

import logging
from typing import Callable, TypeVar

from gitea_provider.domain.entities import RepositoryPermission
from gitea_provider.domain.errors import DestructiveCallDisallowedError, NotFoundError

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
from .http_errors import handle_http_error
from .pagination import all_pages
from .transport import GiteaAPIError, GiteaTransport, Response
from .validation import (
    validate_api_object,
    validate_deploy_key_api,
    validate_organization_api,
    validate_repository_api,
)


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class GiteaClient:
    """Higher-level operations on top of a `GiteaTransport`.

    Every list method walks all pages, every returned object is validated,
    and every failure is normalized through `handle_http_error`. Pass a fake
    transport to unit-test anything built on top of this class.
    """

    def __init__(
        self,
        transport: GiteaTransport,
        *,
        destructive_actions: bool = False,
        max_pages: int | None = None,
    ) -> None:
        self._transport = transport
        self._destructive_actions = destructive_actions
        self._max_pages = max_pages

    @property
    def transport(self) -> GiteaTransport:
        return self._transport

    # Organizations and teams

    def get_org(self, org_name: str) -> Organization:
        """GET /orgs/{org}"""
        api_obj = self._call(lambda: self._transport.get_org(org_name))
        validate_organization_api(api_obj)
        return api_obj

    def list_orgs(self) -> list[Organization]:
        """GET /user/orgs"""
        api_objs = self._collect(self._transport.list_my_orgs)
        for api_obj in api_objs:
            validate_organization_api(api_obj)
        return api_objs

    def list_org_teams(self, org_name: str) -> list[Team]:
        """GET /orgs/{org}/teams"""
        return _require_all("team", self._collect(lambda opts: self._transport.list_org_teams(org_name, opts)))

    def list_team_members(self, team_id: int) -> list[User]:
        """GET /teams/{id}/members"""
        return _require_all("team member", self._collect(lambda opts: self._transport.list_team_members(team_id, opts)))

    def list_org_team_members(self, org_name: str, team_name: str) -> list[User]:
        """GET /orgs/{org}/teams, then GET /teams/{id}/members for the team named `team_name`.

        Teams can only be addressed by ID, so the organization's teams are
        scanned for a name match first. No match raises `NotFoundError`.
        """
        for team in self.list_org_teams(org_name):
            if team.name == team_name:
                return self.list_team_members(team.id)
        raise NotFoundError(f"team {team_name!r} not found in organization {org_name!r}")

    # Repositories

    def get_repo(self, owner: str, repo: str) -> Repository:
        """GET /repos/{owner}/{repo}"""
        return self._validated_repo(lambda: self._transport.get_repo(owner, repo))

    def list_org_repos(self, org: str) -> list[Repository]:
        """GET /orgs/{org}/repos"""
        return _validate_repositories(self._collect(lambda opts: self._transport.list_org_repos(org, opts)))

    def list_user_repos(self, username: str) -> list[Repository]:
        """GET /users/{username}/repos"""
        return _validate_repositories(self._collect(lambda opts: self._transport.list_user_repos(username, opts)))

    def create_repo(self, org_name: str, req: CreateRepoOption) -> Repository:
        """POST /user/repos when `org_name` is empty, POST /orgs/{org}/repos otherwise."""
        if org_name:
            api_obj = self._validated_repo(lambda: self._transport.create_org_repo(org_name, req))
        else:
            api_obj = self._validated_repo(lambda: self._transport.create_repo(req))
        LOGGER.info(
            "repository created",
            extra={"event": "gitea.repo.created", "full_name": api_obj.full_name},
        )
        return api_obj

    def update_repo(self, owner: str, repo: str, req: EditRepoOption) -> Repository:
        """PATCH /repos/{owner}/{repo}"""
        return self._validated_repo(lambda: self._transport.edit_repo(owner, repo, req))

    def delete_repo(self, owner: str, repo: str) -> None:
        """DELETE /repos/{owner}/{repo}

        Refused unless the client was built with `destructive_actions=True`.
        """
        if not self._destructive_actions:
            LOGGER.warning(
                "repository deletion blocked",
                extra={"event": "gitea.repo.delete.blocked", "owner": owner, "repo": repo},
            )
            raise DestructiveCallDisallowedError(
                f"cannot delete repository {owner}/{repo}: destructive actions are disallowed"
            )
        self._call(lambda: self._transport.delete_repo(owner, repo))
        LOGGER.info("repository deleted", extra={"event": "gitea.repo.deleted", "owner": owner, "repo": repo})

    # Deploy keys and commits

    def list_keys(self, owner: str, repo: str) -> list[DeployKey]:
        """GET /repos/{owner}/{repo}/keys"""
        api_objs = self._collect(lambda opts: self._transport.list_deploy_keys(owner, repo, opts))
        for api_obj in api_objs:
            validate_deploy_key_api(api_obj)
        return api_objs

    def create_key(self, owner: str, repo: str, req: CreateKeyOption) -> DeployKey:
        """POST /repos/{owner}/{repo}/keys"""
        api_obj = self._call(lambda: self._transport.create_deploy_key(owner, repo, req))
        validate_deploy_key_api(api_obj)
        LOGGER.info(
            "deploy key created",
            extra={"event": "gitea.key.created", "owner": owner, "repo": repo, "title": api_obj.title},
        )
        return api_obj

    def delete_key(self, owner: str, repo: str, key_id: int) -> None:
        """DELETE /repos/{owner}/{repo}/keys/{id}"""
        self._call(lambda: self._transport.delete_deploy_key(owner, repo, key_id))
        LOGGER.info(
            "deploy key deleted",
            extra={"event": "gitea.key.deleted", "owner": owner, "repo": repo, "key_id": key_id},
        )

    def list_commits_page(self, owner: str, repo: str, branch: str, per_page: int, page: int) -> list[Commit]:
        """GET /repos/{owner}/{repo}/commits, one explicit page only."""
        opts = ListOptions(page=page, page_size=per_page)
        return _require_all("commit", self._call(lambda: self._transport.list_repo_commits(owner, repo, branch, opts)))

    # Team access

    def get_team_permissions(self, org_name: str, repo: str, team_name: str) -> str:
        """GET /repos/{owner}/{repo}/teams/{team}, returning the team's access mode."""
        team = self._call(lambda: self._transport.check_repo_team(org_name, repo, team_name))
        validate_api_object("team", team)
        return team.permission

    def get_repo_teams(self, org_name: str, repo: str) -> list[Team]:
        """GET /repos/{owner}/{repo}/teams

        The endpoint is not paged, so this is a single request.
        """
        return _require_all("team", self._call(lambda: self._transport.list_repo_teams(org_name, repo)))

    def add_team(self, org_name: str, repo: str, team_name: str, permission: RepositoryPermission) -> None:
        """PUT /repos/{owner}/{repo}/teams/{team}

        Gitea grants the team's own permission; `permission` is only logged.
        """
        LOGGER.debug(
            "adding team to repository",
            extra={
                "event": "gitea.team.add",
                "org": org_name,
                "repo": repo,
                "team": team_name,
                "permission": permission.value,
            },
        )
        self._call(lambda: self._transport.add_repo_team(org_name, repo, team_name))

    def remove_team(self, org_name: str, repo: str, team_name: str) -> None:
        """DELETE /repos/{owner}/{repo}/teams/{team}"""
        self._call(lambda: self._transport.remove_repo_team(org_name, repo, team_name))

    # Pull requests

    def list_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        """GET /repos/{owner}/{repo}/pulls

        Only the first page the server returns is fetched.
        """
        # TODO: walk all pages once callers need more than the server's default page size.
        api_objs = self._call(lambda: self._transport.list_repo_pull_requests(owner, repo, ListOptions()))
        return _require_all("pull request", api_objs)

    def create_pull_request(self, owner: str, repo: str, req: CreatePullRequestOption) -> PullRequest:
        """POST /repos/{owner}/{repo}/pulls"""
        api_obj = self._call(lambda: self._transport.create_pull_request(owner, repo, req))
        validate_api_object("pull request", api_obj)
        return api_obj

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        """GET /repos/{owner}/{repo}/pulls/{number}"""
        api_obj = self._call(lambda: self._transport.get_pull_request(owner, repo, number))
        validate_api_object("pull request", api_obj)
        return api_obj

    def merge_pull_request(self, owner: str, repo: str, number: int, req: MergePullRequestOption) -> bool:
        """POST /repos/{owner}/{repo}/pulls/{number}/merge"""
        merged = self._call(lambda: self._transport.merge_pull_request(owner, repo, number, req))
        LOGGER.info(
            "pull request merged",
            extra={"event": "gitea.pull_request.merged", "owner": owner, "repo": repo, "number": number},
        )
        return merged

    # Plumbing

    def _call(self, request: Callable[[], tuple[T, Response] | Response]) -> T | None:
        """Run one transport call and translate its failure, if any."""
        try:
            result = request()
        except GiteaAPIError as error:
            raise handle_http_error(error.response, error) from error
        if isinstance(result, tuple):
            return result[0]
        return None

    def _collect(self, fetch: Callable[[ListOptions], tuple[list[T], Response]]) -> list[T]:
        """Accumulate every page served by `fetch` into one list."""
        opts = ListOptions()
        api_objs: list[T] = []

        def fetch_page() -> Response | None:
            page_objs, response = fetch(opts)
            if page_objs:
                api_objs.extend(page_objs)
                return response
            return None

        all_pages(opts, fetch_page, max_pages=self._max_pages)
        return api_objs

    def _validated_repo(self, request: Callable[[], tuple[Repository, Response]]) -> Repository:
        api_obj = self._call(request)
        validate_repository_api(api_obj)
        return api_obj


def _validate_repositories(api_objs: list[Repository]) -> list[Repository]:
    for api_obj in api_objs:
        validate_repository_api(api_obj)
    return api_objs


def _require_all(kind: str, api_objs: list[T]) -> list[T]:
    for api_obj in api_objs:
        validate_api_object(kind, api_obj)
    return api_objs
