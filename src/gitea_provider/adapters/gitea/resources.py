from __future__ import annotations
"""Generic provider ports implemented on top of `GiteaClient`."""

from datetime import datetime

from gitea_provider.domain.entities import (
    Commit,
    DeployKey,
    DeployKeyInfo,
    MergeMethod,
    Organization,
    OrganizationRef,
    PullRequest,
    Repository,
    RepositoryInfo,
    RepositoryPermission,
    RepositoryRef,
    RepositoryVisibility,
    Team,
    TeamAccess,
    TeamAccessInfo,
    UserRef,
)
from gitea_provider.domain.errors import DomainUnsupportedError, InvalidArgumentError, NotFoundError
from gitea_provider.domain.ports import (
    CommitsPort,
    DeployKeysPort,
    OrganizationsPort,
    PullRequestsPort,
    RepositoriesPort,
    TeamAccessPort,
    TeamsPort,
)

from . import api_types
from .client import GiteaClient


_ACCESS_MODE_TO_PERMISSION = {
    "read": RepositoryPermission.PULL,
    "write": RepositoryPermission.PUSH,
    "admin": RepositoryPermission.ADMIN,
    "owner": RepositoryPermission.ADMIN,
}

_MERGE_STYLES = {
    MergeMethod.MERGE: "merge",
    MergeMethod.SQUASH: "squash",
    MergeMethod.REBASE: "rebase",
}


class _DomainScoped:
    def __init__(self, client: GiteaClient, domain: str) -> None:
        self._client = client
        self._domain = domain

    def _check_domain(self, ref: OrganizationRef | UserRef | RepositoryRef) -> None:
        if ref.domain != self._domain:
            raise DomainUnsupportedError(f"domain {ref.domain!r} is not served by this provider ({self._domain!r})")


class OrganizationsClient(_DomainScoped, OrganizationsPort):
    def get(self, ref: OrganizationRef) -> Organization:
        self._check_domain(ref)
        return _organization_from_api(self._client.get_org(ref.organization), self._domain)

    def list(self) -> list[Organization]:
        return [_organization_from_api(api_obj, self._domain) for api_obj in self._client.list_orgs()]


class TeamsClient(_DomainScoped, TeamsPort):
    """Teams of the organization `ref` points at."""

    def __init__(self, client: GiteaClient, domain: str, ref: OrganizationRef) -> None:
        super().__init__(client, domain)
        self._check_domain(ref)
        self._ref = ref

    def get(self, team_name: str) -> Team:
        members = self._client.list_org_team_members(self._ref.organization, team_name)
        return Team(organization=self._ref, name=team_name, members=[user.login for user in members])

    def list(self) -> list[Team]:
        return [
            Team(
                organization=self._ref,
                name=team.name,
                members=[user.login for user in self._client.list_team_members(team.id)],
            )
            for team in self._client.list_org_teams(self._ref.organization)
        ]


class RepositoriesClient(_DomainScoped, RepositoriesPort):
    def get(self, ref: RepositoryRef) -> Repository:
        self._check_domain(ref)
        return _repository_from_api(self._client.get_repo(ref.identity, ref.repository_name), ref.owner)

    def list(self, owner: OrganizationRef | UserRef) -> list[Repository]:
        self._check_domain(owner)
        if isinstance(owner, OrganizationRef):
            api_objs = self._client.list_org_repos(owner.organization)
        else:
            api_objs = self._client.list_user_repos(owner.user_login)
        return [_repository_from_api(api_obj, owner) for api_obj in api_objs]

    def create(self, ref: RepositoryRef, info: RepositoryInfo, *, auto_init: bool = False) -> Repository:
        self._check_domain(ref)
        req = api_types.CreateRepoOption(
            name=ref.repository_name,
            description=info.description or "",
            private=info.visibility != RepositoryVisibility.PUBLIC,
            auto_init=auto_init,
            default_branch=info.default_branch or "",
        )
        org_name = ref.identity if ref.is_organization_owned else ""
        return _repository_from_api(self._client.create_repo(org_name, req), ref.owner)

    def update(self, ref: RepositoryRef, info: RepositoryInfo) -> Repository:
        self._check_domain(ref)
        req = api_types.EditRepoOption(
            description=info.description,
            private=None if info.visibility is None else info.visibility == RepositoryVisibility.PRIVATE,
            default_branch=info.default_branch,
        )
        api_obj = self._client.update_repo(ref.identity, ref.repository_name, req)
        return _repository_from_api(api_obj, ref.owner)

    def delete(self, ref: RepositoryRef) -> None:
        self._check_domain(ref)
        self._client.delete_repo(ref.identity, ref.repository_name)

    def reconcile(self, ref: RepositoryRef, info: RepositoryInfo) -> tuple[Repository, bool]:
        """Create the repository if missing, or update the fields of `info` that differ."""
        try:
            actual = self.get(ref)
        except NotFoundError:
            return self.create(ref, info), True

        if not _repository_differs(actual.info, info):
            return actual, False
        return self.update(ref, info), True


class DeployKeyClient(_DomainScoped, DeployKeysPort):
    """Deploy keys of one repository, matched by title."""

    def __init__(self, client: GiteaClient, domain: str, ref: RepositoryRef) -> None:
        super().__init__(client, domain)
        self._check_domain(ref)
        self._ref = ref

    def get(self, name: str) -> DeployKey:
        return self._to_deploy_key(self._find(name))

    def list(self) -> list[DeployKey]:
        return [self._to_deploy_key(api_obj) for api_obj in self._list_api()]

    def create(self, info: DeployKeyInfo) -> DeployKey:
        req = api_types.CreateKeyOption(title=info.name, key=info.key, read_only=info.read_only)
        api_obj = self._client.create_key(self._ref.identity, self._ref.repository_name, req)
        return self._to_deploy_key(api_obj)

    def delete(self, name: str) -> None:
        api_obj = self._find(name)
        self._client.delete_key(self._ref.identity, self._ref.repository_name, api_obj.id)

    def reconcile(self, info: DeployKeyInfo) -> tuple[DeployKey, bool]:
        """Create the key if missing. Keys cannot be edited, so a changed key is recreated."""
        try:
            actual = self.get(info.name)
        except NotFoundError:
            return self.create(info), True

        if actual.info.key.strip() == info.key.strip() and actual.info.read_only == info.read_only:
            return actual, False
        self.delete(info.name)
        return self.create(info), True

    def _list_api(self) -> list[api_types.DeployKey]:
        return self._client.list_keys(self._ref.identity, self._ref.repository_name)

    def _find(self, name: str) -> api_types.DeployKey:
        for api_obj in self._list_api():
            if api_obj.title == name:
                return api_obj
        raise NotFoundError(f"deploy key {name!r} not found in repository {self._ref}")

    def _to_deploy_key(self, api_obj: api_types.DeployKey) -> DeployKey:
        return DeployKey(
            repository=self._ref,
            id=api_obj.id,
            info=DeployKeyInfo(name=api_obj.title, key=api_obj.key, read_only=api_obj.read_only),
            created_at=_parse_time(api_obj.created_at),
        )


class TeamAccessClient(_DomainScoped, TeamAccessPort):
    """Team permissions on one organization-owned repository."""

    def __init__(self, client: GiteaClient, domain: str, ref: RepositoryRef) -> None:
        super().__init__(client, domain)
        self._check_domain(ref)
        self._ref = ref

    def get(self, team_name: str) -> TeamAccess:
        access_mode = self._client.get_team_permissions(self._ref.identity, self._ref.repository_name, team_name)
        return self._to_team_access(team_name, access_mode)

    def list(self) -> list[TeamAccess]:
        teams = self._client.get_repo_teams(self._ref.identity, self._ref.repository_name)
        return [self._to_team_access(team.name, team.permission) for team in teams]

    def create(self, info: TeamAccessInfo) -> TeamAccess:
        """Grant the team access and return the permission Gitea actually applied.

        Gitea grants the team's own access mode, which can differ from `info.permission`.
        """
        permission = info.permission or RepositoryPermission.PULL
        self._client.add_team(self._ref.identity, self._ref.repository_name, info.name, permission)
        return self.get(info.name)

    def delete(self, team_name: str) -> None:
        self._client.remove_team(self._ref.identity, self._ref.repository_name, team_name)

    def _to_team_access(self, team_name: str, access_mode: str) -> TeamAccess:
        return TeamAccess(
            repository=self._ref,
            info=TeamAccessInfo(name=team_name, permission=permission_from_access_mode(access_mode)),
        )


class PullRequestClient(_DomainScoped, PullRequestsPort):
    def __init__(self, client: GiteaClient, domain: str, ref: RepositoryRef) -> None:
        super().__init__(client, domain)
        self._check_domain(ref)
        self._ref = ref

    def list(self) -> list[PullRequest]:
        api_objs = self._client.list_pull_requests(self._ref.identity, self._ref.repository_name)
        return [_pull_request_from_api(api_obj) for api_obj in api_objs]

    def create(self, title: str, branch: str, base_branch: str, description: str) -> PullRequest:
        req = api_types.CreatePullRequestOption(title=title, head=branch, base=base_branch, body=description)
        api_obj = self._client.create_pull_request(self._ref.identity, self._ref.repository_name, req)
        return _pull_request_from_api(api_obj)

    def get(self, number: int) -> PullRequest:
        api_obj = self._client.get_pull_request(self._ref.identity, self._ref.repository_name, number)
        return _pull_request_from_api(api_obj)

    def merge(self, number: int, merge_method: MergeMethod, message: str) -> None:
        style = _MERGE_STYLES.get(merge_method)
        if style is None:
            raise InvalidArgumentError(f"unsupported merge method: {merge_method!r}")
        req = api_types.MergePullRequestOption(style=style, message=message)
        self._client.merge_pull_request(self._ref.identity, self._ref.repository_name, number, req)


class CommitClient(_DomainScoped, CommitsPort):
    def __init__(self, client: GiteaClient, domain: str, ref: RepositoryRef) -> None:
        super().__init__(client, domain)
        self._check_domain(ref)
        self._ref = ref

    def list_page(self, branch: str, per_page: int, page: int) -> list[Commit]:
        api_objs = self._client.list_commits_page(
            self._ref.identity, self._ref.repository_name, branch, per_page, page
        )
        return [
            Commit(
                sha=api_obj.sha,
                author=api_obj.author_name,
                message=api_obj.message,
                url=api_obj.html_url,
                created_at=_parse_time(api_obj.created),
            )
            for api_obj in api_objs
        ]


def permission_from_access_mode(access_mode: str) -> RepositoryPermission | None:
    """Map a Gitea access mode onto a generic permission; `none` maps to `None`."""
    normalized = access_mode.strip().lower()
    if normalized in {"", "none"}:
        return None
    permission = _ACCESS_MODE_TO_PERMISSION.get(normalized)
    if permission is None:
        raise InvalidArgumentError(f"unknown Gitea access mode: {access_mode!r}")
    return permission


def _organization_from_api(api_obj: api_types.Organization, domain: str) -> Organization:
    return Organization(
        ref=OrganizationRef(domain=domain, organization=api_obj.username),
        name=api_obj.full_name or None,
        description=api_obj.description or None,
    )


def _repository_from_api(api_obj: api_types.Repository, owner: OrganizationRef | UserRef) -> Repository:
    visibility = RepositoryVisibility.PRIVATE if api_obj.private else RepositoryVisibility.PUBLIC
    return Repository(
        ref=RepositoryRef(owner=owner, repository_name=api_obj.name or api_obj.full_name.rsplit("/", 1)[-1]),
        info=RepositoryInfo(
            description=api_obj.description,
            default_branch=api_obj.default_branch or None,
            visibility=visibility,
        ),
    )


def _repository_differs(actual: RepositoryInfo, desired: RepositoryInfo) -> bool:
    for name in ("description", "default_branch", "visibility"):
        wanted = getattr(desired, name)
        if wanted is not None and wanted != getattr(actual, name):
            return True
    return False


def _pull_request_from_api(api_obj: api_types.PullRequest) -> PullRequest:
    return PullRequest(
        number=api_obj.number,
        title=api_obj.title,
        description=api_obj.body,
        web_url=api_obj.html_url,
        merged=api_obj.merged,
        source_branch=api_obj.head.ref,
        target_branch=api_obj.base.ref,
    )


def _parse_time(value: str) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
