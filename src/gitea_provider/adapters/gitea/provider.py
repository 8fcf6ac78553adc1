from __future__ import annotations

from urllib.parse import urlparse

from gitea_provider.domain.entities import OrganizationRef, RepositoryRef

from .client import GiteaClient
from .resources import (
    CommitClient,
    DeployKeyClient,
    OrganizationsClient,
    PullRequestClient,
    RepositoriesClient,
    TeamAccessClient,
    TeamsClient,
)
from .transport import HttpGiteaTransport


PROVIDER_ID = "gitea"


class GiteaProvider:
    """Entry point to every Gitea-backed provider port for one server.

    Attributes:
        domain: Host (and port, if any) of the Gitea server, e.g. `gitea.example.com`.
    """

    provider_id = PROVIDER_ID

    def __init__(self, client: GiteaClient, *, domain: str) -> None:
        self._client = client
        self.domain = domain
        self._organizations = OrganizationsClient(client, domain)
        self._repositories = RepositoriesClient(client, domain)

    @property
    def client(self) -> GiteaClient:
        return self._client

    @property
    def organizations(self) -> OrganizationsClient:
        return self._organizations

    @property
    def repositories(self) -> RepositoriesClient:
        return self._repositories

    def supports_domain(self, domain: str) -> bool:
        return domain == self.domain

    def teams(self, ref: OrganizationRef) -> TeamsClient:
        return TeamsClient(self._client, self.domain, ref)

    def deploy_keys(self, ref: RepositoryRef) -> DeployKeyClient:
        return DeployKeyClient(self._client, self.domain, ref)

    def team_access(self, ref: RepositoryRef) -> TeamAccessClient:
        return TeamAccessClient(self._client, self.domain, ref)

    def pull_requests(self, ref: RepositoryRef) -> PullRequestClient:
        return PullRequestClient(self._client, self.domain, ref)

    def commits(self, ref: RepositoryRef) -> CommitClient:
        return CommitClient(self._client, self.domain, ref)


def new_gitea_provider(
    base_url: str,
    token: str | None,
    *,
    destructive_actions: bool = False,
    timeout_seconds: float = 30.0,
    max_pages: int | None = None,
) -> GiteaProvider:
    """Build a provider talking to the Gitea server at `base_url`."""
    domain = urlparse(base_url).netloc
    if not domain:
        raise ValueError(f"Gitea base URL must be absolute (e.g. https://gitea.example.com), got: {base_url!r}")

    transport = HttpGiteaTransport(base_url=base_url, token=token, timeout_seconds=timeout_seconds)
    client = GiteaClient(transport, destructive_actions=destructive_actions, max_pages=max_pages)
    return GiteaProvider(client, domain=domain)
