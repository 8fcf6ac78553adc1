from __future__ import annotations
"""Generic git provider port interfaces.

Orchestration code depends only on these abstractions. Provider adapters
(Gitea today) implement them on top of their own REST clients.
"""

from abc import ABC, abstractmethod

from .entities import (
    Commit,
    DeployKey,
    DeployKeyInfo,
    MergeMethod,
    Organization,
    OrganizationRef,
    PullRequest,
    Repository,
    RepositoryInfo,
    RepositoryRef,
    Team,
    TeamAccess,
    TeamAccessInfo,
    UserRef,
)


class OrganizationsPort(ABC):
    """Organizations visible to the authenticated user."""

    @abstractmethod
    def get(self, ref: OrganizationRef) -> Organization:
        """Return one organization, or raise `NotFoundError`."""
        raise NotImplementedError

    @abstractmethod
    def list(self) -> list[Organization]:
        """List all organizations the authenticated user belongs to."""
        raise NotImplementedError


class TeamsPort(ABC):
    """Teams of one organization."""

    @abstractmethod
    def get(self, team_name: str) -> Team:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> list[Team]:
        raise NotImplementedError


class RepositoriesPort(ABC):
    """Repositories owned by organizations or users."""

    @abstractmethod
    def get(self, ref: RepositoryRef) -> Repository:
        raise NotImplementedError

    @abstractmethod
    def list(self, owner: OrganizationRef | UserRef) -> list[Repository]:
        """List every repository owned by an organization or a user."""
        raise NotImplementedError

    @abstractmethod
    def create(self, ref: RepositoryRef, info: RepositoryInfo, *, auto_init: bool = False) -> Repository:
        raise NotImplementedError

    @abstractmethod
    def update(self, ref: RepositoryRef, info: RepositoryInfo) -> Repository:
        raise NotImplementedError

    @abstractmethod
    def delete(self, ref: RepositoryRef) -> None:
        """Delete a repository. Requires destructive actions to be enabled."""
        raise NotImplementedError

    @abstractmethod
    def reconcile(self, ref: RepositoryRef, info: RepositoryInfo) -> tuple[Repository, bool]:
        """Make the repository match `info`; return it and whether anything changed."""
        raise NotImplementedError


class DeployKeysPort(ABC):
    """Deploy keys of one repository, addressed by key title."""

    @abstractmethod
    def get(self, name: str) -> DeployKey:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> list[DeployKey]:
        raise NotImplementedError

    @abstractmethod
    def create(self, info: DeployKeyInfo) -> DeployKey:
        raise NotImplementedError

    @abstractmethod
    def delete(self, name: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def reconcile(self, info: DeployKeyInfo) -> tuple[DeployKey, bool]:
        raise NotImplementedError


class TeamAccessPort(ABC):
    """Team permissions on one repository."""

    @abstractmethod
    def get(self, team_name: str) -> TeamAccess:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> list[TeamAccess]:
        raise NotImplementedError

    @abstractmethod
    def create(self, info: TeamAccessInfo) -> TeamAccess:
        """Grant a team access to the repository."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, team_name: str) -> None:
        raise NotImplementedError


class PullRequestsPort(ABC):
    """Pull requests of one repository."""

    @abstractmethod
    def list(self) -> list[PullRequest]:
        raise NotImplementedError

    @abstractmethod
    def create(self, title: str, branch: str, base_branch: str, description: str) -> PullRequest:
        raise NotImplementedError

    @abstractmethod
    def get(self, number: int) -> PullRequest:
        raise NotImplementedError

    @abstractmethod
    def merge(self, number: int, merge_method: MergeMethod, message: str) -> None:
        raise NotImplementedError


class CommitsPort(ABC):
    """Commit history of one repository."""

    @abstractmethod
    def list_page(self, branch: str, per_page: int, page: int) -> list[Commit]:
        """Return one explicit page of commits on `branch`."""
        raise NotImplementedError
