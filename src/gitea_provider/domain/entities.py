from __future__ import annotations
"""Generic git provider data contracts.

These models are provider-agnostic: the Gitea adapter populates them from
API objects, and orchestration code consumes them without knowing which
hosting service produced them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RepositoryVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class RepositoryPermission(str, Enum):
    """Access level a team has on a repository."""

    PULL = "pull"
    TRIAGE = "triage"
    PUSH = "push"
    MAINTAIN = "maintain"
    ADMIN = "admin"


class MergeMethod(str, Enum):
    MERGE = "merge"
    SQUASH = "squash"
    REBASE = "rebase"


@dataclass(frozen=True, slots=True)
class OrganizationRef:
    """Points at an organization on a given host (e.g. `gitea.example.com`)."""

    domain: str
    organization: str

    @property
    def identity(self) -> str:
        return self.organization


@dataclass(frozen=True, slots=True)
class UserRef:
    """Points at a user account on a given host."""

    domain: str
    user_login: str

    @property
    def identity(self) -> str:
        return self.user_login


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """Points at a repository owned by an organization or a user.

    Attributes:
        owner: Organization or user owning the repository.
        repository_name: Repository name without the owner prefix.
    """

    owner: OrganizationRef | UserRef
    repository_name: str

    @property
    def domain(self) -> str:
        return self.owner.domain

    @property
    def identity(self) -> str:
        return self.owner.identity

    @property
    def is_organization_owned(self) -> bool:
        return isinstance(self.owner, OrganizationRef)

    def clone_url(self, transport: str = "https") -> str:
        """Return the clone URL for `https` or `ssh` transport."""
        if transport == "ssh":
            return f"git@{self.domain}:{self.identity}/{self.repository_name}.git"
        if transport == "https":
            return f"https://{self.domain}/{self.identity}/{self.repository_name}.git"
        raise ValueError(f"Unsupported clone transport '{transport}'. Allowed values: https, ssh")

    def __str__(self) -> str:
        return f"{self.domain}/{self.identity}/{self.repository_name}"


@dataclass(slots=True)
class Organization:
    ref: OrganizationRef
    name: str | None = None
    description: str | None = None


@dataclass(slots=True)
class Team:
    """An organization team and the logins of its members."""

    organization: OrganizationRef
    name: str
    members: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RepositoryInfo:
    """Mutable repository settings; `None` means "leave as is" on update."""

    description: str | None = None
    default_branch: str | None = None
    visibility: RepositoryVisibility | None = None


@dataclass(slots=True)
class Repository:
    ref: RepositoryRef
    info: RepositoryInfo


@dataclass(slots=True)
class DeployKeyInfo:
    """Deploy key settings. Keys are addressed by `name` (the key title)."""

    name: str
    key: str
    read_only: bool = True


@dataclass(slots=True)
class DeployKey:
    repository: RepositoryRef
    id: int
    info: DeployKeyInfo
    created_at: datetime | None = None


@dataclass(slots=True)
class TeamAccessInfo:
    name: str
    permission: RepositoryPermission | None = None


@dataclass(slots=True)
class TeamAccess:
    repository: RepositoryRef
    info: TeamAccessInfo


@dataclass(slots=True)
class PullRequest:
    number: int
    title: str
    description: str
    web_url: str
    merged: bool
    source_branch: str
    target_branch: str


@dataclass(slots=True)
class Commit:
    sha: str
    author: str
    message: str
    url: str
    created_at: datetime | None = None
