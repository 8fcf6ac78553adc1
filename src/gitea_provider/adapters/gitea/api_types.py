from __future__ import annotations
"""Gitea API v1 objects and request options.

`from_dict` constructors are lenient: missing or mistyped fields fall back to
empty values, so structural validity is decided by `validation`, not here.
"""

from dataclasses import dataclass, field
from typing import Any


def _str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    return value if isinstance(value, str) else ""


def _int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def _bool(payload: dict[str, Any], key: str) -> bool:
    return payload.get(key) is True


def _dict(payload: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = payload.get(key)
    return value if isinstance(value, dict) else None


@dataclass(slots=True)
class ListOptions:
    """Page cursor for list endpoints.

    Attributes:
        page: 1-based page number; 0 leaves the parameter out of the request.
        page_size: Items per page; 0 means the server's default.
    """

    page: int = 0
    page_size: int = 0

    def to_query(self) -> dict[str, str]:
        query: dict[str, str] = {}
        if self.page > 0:
            query["page"] = str(self.page)
        if self.page_size > 0:
            query["limit"] = str(self.page_size)
        return query


@dataclass(slots=True)
class User:
    id: int = 0
    login: str = ""
    full_name: str = ""
    email: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> User:
        return cls(
            id=_int(payload, "id"),
            login=_str(payload, "login"),
            full_name=_str(payload, "full_name"),
            email=_str(payload, "email"),
        )


@dataclass(slots=True)
class Organization:
    id: int = 0
    username: str = ""
    full_name: str = ""
    description: str = ""
    website: str = ""
    visibility: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Organization:
        # Older servers only send `username`, newer ones send `name` as well.
        username = _str(payload, "username") or _str(payload, "name")
        return cls(
            id=_int(payload, "id"),
            username=username,
            full_name=_str(payload, "full_name"),
            description=_str(payload, "description"),
            website=_str(payload, "website"),
            visibility=_str(payload, "visibility"),
        )


@dataclass(slots=True)
class Repository:
    id: int = 0
    owner: User | None = None
    name: str = ""
    full_name: str = ""
    description: str = ""
    private: bool = False
    default_branch: str = ""
    html_url: str = ""
    ssh_url: str = ""
    clone_url: str = ""
    archived: bool = False
    empty: bool = False

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Repository:
        owner = _dict(payload, "owner")
        return cls(
            id=_int(payload, "id"),
            owner=User.from_dict(owner) if owner is not None else None,
            name=_str(payload, "name"),
            full_name=_str(payload, "full_name"),
            description=_str(payload, "description"),
            private=_bool(payload, "private"),
            default_branch=_str(payload, "default_branch"),
            html_url=_str(payload, "html_url"),
            ssh_url=_str(payload, "ssh_url"),
            clone_url=_str(payload, "clone_url"),
            archived=_bool(payload, "archived"),
            empty=_bool(payload, "empty"),
        )


@dataclass(slots=True)
class DeployKey:
    id: int = 0
    key_id: int = 0
    key: str = ""
    title: str = ""
    fingerprint: str = ""
    read_only: bool = False
    created_at: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> DeployKey:
        return cls(
            id=_int(payload, "id"),
            key_id=_int(payload, "key_id"),
            key=_str(payload, "key"),
            title=_str(payload, "title"),
            fingerprint=_str(payload, "fingerprint"),
            read_only=_bool(payload, "read_only"),
            created_at=_str(payload, "created_at"),
        )


@dataclass(slots=True)
class Team:
    id: int = 0
    name: str = ""
    description: str = ""
    permission: str = ""
    includes_all_repositories: bool = False

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Team:
        return cls(
            id=_int(payload, "id"),
            name=_str(payload, "name"),
            description=_str(payload, "description"),
            permission=_str(payload, "permission"),
            includes_all_repositories=_bool(payload, "includes_all_repositories"),
        )


@dataclass(slots=True)
class PRBranchInfo:
    ref: str = ""
    label: str = ""
    sha: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> PRBranchInfo:
        if payload is None:
            return cls()
        return cls(ref=_str(payload, "ref"), label=_str(payload, "label"), sha=_str(payload, "sha"))


@dataclass(slots=True)
class PullRequest:
    id: int = 0
    number: int = 0
    title: str = ""
    body: str = ""
    state: str = ""
    html_url: str = ""
    merged: bool = False
    head: PRBranchInfo = field(default_factory=PRBranchInfo)
    base: PRBranchInfo = field(default_factory=PRBranchInfo)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> PullRequest:
        return cls(
            id=_int(payload, "id"),
            number=_int(payload, "number"),
            title=_str(payload, "title"),
            body=_str(payload, "body"),
            state=_str(payload, "state"),
            html_url=_str(payload, "html_url"),
            merged=_bool(payload, "merged"),
            head=PRBranchInfo.from_dict(_dict(payload, "head")),
            base=PRBranchInfo.from_dict(_dict(payload, "base")),
        )


@dataclass(slots=True)
class Commit:
    sha: str = ""
    html_url: str = ""
    message: str = ""
    author_name: str = ""
    created: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Commit:
        detail = _dict(payload, "commit") or {}
        author = _dict(detail, "author") or {}
        return cls(
            sha=_str(payload, "sha"),
            html_url=_str(payload, "html_url"),
            message=_str(detail, "message"),
            author_name=_str(author, "name"),
            created=_str(payload, "created") or _str(author, "date"),
        )


@dataclass(slots=True)
class CreateRepoOption:
    name: str
    description: str = ""
    private: bool = False
    auto_init: bool = False
    default_branch: str = ""

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "private": self.private,
            "auto_init": self.auto_init,
        }
        if self.default_branch:
            body["default_branch"] = self.default_branch
        return body


@dataclass(slots=True)
class EditRepoOption:
    """Partial update; only fields that are not `None` are sent."""

    description: str | None = None
    private: bool | None = None
    default_branch: str | None = None
    archived: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("description", self.description),
                ("private", self.private),
                ("default_branch", self.default_branch),
                ("archived", self.archived),
            )
            if value is not None
        }


@dataclass(slots=True)
class CreateKeyOption:
    title: str
    key: str
    read_only: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "key": self.key, "read_only": self.read_only}


@dataclass(slots=True)
class CreatePullRequestOption:
    title: str
    head: str
    base: str
    body: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "head": self.head, "base": self.base, "body": self.body}


@dataclass(slots=True)
class MergePullRequestOption:
    """Merge request body. `style` is one of merge, rebase, rebase-merge, squash."""

    style: str
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"Do": self.style}
        if self.message:
            body["MergeMessageField"] = self.message
        return body
