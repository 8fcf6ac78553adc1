from __future__ import annotations
"""Structural contracts for objects returned by the Gitea API.

Each validator raises `InvalidServerDataError` naming every missing field,
and returns `None` when the object is usable.
"""

from typing import Iterable

from gitea_provider.domain.errors import InvalidServerDataError

from .api_types import DeployKey, Organization, Repository


def validate_organization_api(api_obj: Organization | None) -> None:
    _require("organization", api_obj, _missing(("username", _text(api_obj, "username"))))


def validate_repository_api(api_obj: Repository | None) -> None:
    owner = api_obj.owner if api_obj is not None else None
    _require(
        "repository",
        api_obj,
        _missing(
            ("full_name", _text(api_obj, "full_name")),
            ("owner.login", _text(owner, "login")),
        ),
    )


def validate_deploy_key_api(api_obj: DeployKey | None) -> None:
    _require(
        "deploy key",
        api_obj,
        _missing(
            ("key", _text(api_obj, "key")),
            ("title", _text(api_obj, "title")),
        ),
    )


def validate_api_object(kind: str, api_obj: object | None) -> None:
    """Reject a missing object of a kind that has no further required fields."""
    _require(kind, api_obj, ())


def _text(api_obj: object | None, attribute: str) -> str:
    if api_obj is None:
        return ""
    value = getattr(api_obj, attribute, "")
    return value.strip() if isinstance(value, str) else ""


def _missing(*fields: tuple[str, str]) -> list[str]:
    return [name for name, value in fields if not value]


def _require(kind: str, api_obj: object | None, missing: Iterable[str]) -> None:
    if api_obj is None:
        raise InvalidServerDataError(f"{kind} returned by the server is empty")
    missing = list(missing)
    if missing:
        raise InvalidServerDataError(
            f"{kind} returned by the server is missing required field(s): {', '.join(missing)}"
        )
