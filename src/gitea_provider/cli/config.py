from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urlparse


DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(slots=True)
class AppConfig:
    base_url: str
    token: str | None
    destructive_actions: bool
    timeout_seconds: float
    max_pages: int | None


def load_config(args, env: Mapping[str, str]) -> AppConfig:
    base_url = _normalize_empty(args.base_url) or _normalize_empty(env.get("GITEA_BASE_URL"))
    token = _normalize_empty(env.get("GITEA_TOKEN"))

    if not base_url:
        raise ValueError("Missing Gitea base URL. Use --base-url or set GITEA_BASE_URL")

    parsed = urlparse(base_url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"GITEA_BASE_URL/--base-url must be an http(s) URL, got: {base_url}")

    destructive_actions = bool(args.destructive_actions) or parse_bool(
        env.get("GITEA_DESTRUCTIVE_ACTIONS", "false"), "GITEA_DESTRUCTIVE_ACTIONS"
    )

    raw_timeout = _normalize_empty(env.get("GITEA_TIMEOUT_SECONDS"))
    try:
        timeout_seconds = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
    except ValueError as error:
        raise ValueError("GITEA_TIMEOUT_SECONDS must be a number") from error
    if timeout_seconds <= 0:
        raise ValueError("GITEA_TIMEOUT_SECONDS must be greater than 0")

    max_pages: int | None = None
    raw_max_pages = _normalize_empty(env.get("GITEA_MAX_PAGES"))
    if raw_max_pages is not None:
        try:
            max_pages = int(raw_max_pages)
        except ValueError as error:
            raise ValueError("GITEA_MAX_PAGES must be an integer") from error
        if max_pages <= 0:
            raise ValueError("GITEA_MAX_PAGES must be greater than 0")

    return AppConfig(
        base_url=base_url.rstrip("/"),
        token=token,
        destructive_actions=destructive_actions,
        timeout_seconds=timeout_seconds,
        max_pages=max_pages,
    )


def parse_bool(value: str | None, name: str) -> bool:
    normalized = (value or "").strip().lower()
    if normalized in {"", "0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    raise ValueError(f"{name} must be a boolean (true/false)")


def _normalize_empty(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None
