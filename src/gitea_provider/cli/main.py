from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from enum import Enum
from typing import Any, Callable, Sequence

from gitea_provider.adapters.gitea import GiteaProvider, new_gitea_provider
from gitea_provider.cli.config import AppConfig, load_config
from gitea_provider.domain.entities import OrganizationRef, RepositoryRef, UserRef
from gitea_provider.domain.errors import GitProviderError, NotFoundError
from gitea_provider.logging_utils import configure_logging


ProviderFactory = Callable[[AppConfig], GiteaProvider]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitea-provider",
        description="Query and manage a Gitea server through the generic git provider interface.",
    )
    parser.add_argument("--base-url", required=False, help="Gitea server URL. Falls back to GITEA_BASE_URL.")
    parser.add_argument(
        "--destructive-actions",
        action="store_true",
        help="Allow destructive calls such as delete-repo. Falls back to GITEA_DESTRUCTIVE_ACTIONS.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("orgs", help="List organizations of the authenticated user.")

    org = commands.add_parser("org", help="Show one organization.")
    org.add_argument("name")

    teams = commands.add_parser("teams", help="List teams of an organization with their members.")
    teams.add_argument("org")

    team_members = commands.add_parser("team-members", help="List members of one team by name.")
    team_members.add_argument("org")
    team_members.add_argument("team")

    repos = commands.add_parser("repos", help="List repositories of an organization or a user.")
    owner = repos.add_mutually_exclusive_group(required=True)
    owner.add_argument("--org")
    owner.add_argument("--user")

    for name, help_text in (
        ("repo", "Show one repository."),
        ("delete-repo", "Delete a repository (needs --destructive-actions)."),
        ("keys", "List deploy keys of a repository."),
        ("prs", "List pull requests of a repository (first page only)."),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("repository", metavar="OWNER/NAME")

    return parser


def main(argv: Sequence[str] | None = None, *, provider_factory: ProviderFactory | None = None) -> int:
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))
    logger = logging.getLogger(__name__)

    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args=args, env=os.environ)
    except ValueError as error:
        parser.error(str(error))

    logger.info(
        "cli configuration resolved",
        extra={
            "event": "cli.config.resolved",
            "base_url": config.base_url,
            "command": args.command,
            "destructive_actions": config.destructive_actions,
            "timeout_seconds": config.timeout_seconds,
            "max_pages": config.max_pages,
            "token_configured": config.token is not None,
        },
    )

    factory = provider_factory or _build_provider
    try:
        provider = factory(config)
        result = _run_command(provider, args, parser)
    except NotFoundError as error:
        print(f"not found: {error}", file=sys.stderr)
        return 1
    except GitProviderError as error:
        logger.exception("cli execution failed", extra={"event": "cli.execution.failed", "command": args.command})
        parser.error(str(error))

    _print_json(result)
    return 0


def _build_provider(config: AppConfig) -> GiteaProvider:
    return new_gitea_provider(
        config.base_url,
        config.token,
        destructive_actions=config.destructive_actions,
        timeout_seconds=config.timeout_seconds,
        max_pages=config.max_pages,
    )


def _run_command(provider: GiteaProvider, args: argparse.Namespace, parser: argparse.ArgumentParser) -> Any:
    domain = provider.domain
    command = args.command

    if command == "orgs":
        return provider.organizations.list()
    if command == "org":
        return provider.organizations.get(OrganizationRef(domain=domain, organization=args.name))
    if command == "teams":
        return provider.teams(OrganizationRef(domain=domain, organization=args.org)).list()
    if command == "team-members":
        return provider.teams(OrganizationRef(domain=domain, organization=args.org)).get(args.team).members
    if command == "repos":
        if args.org:
            return provider.repositories.list(OrganizationRef(domain=domain, organization=args.org))
        return provider.repositories.list(UserRef(domain=domain, user_login=args.user))

    ref = _parse_repository_ref(args.repository, domain, parser)
    if command == "repo":
        return provider.repositories.get(ref)
    if command == "delete-repo":
        provider.repositories.delete(ref)
        return {"deleted": str(ref)}
    if command == "keys":
        return provider.deploy_keys(ref).list()
    if command == "prs":
        return provider.pull_requests(ref).list()

    parser.error(f"Unknown command: {command}")


def _parse_repository_ref(value: str, domain: str, parser: argparse.ArgumentParser) -> RepositoryRef:
    owner, _, name = value.strip().partition("/")
    if not owner or not name or "/" in name:
        parser.error(f"Repository must be given as OWNER/NAME, got: {value!r}")
    # Ownership kind only matters for creation; reads route by owner login.
    return RepositoryRef(owner=OrganizationRef(domain=domain, organization=owner), repository_name=name)


def _print_json(result: Any) -> None:
    print(json.dumps(_to_jsonable(result), indent=2, default=str))


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "__dataclass_fields__"):
        return _to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {key: _to_jsonable(item) for key, item in value.items()}
    return value
