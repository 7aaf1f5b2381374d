from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Optional, Tuple

from .__version__ import __version__
from .client import ApiClient
from .config import load_config
from .credentials import Credential, CredentialStore, Scope
from .endpoints import Command, get_command, list_commands
from .errors import ApiError, DropboxError
from .logs import configure_logging

log = logging.getLogger("dbxwrap")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbxwrap",
        description="dbxwrap: scripting wrapper around the Dropbox HTTP API",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"dbxwrap {__version__}",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output",
    )
    who = parser.add_mutually_exclusive_group()
    who.add_argument(
        "--as-user",
        metavar="EMAIL",
        default=None,
        help="Act on behalf of this team member (needs TeamMemberFileAccess and TeamInformation tokens)",
    )
    who.add_argument(
        "--as-member-id",
        metavar="ID",
        default=None,
        help="Act on behalf of this team member id (dbmid:...)",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    token = sub.add_parser("token", help="Manage stored access tokens")
    token_sub = token.add_subparsers(dest="token_command", metavar="ACTION")
    token_sub.required = True
    token_set = token_sub.add_parser("set", help="Store a token for a scope")
    token_set.add_argument("scope", help=", ".join(s.value for s in Scope))
    token_set.add_argument("token")
    token_sub.add_parser("list", help="Show which scopes have a token")
    token_remove = token_sub.add_parser("remove", help="Forget the token for a scope")
    token_remove.add_argument("scope")

    for command in list_commands():
        cmd_parser = sub.add_parser(command.name, help=command.help)
        command.add_arguments(cmd_parser)

    return parser


def _run_token(args: argparse.Namespace, store: CredentialStore) -> Any:
    if args.token_command == "set":
        scope = Scope.parse(args.scope)
        store.put(Credential(scope=scope, secret=args.token.strip()))
        log.info(f"stored {scope.value} token in {store.path}")
        return {"stored": scope.value, "path": str(store.path)}

    if args.token_command == "remove":
        scope = Scope.parse(args.scope)
        removed = store.remove(scope)
        if removed:
            log.info(f"removed {scope.value} token from {store.path}")
        return {"removed": removed, "scope": scope.value}

    creds = store.load()
    return [
        {"name": scope.value, "stored": scope in creds}
        for scope in Scope
    ]


def resolve_delegation(
    command: Command,
    args: argparse.Namespace,
    client: ApiClient,
    store: CredentialStore,
) -> Tuple[Credential, Optional[str]]:
    """Pick the credential for a command and, if requested, the member to act as.

    With --as-user the email is first resolved to a member id using the
    TeamInformation token; the command then runs with the
    TeamMemberFileAccess token and that id as Dropbox-API-Select-User.
    """
    if args.as_user is None and args.as_member_id is None:
        return store.get(command.scope), None

    if not command.delegable:
        raise ValueError(f"{command.name} cannot be run on behalf of a team member")

    if args.as_member_id is not None:
        on_behalf_of = args.as_member_id
    elif not args.as_user.strip():
        raise ValueError("--as-user needs an email address")
    else:
        on_behalf_of = client.resolve_on_behalf_of(
            args.as_user, store.get(Scope.TEAM_INFORMATION)
        )
        log.debug(f"resolved {args.as_user} to {on_behalf_of}")

    return store.get(Scope.TEAM_MEMBER_FILE_ACCESS), on_behalf_of


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config()
        configure_logging(args.verbose or cfg.verbose, cfg.log_path)
    except (DropboxError, OSError) as e:
        # Logging is not set up yet, so stderr is the only channel.
        print(f"error: {e}", file=sys.stderr)
        return 1

    store = CredentialStore(cfg.credentials_path)

    try:
        if args.command == "token":
            result = _run_token(args, store)
        else:
            command = get_command(args.command)
            if command is None:
                parser.error(f"unknown command {args.command!r}")
            client = ApiClient.from_config(cfg)
            credential, on_behalf_of = resolve_delegation(command, args, client, store)
            result = command.handler(client, credential, args, on_behalf_of)
    except ApiError as e:
        log.error(f"{args.command} failed: HTTP {e.status} {e.summary or e.tag or ''}".rstrip())
        # The Dropbox body is the diagnostic; pass it through untouched.
        print(e.raw_body, file=sys.stderr)
        return 1
    except (DropboxError, ValueError, OSError) as e:
        log.error(f"{args.command} failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1

    if result is not None:
        print(json.dumps(result, indent=2))
    return 0
