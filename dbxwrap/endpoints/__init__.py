"""Command registry for dbxwrap.

This module wires the endpoint functions (users, files, sharing, team,
team_log, paper) to named commands so that cli.py can resolve a
subcommand name into its argument setup, required credential scope and
handler. Scripts can ignore the registry and call the endpoint modules
directly.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..client import ApiClient
from ..credentials import Credential, Scope
from . import files, paper, sharing, team, team_log, users
from .base import ByEmail, ByExternalId, ById, UserSelector, selector_from_args

Handler = Callable[[ApiClient, Credential, argparse.Namespace, Optional[str]], Any]


@dataclass(frozen=True)
class Command:
    """A CLI-visible operation.

    delegable commands act on a user's files: run plainly they use the
    Personal token; with --as-user they use the TeamMemberFileAccess token
    plus a Dropbox-API-Select-User header.
    """

    name: str
    scope: Scope
    help: str
    handler: Handler
    add_arguments: Callable[[argparse.ArgumentParser], None] = lambda p: None
    delegable: bool = False


_COMMANDS: Dict[str, Command] = {}


def _register(command: Command) -> None:
    _COMMANDS[command.name] = command


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _add_selector_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--email", help="Member email address")
    group.add_argument("--id", dest="member_id", help="Team member id (dbmid:...)")
    group.add_argument("--external-id", help="Member external id")


def _selector(args: argparse.Namespace) -> UserSelector:
    return selector_from_args(
        email=args.email, member_id=args.member_id, external_id=args.external_id
    )


def _path_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="Dropbox path, e.g. /Reports")


def _src_dst_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("src", help="Source Dropbox path")
    parser.add_argument("dst", help="Destination Dropbox path")
    parser.add_argument("--autorename", action="store_true", help="Rename on conflict")


def _limit_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--limit", type=int, default=None, help="Page size hint")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _ls(client, cred, args, obo):
    return list(
        files.list_folder(
            client,
            cred,
            args.path,
            recursive=args.recursive,
            include_deleted=args.include_deleted,
            on_behalf_of=obo,
        )
    )


def _ls_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", nargs="?", default="", help="Folder to list (default: root)")
    parser.add_argument("-r", "--recursive", action="store_true", help="List recursively")
    parser.add_argument("--include-deleted", action="store_true", help="Include deleted entries")


def _search_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("query", help="Text to search for")
    parser.add_argument("--path", default=None, help="Restrict the search to this folder")
    parser.add_argument("--max-results", type=int, default=None)


def _get(client, cred, args, obo):
    resp = files.download(client, cred, args.path, on_behalf_of=obo)
    if args.output == "-":
        sys.stdout.buffer.write(resp.content)
        sys.stdout.buffer.flush()
        return None
    name = (resp.result or {}).get("name") or "download"
    target = Path(args.output) if args.output else Path(name)
    target.write_bytes(resp.content)
    return resp.result


def _get_args(parser: argparse.ArgumentParser) -> None:
    _path_arg(parser)
    parser.add_argument(
        "-o", "--output", default=None, help="Local file to write ('-' for stdout)"
    )


def _put(client, cred, args, obo):
    data = Path(args.local).read_bytes()
    mode = "overwrite" if args.overwrite else "add"
    return files.upload(
        client, cred, args.path, data, mode=mode, autorename=args.autorename, on_behalf_of=obo
    )


def _put_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("local", help="Local file to upload")
    _path_arg(parser)
    parser.add_argument("--overwrite", action="store_true", help="Overwrite an existing file")
    parser.add_argument("--autorename", action="store_true", help="Rename on conflict")


def _share_args(parser: argparse.ArgumentParser) -> None:
    _path_arg(parser)
    parser.add_argument("--member-policy", choices=["team", "anyone"], default=None)


def _unshare_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("shared_folder_id")
    parser.add_argument("--leave-a-copy", action="store_true", help="Keep a copy of the files")


def _add_folder_member_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("shared_folder_id")
    parser.add_argument("emails", nargs="+", help="Email addresses to invite")
    parser.add_argument(
        "--access-level", choices=["editor", "viewer", "viewer_no_comment"], default="editor"
    )
    parser.add_argument("--quiet", action="store_true", help="Do not notify the invitees")
    parser.add_argument("--message", default=None, help="Custom invitation message")


def _link_args(parser: argparse.ArgumentParser) -> None:
    _path_arg(parser)
    parser.add_argument(
        "--visibility", choices=["public", "team_only", "password"], default=None
    )


def _members_args(parser: argparse.ArgumentParser) -> None:
    _limit_arg(parser)
    parser.add_argument("--include-removed", action="store_true", help="Include removed members")


def _add_member_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("email")
    parser.add_argument("--given-name", default=None)
    parser.add_argument("--surname", default=None)
    parser.add_argument("--external-id", default=None)
    parser.add_argument("--no-welcome-email", action="store_true")
    parser.add_argument(
        "--role", choices=["member_only", "support_admin", "user_management_admin", "team_admin"],
        default=None,
    )


def _remove_member_args(parser: argparse.ArgumentParser) -> None:
    _add_selector_args(parser)
    parser.add_argument("--keep-data", action="store_true", help="Do not wipe linked devices")
    parser.add_argument(
        "--keep-account", action="store_true", help="Convert to a Basic account instead of deleting"
    )
    parser.add_argument("--transfer-to", default=None, help="Email of the member receiving the files")
    parser.add_argument("--transfer-admin", default=None, help="Email of the admin notified on errors")


def _remove_member(client, cred, args, obo):
    return team.remove_member(
        client,
        cred,
        _selector(args),
        wipe_data=not args.keep_data,
        keep_account=args.keep_account,
        transfer_dest=ByEmail(args.transfer_to) if args.transfer_to else None,
        transfer_admin=ByEmail(args.transfer_admin) if args.transfer_admin else None,
    )


def _suspend_args(parser: argparse.ArgumentParser) -> None:
    _add_selector_args(parser)
    parser.add_argument("--wipe-data", action="store_true", help="Wipe linked devices")


def _set_profile_args(parser: argparse.ArgumentParser) -> None:
    _add_selector_args(parser)
    parser.add_argument("--new-email", default=None)
    parser.add_argument("--new-given-name", default=None)
    parser.add_argument("--new-surname", default=None)
    parser.add_argument("--new-external-id", default=None)


def _create_group_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name")
    parser.add_argument("--external-id", default=None)
    parser.add_argument(
        "--management-type", choices=["user_managed", "company_managed"], default=None
    )


def _events_args(parser: argparse.ArgumentParser) -> None:
    _limit_arg(parser)
    parser.add_argument("--category", default=None, help="Event category tag, e.g. logins")
    parser.add_argument("--start", default=None, help="ISO 8601 start time")
    parser.add_argument("--end", default=None, help="ISO 8601 end time")


def _paper_docs_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--filter", dest="filter_by", choices=["docs_created", "docs_accessed"],
        default="docs_created",
    )
    _limit_arg(parser)


def _paper_get(client, cred, args, obo):
    resp = paper.download_doc(client, cred, args.doc_id, export_format=args.format, on_behalf_of=obo)
    if args.output:
        Path(args.output).write_bytes(resp.content)
        return resp.result
    sys.stdout.buffer.write(resp.content)
    sys.stdout.buffer.flush()
    return None


def _paper_get_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("doc_id")
    parser.add_argument("--format", choices=["markdown", "html"], default="markdown")
    parser.add_argument("-o", "--output", default=None, help="Local file to write (default: stdout)")


def _paper_put_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("local", help="Local markdown/html/plain text file")
    parser.add_argument(
        "--format", choices=["markdown", "html", "plain_text", "docx"], default="markdown"
    )
    parser.add_argument("--folder-id", default=None, help="Paper folder to create the doc in")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def _register_defaults() -> None:
    """Populate the registry with the built-in commands (once)."""

    if _COMMANDS:
        return

    personal = Scope.PERSONAL
    info = Scope.TEAM_INFORMATION
    manage = Scope.TEAM_MEMBER_MANAGEMENT

    # users
    _register(Command(
        "whoami", personal, "Show the current account",
        lambda c, cred, a, obo: users.get_current_account(c, cred, obo),
        delegable=True,
    ))
    _register(Command(
        "space", personal, "Show space usage",
        lambda c, cred, a, obo: users.get_space_usage(c, cred, obo),
        delegable=True,
    ))

    # files
    _register(Command("ls", personal, "List a folder", _ls, _ls_args, delegable=True))
    _register(Command(
        "stat", personal, "Show metadata for a file or folder",
        lambda c, cred, a, obo: files.get_metadata(c, cred, a.path, obo),
        _path_arg, delegable=True,
    ))
    _register(Command(
        "mkdir", personal, "Create a folder",
        lambda c, cred, a, obo: files.create_folder(c, cred, a.path, on_behalf_of=obo),
        _path_arg, delegable=True,
    ))
    _register(Command(
        "rm", personal, "Delete a file or folder",
        lambda c, cred, a, obo: files.delete(c, cred, a.path, obo),
        _path_arg, delegable=True,
    ))
    _register(Command(
        "mv", personal, "Move a file or folder",
        lambda c, cred, a, obo: files.move(c, cred, a.src, a.dst, a.autorename, obo),
        _src_dst_args, delegable=True,
    ))
    _register(Command(
        "cp", personal, "Copy a file or folder",
        lambda c, cred, a, obo: files.copy(c, cred, a.src, a.dst, a.autorename, obo),
        _src_dst_args, delegable=True,
    ))
    _register(Command(
        "search", personal, "Search files by name and content",
        lambda c, cred, a, obo: list(
            files.search(c, cred, a.query, path=a.path, max_results=a.max_results, on_behalf_of=obo)
        ),
        _search_args, delegable=True,
    ))
    _register(Command("get", personal, "Download a file", _get, _get_args, delegable=True))
    _register(Command("put", personal, "Upload a file", _put, _put_args, delegable=True))

    # sharing
    _register(Command(
        "share", personal, "Share a folder",
        lambda c, cred, a, obo: sharing.share_folder(c, cred, a.path, a.member_policy, obo),
        _share_args, delegable=True,
    ))
    _register(Command(
        "unshare", personal, "Stop sharing a folder",
        lambda c, cred, a, obo: sharing.unshare_folder(c, cred, a.shared_folder_id, a.leave_a_copy, obo),
        _unshare_args,
        delegable=True,
    ))
    _register(Command(
        "shared-folders", personal, "List shared folders",
        lambda c, cred, a, obo: list(sharing.list_folders(c, cred, a.limit, obo)),
        _limit_arg, delegable=True,
    ))
    _register(Command(
        "add-folder-member", personal, "Invite people to a shared folder",
        lambda c, cred, a, obo: sharing.add_folder_member(
            c, cred, a.shared_folder_id, a.emails, a.access_level, a.quiet, a.message, obo
        ),
        _add_folder_member_args, delegable=True,
    ))
    _register(Command(
        "folder-members", personal, "List the members of a shared folder",
        lambda c, cred, a, obo: list(sharing.list_folder_members(c, cred, a.shared_folder_id, obo)),
        lambda p: p.add_argument("shared_folder_id"),
        delegable=True,
    ))
    _register(Command(
        "link", personal, "Create a shared link",
        lambda c, cred, a, obo: sharing.create_shared_link(c, cred, a.path, a.visibility, obo),
        _link_args, delegable=True,
    ))
    _register(Command(
        "shared-links", personal, "List shared links",
        lambda c, cred, a, obo: list(sharing.list_shared_links(c, cred, a.path, obo)),
        lambda p: p.add_argument("path", nargs="?", default=None),
        delegable=True,
    ))
    _register(Command(
        "unlink", personal, "Revoke a shared link",
        lambda c, cred, a, obo: sharing.revoke_shared_link(c, cred, a.url, obo),
        lambda p: p.add_argument("url"),
        delegable=True,
    ))

    # team
    _register(Command(
        "team-info", info, "Show team information",
        lambda c, cred, a, obo: team.get_info(c, cred),
    ))
    _register(Command(
        "members", info, "List team members",
        lambda c, cred, a, obo: list(team.list_members(c, cred, a.include_removed, a.limit)),
        _members_args,
    ))
    _register(Command(
        "member", info, "Show one team member",
        lambda c, cred, a, obo: team.get_member(c, cred, _selector(a)),
        _add_selector_args,
    ))
    _register(Command(
        "add-member", manage, "Invite a new team member",
        lambda c, cred, a, obo: team.add_member(
            c, cred, a.email, a.given_name, a.surname, a.external_id,
            send_welcome_email=not a.no_welcome_email, role=a.role,
        ),
        _add_member_args,
    ))
    _register(Command("remove-member", manage, "Remove a team member", _remove_member, _remove_member_args))
    _register(Command(
        "suspend-member", manage, "Suspend a team member",
        lambda c, cred, a, obo: team.suspend_member(c, cred, _selector(a), a.wipe_data),
        _suspend_args,
    ))
    _register(Command(
        "unsuspend-member", manage, "Reactivate a suspended team member",
        lambda c, cred, a, obo: team.unsuspend_member(c, cred, _selector(a)),
        _add_selector_args,
    ))
    _register(Command(
        "set-member-profile", manage, "Change a member's email, name or external id",
        lambda c, cred, a, obo: team.set_member_profile(
            c, cred, _selector(a), a.new_email, a.new_given_name, a.new_surname, a.new_external_id
        ),
        _set_profile_args,
    ))
    _register(Command(
        "groups", info, "List team groups",
        lambda c, cred, a, obo: list(team.list_groups(c, cred, a.limit)),
        _limit_arg,
    ))
    _register(Command(
        "create-group", manage, "Create a team group",
        lambda c, cred, a, obo: team.create_group(c, cred, a.name, a.external_id, a.management_type),
        _create_group_args,
    ))
    _register(Command(
        "delete-group", manage, "Delete a team group",
        lambda c, cred, a, obo: team.delete_group(c, cred, a.group_id),
        lambda p: p.add_argument("group_id"),
    ))

    # team_log
    _register(Command(
        "events", Scope.TEAM_AUDITING, "List audit log events",
        lambda c, cred, a, obo: list(
            team_log.get_events(c, cred, a.limit, a.category, a.start, a.end)
        ),
        _events_args,
    ))

    # paper
    _register(Command(
        "paper-docs", personal, "List Paper document ids",
        lambda c, cred, a, obo: list(paper.list_docs(c, cred, a.filter_by, a.limit, obo)),
        _paper_docs_args, delegable=True,
    ))
    _register(Command("paper-get", personal, "Download a Paper document", _paper_get, _paper_get_args, delegable=True))
    _register(Command(
        "paper-put", personal, "Create a Paper document from a local file",
        lambda c, cred, a, obo: paper.create_doc(
            c, cred, Path(a.local).read_bytes(), a.format, a.folder_id, obo
        ),
        _paper_put_args, delegable=True,
    ))


def get_command(name: Optional[str]) -> Optional[Command]:
    """Return the command registered under name, or None."""

    _register_defaults()

    if not name:
        return None
    return _COMMANDS.get(name.strip().lower())


def list_commands() -> List[Command]:
    _register_defaults()
    return list(_COMMANDS.values())


__all__ = [
    "ByEmail",
    "ById",
    "ByExternalId",
    "Command",
    "UserSelector",
    "get_command",
    "list_commands",
    "selector_from_args",
]
