"""sharing/* endpoints: shared folders and shared links."""

from __future__ import annotations

from typing import Any, Iterator, Optional, Sequence

from ..client import ApiClient
from ..credentials import Credential
from .base import compact, tagged
from .files import dropbox_path


def share_folder(
    client: ApiClient,
    credential: Credential,
    path: str,
    member_policy: Optional[str] = None,
    on_behalf_of: Optional[str] = None,
) -> Any:
    """Share an existing folder.

    Dropbox may finish the share asynchronously, in which case the result is
    {".tag": "async_job_id", ...} instead of the shared folder metadata.
    """
    body = compact(
        {
            "path": dropbox_path(path),
            "member_policy": tagged(member_policy),
            "force_async": False,
        }
    )
    return client.send("sharing/share_folder", body, credential, on_behalf_of)


def unshare_folder(
    client: ApiClient,
    credential: Credential,
    shared_folder_id: str,
    leave_a_copy: bool = False,
    on_behalf_of: Optional[str] = None,
) -> Any:
    return client.send(
        "sharing/unshare_folder",
        {"shared_folder_id": shared_folder_id, "leave_a_copy": leave_a_copy},
        credential,
        on_behalf_of,
    )


def list_folders(
    client: ApiClient,
    credential: Credential,
    limit: Optional[int] = None,
    on_behalf_of: Optional[str] = None,
) -> Iterator[Any]:
    return client.listing(
        "sharing/list_folders",
        compact({"limit": limit}),
        "sharing/list_folders/continue",
        "entries",
        credential,
        on_behalf_of,
    )


def add_folder_member(
    client: ApiClient,
    credential: Credential,
    shared_folder_id: str,
    emails: Sequence[str],
    access_level: str = "editor",
    quiet: bool = False,
    custom_message: Optional[str] = None,
    on_behalf_of: Optional[str] = None,
) -> Any:
    members = [
        {
            "member": {".tag": "email", "email": email},
            "access_level": tagged(access_level),
        }
        for email in emails
    ]
    body = compact(
        {
            "shared_folder_id": shared_folder_id,
            "members": members,
            "quiet": quiet,
            "custom_message": custom_message,
        }
    )
    return client.send("sharing/add_folder_member", body, credential, on_behalf_of)


def list_folder_members(
    client: ApiClient,
    credential: Credential,
    shared_folder_id: str,
    on_behalf_of: Optional[str] = None,
) -> Iterator[Any]:
    """Yield the user memberships of a shared folder (groups and invitees are skipped)."""
    return client.listing(
        "sharing/list_folder_members",
        {"shared_folder_id": shared_folder_id},
        "sharing/list_folder_members/continue",
        "users",
        credential,
        on_behalf_of,
    )


def create_shared_link(
    client: ApiClient,
    credential: Credential,
    path: str,
    requested_visibility: Optional[str] = None,
    on_behalf_of: Optional[str] = None,
) -> Any:
    body: dict = {"path": dropbox_path(path)}
    if requested_visibility is not None:
        body["settings"] = {"requested_visibility": tagged(requested_visibility)}
    return client.send("sharing/create_shared_link_with_settings", body, credential, on_behalf_of)


def list_shared_links(
    client: ApiClient,
    credential: Credential,
    path: Optional[str] = None,
    on_behalf_of: Optional[str] = None,
) -> Iterator[Any]:
    # There is no separate /continue route; the cursor goes back to the same one.
    body = compact({"path": dropbox_path(path) if path is not None else None})
    return client.listing(
        "sharing/list_shared_links",
        body,
        "sharing/list_shared_links",
        "links",
        credential,
        on_behalf_of,
    )


def revoke_shared_link(
    client: ApiClient, credential: Credential, url: str, on_behalf_of: Optional[str] = None
) -> Any:
    return client.send("sharing/revoke_shared_link", {"url": url}, credential, on_behalf_of)
