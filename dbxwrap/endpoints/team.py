"""team/* endpoints: team info, members and groups.

Member-management calls need a TeamMemberManagement credential; read-only
lookups (get_info, list_members, get_member, list_groups) work with a
TeamInformation credential.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from ..client import ApiClient
from ..credentials import Credential
from .base import UserSelector, compact, tagged


def get_info(client: ApiClient, credential: Credential) -> Any:
    return client.send("team/get_info", None, credential)


def list_members(
    client: ApiClient,
    credential: Credential,
    include_removed: bool = False,
    limit: Optional[int] = None,
) -> Iterator[Any]:
    return client.listing(
        "team/members/list_v2",
        compact({"include_removed": include_removed, "limit": limit}),
        "team/members/list/continue_v2",
        "members",
        credential,
    )


def get_member(client: ApiClient, credential: Credential, selector: UserSelector) -> Any:
    """Return the members_info item for one member.

    The item is tagged: {".tag": "member_info", "profile": {...}} when the
    member exists, {".tag": "id_not_found", ...} otherwise.
    """
    result = client.send(
        "team/members/get_info_v2", {"members": [selector.to_json()]}, credential
    )
    infos = result.get("members_info") or []
    return infos[0] if infos else None


def add_member(
    client: ApiClient,
    credential: Credential,
    email: str,
    given_name: Optional[str] = None,
    surname: Optional[str] = None,
    external_id: Optional[str] = None,
    send_welcome_email: bool = True,
    role: Optional[str] = None,
) -> Any:
    new_member = compact(
        {
            "member_email": email,
            "member_given_name": given_name,
            "member_surname": surname,
            "member_external_id": external_id,
            "send_welcome_email": send_welcome_email,
            "role": tagged(role),
        }
    )
    return client.send(
        "team/members/add",
        {"new_members": [new_member], "force_async": False},
        credential,
    )


def remove_member(
    client: ApiClient,
    credential: Credential,
    selector: UserSelector,
    wipe_data: bool = True,
    keep_account: bool = False,
    transfer_dest: Optional[UserSelector] = None,
    transfer_admin: Optional[UserSelector] = None,
) -> Any:
    """Remove a member. Dropbox may complete this as an async job."""
    if keep_account and wipe_data:
        # Dropbox rejects keep_account together with wipe_data.
        wipe_data = False
    body = compact(
        {
            "user": selector.to_json(),
            "wipe_data": wipe_data,
            "keep_account": keep_account,
            "transfer_dest_id": transfer_dest.to_json() if transfer_dest else None,
            "transfer_admin_id": transfer_admin.to_json() if transfer_admin else None,
        }
    )
    return client.send("team/members/remove", body, credential)


def suspend_member(
    client: ApiClient,
    credential: Credential,
    selector: UserSelector,
    wipe_data: bool = False,
) -> Any:
    return client.send(
        "team/members/suspend",
        {"user": selector.to_json(), "wipe_data": wipe_data},
        credential,
    )


def unsuspend_member(client: ApiClient, credential: Credential, selector: UserSelector) -> Any:
    return client.send("team/members/unsuspend", {"user": selector.to_json()}, credential)


def set_member_profile(
    client: ApiClient,
    credential: Credential,
    selector: UserSelector,
    new_email: Optional[str] = None,
    new_given_name: Optional[str] = None,
    new_surname: Optional[str] = None,
    new_external_id: Optional[str] = None,
) -> Any:
    body = compact(
        {
            "user": selector.to_json(),
            "new_email": new_email,
            "new_given_name": new_given_name,
            "new_surname": new_surname,
            "new_external_id": new_external_id,
        }
    )
    if len(body) == 1:
        raise ValueError("set_member_profile needs at least one field to change")
    return client.send("team/members/set_profile_v2", body, credential)


def list_groups(
    client: ApiClient, credential: Credential, limit: Optional[int] = None
) -> Iterator[Any]:
    return client.listing(
        "team/groups/list",
        compact({"limit": limit}),
        "team/groups/list/continue",
        "groups",
        credential,
    )


def create_group(
    client: ApiClient,
    credential: Credential,
    name: str,
    external_id: Optional[str] = None,
    management_type: Optional[str] = None,
) -> Any:
    body = compact(
        {
            "group_name": name,
            "add_creator_as_owner": False,
            "group_external_id": external_id,
            "group_management_type": tagged(management_type),
        }
    )
    return client.send("team/groups/create", body, credential)


def delete_group(client: ApiClient, credential: Credential, group_id: str) -> Any:
    return client.send(
        "team/groups/delete", {".tag": "group_id", "group_id": group_id}, credential
    )
