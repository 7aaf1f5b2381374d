"""files/* endpoints.

Paths follow Dropbox conventions: "" is the root of the account (or of the
member's folder when acting on behalf of a team member), everything else
starts with "/". A bare "/" is accepted and mapped to "".
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from ..client import ApiClient, ContentResponse
from ..credentials import Credential
from .base import compact, tagged


def dropbox_path(path: str) -> str:
    path = (path or "").strip()
    if path in ("", "/"):
        return ""
    if not path.startswith(("/", "id:", "rev:", "ns:")):
        path = "/" + path
    return path.rstrip("/")


def list_folder(
    client: ApiClient,
    credential: Credential,
    path: str,
    recursive: bool = False,
    include_deleted: bool = False,
    limit: Optional[int] = None,
    on_behalf_of: Optional[str] = None,
) -> Iterator[Any]:
    """Yield every entry under path, following list_folder/continue."""
    body = compact(
        {
            "path": dropbox_path(path),
            "recursive": recursive,
            "include_deleted": include_deleted,
            "limit": limit,
        }
    )
    return client.listing(
        "files/list_folder",
        body,
        "files/list_folder/continue",
        "entries",
        credential,
        on_behalf_of,
    )


def get_metadata(
    client: ApiClient, credential: Credential, path: str, on_behalf_of: Optional[str] = None
) -> Any:
    return client.send("files/get_metadata", {"path": dropbox_path(path)}, credential, on_behalf_of)


def create_folder(
    client: ApiClient,
    credential: Credential,
    path: str,
    autorename: bool = False,
    on_behalf_of: Optional[str] = None,
) -> Any:
    result = client.send(
        "files/create_folder_v2",
        {"path": dropbox_path(path), "autorename": autorename},
        credential,
        on_behalf_of,
    )
    return result["metadata"]


def delete(
    client: ApiClient, credential: Credential, path: str, on_behalf_of: Optional[str] = None
) -> Any:
    result = client.send("files/delete_v2", {"path": dropbox_path(path)}, credential, on_behalf_of)
    return result["metadata"]


def move(
    client: ApiClient,
    credential: Credential,
    from_path: str,
    to_path: str,
    autorename: bool = False,
    on_behalf_of: Optional[str] = None,
) -> Any:
    result = client.send(
        "files/move_v2",
        {
            "from_path": dropbox_path(from_path),
            "to_path": dropbox_path(to_path),
            "autorename": autorename,
        },
        credential,
        on_behalf_of,
    )
    return result["metadata"]


def copy(
    client: ApiClient,
    credential: Credential,
    from_path: str,
    to_path: str,
    autorename: bool = False,
    on_behalf_of: Optional[str] = None,
) -> Any:
    result = client.send(
        "files/copy_v2",
        {
            "from_path": dropbox_path(from_path),
            "to_path": dropbox_path(to_path),
            "autorename": autorename,
        },
        credential,
        on_behalf_of,
    )
    return result["metadata"]


def search(
    client: ApiClient,
    credential: Credential,
    query: str,
    path: Optional[str] = None,
    max_results: Optional[int] = None,
    on_behalf_of: Optional[str] = None,
) -> Iterator[Any]:
    options = compact(
        {
            "path": dropbox_path(path) if path is not None else None,
            "max_results": max_results,
        }
    )
    body: dict = {"query": query}
    if options:
        body["options"] = options
    return client.listing(
        "files/search_v2",
        body,
        "files/search/continue_v2",
        "matches",
        credential,
        on_behalf_of,
    )


def download(
    client: ApiClient, credential: Credential, path: str, on_behalf_of: Optional[str] = None
) -> ContentResponse:
    return client.send_content(
        "files/download", {"path": dropbox_path(path)}, credential, on_behalf_of=on_behalf_of
    )


def upload(
    client: ApiClient,
    credential: Credential,
    path: str,
    data: bytes,
    mode: str = "add",
    autorename: bool = False,
    on_behalf_of: Optional[str] = None,
) -> Any:
    """Upload a file of up to 150 MB in a single request."""
    arg = {
        "path": dropbox_path(path),
        "mode": tagged(mode),
        "autorename": autorename,
        "mute": False,
    }
    resp = client.send_content("files/upload", arg, credential, data=data, on_behalf_of=on_behalf_of)
    return resp.result
