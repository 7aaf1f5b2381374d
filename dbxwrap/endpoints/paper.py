"""paper/* endpoints.

Document download and create go to the content host: the arguments ride in
the Dropbox-API-Arg header and the document itself is the raw request or
response body.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from ..client import ApiClient, ContentResponse
from ..credentials import Credential
from .base import compact


def list_docs(
    client: ApiClient,
    credential: Credential,
    filter_by: str = "docs_created",
    limit: Optional[int] = None,
    on_behalf_of: Optional[str] = None,
) -> Iterator[Any]:
    return client.listing(
        "paper/docs/list",
        compact({"filter_by": filter_by, "limit": limit}),
        "paper/docs/list/continue",
        "doc_ids",
        credential,
        on_behalf_of,
    )


def download_doc(
    client: ApiClient,
    credential: Credential,
    doc_id: str,
    export_format: str = "markdown",
    on_behalf_of: Optional[str] = None,
) -> ContentResponse:
    return client.send_content(
        "paper/docs/download",
        {"doc_id": doc_id, "export_format": export_format},
        credential,
        on_behalf_of=on_behalf_of,
    )


def create_doc(
    client: ApiClient,
    credential: Credential,
    data: bytes,
    import_format: str = "markdown",
    parent_folder_id: Optional[str] = None,
    on_behalf_of: Optional[str] = None,
) -> Any:
    arg = compact({"import_format": import_format, "parent_folder_id": parent_folder_id})
    resp = client.send_content(
        "paper/docs/create", arg, credential, data=data, on_behalf_of=on_behalf_of
    )
    return resp.result
