"""Dropbox API client core.

Every dbxwrap operation goes through ApiClient: it builds the
Authorization (and optional Dropbox-API-Select-User) headers, POSTs a single
request with urllib, and turns the response into parsed JSON or one of the
exceptions in dbxwrap.errors. Listing endpoints are driven through
paginate(), which follows Dropbox's has_more/cursor convention.

The client keeps no state between calls. Errors are raised, never retried
and never logged here; that is left to the caller.
"""

from __future__ import annotations

import http.client
import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional
from urllib import error as urlerror
from urllib import request as urlrequest

from .config import DEFAULT_API_URL, DEFAULT_CONTENT_URL, DbxwrapConfig
from .credentials import Credential
from .errors import (
    ApiError,
    DecodeError,
    PaginationLimitExceeded,
    RequestCancelled,
    ResolutionError,
    TransportError,
)

log = logging.getLogger("dbxwrap")

ON_BEHALF_OF_HEADER = "Dropbox-API-Select-User"
API_ARG_HEADER = "Dropbox-API-Arg"
API_RESULT_HEADER = "Dropbox-API-Result"


@dataclass(frozen=True)
class ContentResponse:
    """Result of a content-host call (upload or download)."""

    result: Any
    content: bytes = field(default=b"", repr=False)


@dataclass(frozen=True)
class PaginatedResult:
    items: List[Any]
    has_more: bool
    cursor: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Any, items_key: str) -> "PaginatedResult":
        """Build a page from a listing response.

        Some listings (sharing/list_folders) omit has_more and signal more
        results by including a cursor; paper/docs/list returns the cursor as
        an object with a "value" field.
        """
        if not isinstance(payload, dict):
            raise DecodeError(json.dumps(payload))

        cursor = payload.get("cursor")
        if isinstance(cursor, dict):
            cursor = cursor.get("value")
        if not isinstance(cursor, str) or not cursor:
            cursor = None

        if "has_more" in payload:
            has_more = bool(payload["has_more"])
        else:
            has_more = cursor is not None

        items = payload.get(items_key) or []
        return cls(items=list(items), has_more=has_more, cursor=cursor)


def encode_api_arg(arg: Any) -> str:
    """Encode a Dropbox-API-Arg header value.

    Compact JSON on a single line; non-ASCII characters are escaped since
    HTTP header values must be ASCII.
    """
    return json.dumps(arg, separators=(",", ":"), ensure_ascii=True)


def _decode_json(raw: bytes, url: str) -> Any:
    # Void routes answer with the literal null; an empty body is not JSON.
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError:
        raise DecodeError(raw.decode("utf-8", errors="replace"), url) from None


def paginate(
    first_call: Callable[[], PaginatedResult],
    continue_call: Callable[[str], PaginatedResult],
    max_pages: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> Iterator[Any]:
    """Lazily yield the items of a cursor-paginated listing.

    first_call fetches page one; continue_call(cursor) fetches each following
    page for as long as the previous page reports has_more. Items come out
    in the order the pages were received. The iterator cannot be rewound;
    call paginate() again to start the listing over.

    max_pages bounds the number of requests: when the cap is hit and the
    server still reports has_more, PaginationLimitExceeded is raised after
    every received item has been yielded. cancel is checked before each
    request and raises RequestCancelled once set.
    """

    def _check_cancel() -> None:
        if cancel is not None and cancel.is_set():
            raise RequestCancelled("listing cancelled")

    _check_cancel()
    page = first_call()
    pages = 1

    while True:
        for item in page.items:
            yield item

        if not page.has_more:
            return
        if page.cursor is None:
            raise DecodeError("listing reported has_more without a cursor")
        if max_pages is not None and pages >= max_pages:
            raise PaginationLimitExceeded(max_pages)

        _check_cancel()
        page = continue_call(page.cursor)
        pages += 1


class ApiClient:
    """Sends authenticated requests to the Dropbox HTTP API."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        content_url: str = DEFAULT_CONTENT_URL,
        timeout: Optional[float] = None,
        max_pages: Optional[int] = None,
        opener: Optional[urlrequest.OpenerDirector] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.content_url = content_url.rstrip("/")
        self.timeout = timeout
        self.max_pages = max_pages
        self._opener = opener or urlrequest.build_opener()

    @classmethod
    def from_config(cls, cfg: DbxwrapConfig) -> "ApiClient":
        return cls(
            api_url=cfg.api_url,
            content_url=cfg.content_url,
            timeout=cfg.timeout,
            max_pages=cfg.max_pages,
        )

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    @staticmethod
    def _url(endpoint: str, base: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{base}/{endpoint.lstrip('/')}"

    @staticmethod
    def _auth_headers(credential: Credential, on_behalf_of: Optional[str]) -> dict:
        headers = {"Authorization": credential.authorization()}
        if on_behalf_of is not None:
            if not on_behalf_of.strip():
                raise ValueError("on_behalf_of must be a resolved team member id, got an empty value")
            headers[ON_BEHALF_OF_HEADER] = on_behalf_of
        return headers

    def _post(self, url: str, data: bytes, headers: dict):
        req = urlrequest.Request(url, data=data, method="POST")
        for key, value in headers.items():
            req.add_header(key, value)

        kwargs = {}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            with self._opener.open(req, **kwargs) as resp:
                return resp.headers, resp.read()
        except urlerror.HTTPError as e:
            # Read the whole error body once; it carries the .tag discriminator.
            try:
                raw = e.read()
            finally:
                e.close()
            raise ApiError(e.code, raw, url) from None
        except urlerror.URLError as e:
            raise TransportError(url, e.reason) from e
        except (OSError, http.client.HTTPException) as e:
            raise TransportError(url, e) from e

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    def send(
        self,
        endpoint: str,
        body: Any,
        credential: Credential,
        on_behalf_of: Optional[str] = None,
    ) -> Any:
        """POST a JSON body to an RPC endpoint and return the parsed JSON.

        A body of None is sent as the literal JSON null, which is what the
        argument-less endpoints (e.g. users/get_current_account) expect.

        Raises:
            ApiError: non-2xx response; raw_bytes holds the body verbatim
            DecodeError: 2xx response that is not JSON (an empty body included)
            TransportError: no HTTP response at all
        """
        url = self._url(endpoint, self.api_url)
        headers = self._auth_headers(credential, on_behalf_of)
        headers["Content-Type"] = "application/json"
        data = json.dumps(body).encode("utf-8")

        log.debug(
            f"POST {url} scope={credential.scope.value} "
            f"on_behalf_of={'yes' if on_behalf_of else 'no'}"
        )
        _, raw = self._post(url, data, headers)
        return _decode_json(raw, url)

    def send_content(
        self,
        endpoint: str,
        arg: Any,
        credential: Credential,
        data: Optional[bytes] = None,
        on_behalf_of: Optional[str] = None,
    ) -> ContentResponse:
        """POST to a content-host endpoint (uploads and downloads).

        The argument travels as compact JSON in the Dropbox-API-Arg header and
        the request body is the raw file bytes, unframed. Downloads return
        their metadata in the Dropbox-API-Result header and the file in the
        body; uploads return their metadata as the JSON body.
        """
        url = self._url(endpoint, self.content_url)
        headers = self._auth_headers(credential, on_behalf_of)
        headers[API_ARG_HEADER] = encode_api_arg(arg)
        headers["Content-Type"] = "application/octet-stream"

        log.debug(
            f"POST {url} scope={credential.scope.value} bytes={len(data or b'')} "
            f"on_behalf_of={'yes' if on_behalf_of else 'no'}"
        )
        resp_headers, raw = self._post(url, data or b"", headers)

        result_header = resp_headers.get(API_RESULT_HEADER)
        if result_header is not None:
            return ContentResponse(
                result=_decode_json(result_header.encode("utf-8"), url),
                content=raw,
            )
        return ContentResponse(result=_decode_json(raw, url))

    def resolve_on_behalf_of(self, email: str, info_credential: Credential) -> str:
        """Look up the team member id for an email address.

        Uses a TeamInformation credential, which is usually not the one that
        will perform the delegated call. Exactly one member must match.

        Raises:
            ResolutionError: zero or several members matched
            ApiError: the lookup itself failed
        """
        payload = self.send(
            "team/members/get_info_v2",
            {"members": [{".tag": "email", "email": email}]},
            info_credential,
        )

        infos = payload.get("members_info", []) if isinstance(payload, dict) else []
        member_ids = [
            info["profile"]["team_member_id"]
            for info in infos
            if isinstance(info, dict)
            and info.get(".tag") == "member_info"
            and isinstance(info.get("profile"), dict)
            and info["profile"].get("team_member_id")
        ]

        if len(member_ids) != 1:
            raise ResolutionError(email, len(member_ids))
        return member_ids[0]

    def listing(
        self,
        route: str,
        body: Any,
        continue_route: str,
        items_key: str,
        credential: Credential,
        on_behalf_of: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[Any]:
        """Paginate a listing endpoint and its /continue variant."""

        def first() -> PaginatedResult:
            return PaginatedResult.from_json(
                self.send(route, body, credential, on_behalf_of), items_key
            )

        def more(cursor: str) -> PaginatedResult:
            return PaginatedResult.from_json(
                self.send(continue_route, {"cursor": cursor}, credential, on_behalf_of),
                items_key,
            )

        return paginate(first, more, max_pages=self.max_pages, cancel=cancel)
