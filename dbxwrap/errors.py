"""Exceptions raised by dbxwrap.

Everything the library raises for a failed Dropbox call derives from
DropboxError, so scripts can catch one type. Nothing here is retried.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional, Union


class DropboxError(Exception):
    """Base class for dbxwrap failures."""


class TransportError(DropboxError):
    """The request never produced an HTTP response (DNS, TLS, connect, timeout)."""

    def __init__(self, url: str, reason: Any):
        self.url = url
        self.reason = reason
        super().__init__(f"request to {url} failed: {reason}")


def _tag_chain(error: Any) -> Optional[str]:
    # {".tag": "path", "path": {".tag": "not_found"}} -> "path/not_found"
    parts: List[str] = []
    node = error
    while isinstance(node, dict) and isinstance(node.get(".tag"), str):
        tag = node[".tag"]
        parts.append(tag)
        node = node.get(tag)
    return "/".join(parts) or None


class ApiError(DropboxError):
    """Dropbox answered with a non-2xx status.

    raw_bytes is the response body exactly as received; raw_body is the
    same body as text (UTF-8, undecodable bytes replaced). Dropbox puts the
    actionable `.tag` discriminator only in the body, so summary and tag are
    best-effort conveniences decoded from it.
    """

    def __init__(self, status: int, raw_body: Union[bytes, str], url: Optional[str] = None):
        if isinstance(raw_body, str):
            raw_body = raw_body.encode("utf-8")
        self.status = status
        self.raw_bytes = raw_body
        self.raw_body = raw_body.decode("utf-8", errors="replace")
        self.url = url
        self.summary: Optional[str] = None
        self.tag: Optional[str] = None

        try:
            payload = json.loads(self.raw_body)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            summary = payload.get("error_summary")
            self.summary = summary if isinstance(summary, str) else None
            self.tag = _tag_chain(payload.get("error"))

        super().__init__(f"HTTP {status}: {self.raw_body}")


class DecodeError(DropboxError):
    """A 2xx response whose body (or result header) is not valid JSON."""

    def __init__(self, raw_body: str, url: Optional[str] = None):
        self.raw_body = raw_body
        self.url = url
        super().__init__(f"response from {url} is not valid JSON: {raw_body[:200]!r}")


class ResolutionError(DropboxError):
    """An email did not resolve to exactly one team member."""

    def __init__(self, email: str, matches: int):
        self.email = email
        self.matches = matches
        if matches == 0:
            msg = f"no team member found for {email}"
        else:
            msg = f"{matches} team members matched {email}, expected exactly one"
        super().__init__(msg)


class RequestCancelled(DropboxError):
    pass


class PaginationLimitExceeded(DropboxError):
    def __init__(self, max_pages: int):
        self.max_pages = max_pages
        super().__init__(f"listing still had more results after {max_pages} page(s)")


class CredentialError(DropboxError):
    pass


class ConfigError(DropboxError):
    pass
