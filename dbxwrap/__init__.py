"""dbxwrap: a thin scripting wrapper around the Dropbox HTTP API.

Every operation builds a JSON request body, attaches a bearer token (and,
for team credentials, an optional "act as this member" header), issues a
single POST to a fixed Dropbox endpoint and hands back the parsed JSON or
the raw Dropbox error. The shared machinery lives in dbxwrap.client; the
per-endpoint mappings live in dbxwrap.endpoints.
"""

from __future__ import annotations

from .__version__ import __version__
from .client import ApiClient, ContentResponse, PaginatedResult, paginate
from .credentials import Credential, CredentialStore, Scope
from .errors import (
    ApiError,
    DecodeError,
    DropboxError,
    ResolutionError,
    TransportError,
)

__all__ = [
    "__version__",
    "ApiClient",
    "ContentResponse",
    "PaginatedResult",
    "paginate",
    "Credential",
    "CredentialStore",
    "Scope",
    "ApiError",
    "DecodeError",
    "DropboxError",
    "ResolutionError",
    "TransportError",
]
