"""users/* endpoints."""

from __future__ import annotations

from typing import Any, Optional

from ..client import ApiClient
from ..credentials import Credential


def get_current_account(
    client: ApiClient, credential: Credential, on_behalf_of: Optional[str] = None
) -> Any:
    # This endpoint rejects a missing body but accepts an explicit null.
    return client.send("users/get_current_account", None, credential, on_behalf_of)


def get_space_usage(
    client: ApiClient, credential: Credential, on_behalf_of: Optional[str] = None
) -> Any:
    return client.send("users/get_space_usage", None, credential, on_behalf_of)
