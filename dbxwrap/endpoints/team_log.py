"""team_log/* endpoints (audit events). Needs a TeamAuditing credential."""

from __future__ import annotations

from typing import Any, Iterator, Optional

from ..client import ApiClient
from ..credentials import Credential
from .base import compact, tagged


def get_events(
    client: ApiClient,
    credential: Credential,
    limit: Optional[int] = None,
    category: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> Iterator[Any]:
    """Yield audit events, oldest first.

    start_time and end_time are ISO 8601 timestamps ("2024-01-31T00:00:00Z").
    category is an event category tag such as "logins" or "sharing".
    """
    time_range = compact({"start_time": start_time, "end_time": end_time})
    body = compact(
        {
            "limit": limit,
            "category": tagged(category),
            "time": time_range or None,
        }
    )
    return client.listing(
        "team_log/get_events",
        body,
        "team_log/get_events/continue",
        "events",
        credential,
    )
