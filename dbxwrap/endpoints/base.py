"""Shared pieces for the endpoint modules.

Team endpoints identify a member in one of three ways. Rather than guessing
from whichever keyword argument happened to be passed, callers build one
explicit selector and the endpoint serializes it to Dropbox's tagged form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class ByEmail:
    email: str

    def to_json(self) -> Dict[str, str]:
        return {".tag": "email", "email": self.email}


@dataclass(frozen=True)
class ById:
    team_member_id: str

    def to_json(self) -> Dict[str, str]:
        return {".tag": "team_member_id", "team_member_id": self.team_member_id}


@dataclass(frozen=True)
class ByExternalId:
    external_id: str

    def to_json(self) -> Dict[str, str]:
        return {".tag": "external_id", "external_id": self.external_id}


UserSelector = Union[ByEmail, ById, ByExternalId]


def selector_from_args(
    email: Optional[str] = None,
    member_id: Optional[str] = None,
    external_id: Optional[str] = None,
) -> UserSelector:
    """Build a selector from exactly one identifier.

    Raises:
        ValueError: none or more than one identifier was supplied
    """
    given = [
        (value, build)
        for value, build in (
            (email, ByEmail),
            (member_id, ById),
            (external_id, ByExternalId),
        )
        if value
    ]
    if len(given) != 1:
        raise ValueError("exactly one of email, member id or external id is required")
    value, build = given[0]
    return build(value)


def compact(body: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None-valued keys so optional arguments fall back to Dropbox defaults."""
    return {k: v for k, v in body.items() if v is not None}


def tagged(tag: Optional[str]) -> Optional[Dict[str, str]]:
    """Wrap a void union member (e.g. "editor") in Dropbox's {".tag": ...} form."""
    if tag is None:
        return None
    return {".tag": tag}
