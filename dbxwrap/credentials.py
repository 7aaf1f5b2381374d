"""Local token store for dbxwrap.

Tokens are obtained outside this tool (Dropbox App Console or an OAuth flow
run elsewhere) and saved here, one per permission scope. The file is a JSON
list of {"name": <scope>, "token": <secret>} objects:

    [
      {"name": "TeamInformation", "token": "sl.B..."},
      {"name": "Personal", "token": "sl.A..."}
    ]

Nothing here caches tokens: each get() re-reads the file, and put() replaces
a scope's entry wholesale. Expiry is not tracked; a revoked token shows up as
an ApiError on the next call.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List

from .errors import CredentialError

log = logging.getLogger("dbxwrap")


class Scope(Enum):
    """Permission class of a stored token."""

    TEAM_MEMBER_MANAGEMENT = "TeamMemberManagement"
    TEAM_INFORMATION = "TeamInformation"
    TEAM_AUDITING = "TeamAuditing"
    TEAM_MEMBER_FILE_ACCESS = "TeamMemberFileAccess"
    PERSONAL = "Personal"

    @classmethod
    def parse(cls, name: str) -> "Scope":
        """Accept either the stored name ("TeamInformation") or the enum name."""
        key = name.strip()
        for scope in cls:
            if key == scope.value or key.upper() == scope.name:
                return scope
        valid = ", ".join(s.value for s in cls)
        raise CredentialError(f"unknown scope {name!r} (expected one of: {valid})")


@dataclass(frozen=True)
class Credential:
    scope: Scope
    secret: str = field(repr=False)

    def authorization(self) -> str:
        return f"Bearer {self.secret}"


class CredentialStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Dict[Scope, Credential]:
        """Read every stored credential, keyed by scope.

        A missing file is an empty store. Entries with an unknown scope name
        are skipped with a warning.
        """
        if not self.path.exists():
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except ValueError as e:
            raise CredentialError(f"credential file {self.path} is not valid JSON: {e}")

        if not isinstance(raw, list):
            raise CredentialError(f"credential file {self.path} must hold a JSON list")

        creds: Dict[Scope, Credential] = {}
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name")
            token = entry.get("token")
            if not isinstance(name, str) or not isinstance(token, str) or not token:
                continue
            try:
                scope = Scope.parse(name)
            except CredentialError:
                log.warning(f"ignoring credential with unknown scope {name!r} in {self.path}")
                continue
            creds[scope] = Credential(scope=scope, secret=token)

        return creds

    def get(self, scope: Scope) -> Credential:
        cred = self.load().get(scope)
        if cred is None:
            raise CredentialError(
                f"no {scope.value} token in {self.path}; "
                f"run `dbxwrap token set {scope.value} <token>` first"
            )
        return cred

    def put(self, credential: Credential) -> None:
        creds = self.load()
        creds[credential.scope] = credential
        self._write(list(creds.values()))

    def remove(self, scope: Scope) -> bool:
        creds = self.load()
        if scope not in creds:
            return False
        del creds[scope]
        self._write(list(creds.values()))
        return True

    def _write(self, creds: List[Credential]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = [{"name": c.scope.value, "token": c.secret} for c in creds]

        # Write a sibling file, then swap it into place.
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, self.path)
