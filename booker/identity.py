"""
Who is "me"?

The booking service is called with an API key, not a user session, so the
current user is taken from the environment. Providers are tried in order and
the first non-empty value wins (separately for id and name).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

UNKNOWN_ID = "unknown"
UNKNOWN_NAME = "User"


@dataclass(frozen=True)
class CurrentUser:
    id: str
    name: str


@dataclass(frozen=True)
class EnvIdentityProvider:
    """Reads an id and a display name from environment variables."""

    name: str
    id_vars: Tuple[str, ...]
    name_vars: Tuple[str, ...]

    def user_id(self, environ: Mapping[str, str]) -> Optional[str]:
        return _first(environ, self.id_vars)

    def user_name(self, environ: Mapping[str, str]) -> Optional[str]:
        return _first(environ, self.name_vars)


def _first(environ: Mapping[str, str], keys: Sequence[str]) -> Optional[str]:
    for k in keys:
        v = (environ.get(k) or "").strip()
        if v:
            return v
    return None


# Priority order: agent host, tool-specific, then the OS login
DEFAULT_PROVIDERS: Tuple[EnvIdentityProvider, ...] = (
    EnvIdentityProvider("openclaw", ("OPENCLAW_USER_ID",), ("OPENCLAW_USER_NAME",)),
    EnvIdentityProvider("deskbird", ("DESKBIRD_USER_ID",), ("DESKBIRD_USER_NAME",)),
    EnvIdentityProvider("os", ("USER", "LOGNAME", "USERNAME"), ("USER", "LOGNAME", "USERNAME")),
)


def resolve_identity(
    environ: Optional[Mapping[str, str]] = None,
    providers: Sequence[EnvIdentityProvider] = DEFAULT_PROVIDERS,
) -> CurrentUser:
    env = os.environ if environ is None else environ
    user_id = next(filter(None, (p.user_id(env) for p in providers)), None)
    user_name = next(filter(None, (p.user_name(env) for p in providers)), None)
    return CurrentUser(id=user_id or UNKNOWN_ID, name=user_name or UNKNOWN_NAME)
