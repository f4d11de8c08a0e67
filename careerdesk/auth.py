"""Resolve the caller's session credential to a user id."""
from __future__ import annotations

from careerdesk.errors import AuthenticationError
from careerdesk.log import get_logger
from careerdesk.store import Store

log = get_logger(__name__)


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.strip():
        raise AuthenticationError("No authorization header")
    value = authorization.strip()
    if value.lower().startswith("bearer "):
        value = value[7:].strip()
    return value


def authenticate(store: Store, authorization: str | None) -> str:
    """Return the user id for *authorization* or raise AuthenticationError."""
    token = bearer_token(authorization)
    user_id = store.resolve_token(token)
    if user_id is None:
        log.warning("Rejected request with unknown session token")
        raise AuthenticationError("Invalid authentication")
    return user_id
