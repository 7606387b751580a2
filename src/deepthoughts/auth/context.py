"""Request identity resolution — who (if anyone) is making this request.

Learn: Every inbound operation gets exactly one RequestContext, built
once here and handed explicitly to the operation handler. Nothing global,
nothing mutated afterwards.

A credential may arrive in three places, checked in this order:
1. "token" field of the JSON body
2. "token" query parameter
3. Authorization header ("Bearer <token>")

Resolution fails OPEN: a missing, malformed or expired token yields an
anonymous context, never an error. Public reads must keep working for
clients holding a stale token; operations that need an actor enforce
that themselves through gate.require_identity.
"""

from dataclasses import dataclass
from typing import Optional, Union

import structlog

from deepthoughts.auth.jwt import IdentityAssertion, verify_token
from deepthoughts.errors import InvalidToken

logger = structlog.get_logger()


@dataclass(frozen=True)
class Authenticated:
    identity: IdentityAssertion


@dataclass(frozen=True)
class Anonymous:
    """No usable identity. `reason` is for logs only ("missing" or "invalid")."""

    reason: str = "missing"


IdentityResult = Union[Authenticated, Anonymous]


@dataclass(frozen=True)
class RequestContext:
    """Per-request context passed to every operation handler."""

    user: Optional[IdentityAssertion] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @classmethod
    def anonymous(cls) -> "RequestContext":
        return cls()


def extract_token(
    body_token: Optional[str] = None,
    query_token: Optional[str] = None,
    authorization: Optional[str] = None,
) -> Optional[str]:
    """Pick the credential from the first carrier that has one.

    Header values are assumed to be "Bearer <token>": split on whitespace
    and keep the last segment.
    """
    if body_token:
        return body_token.strip()
    if query_token:
        return query_token.strip()
    if authorization:
        parts = authorization.split()
        return parts[-1] if parts else None
    return None


def resolve_identity(token: Optional[str]) -> IdentityResult:
    """Verify a token, downgrading any failure to Anonymous."""
    if not token:
        return Anonymous()
    try:
        return Authenticated(verify_token(token))
    except InvalidToken:
        logger.info("auth.invalid_token")
        return Anonymous(reason="invalid")


def build_request_context(
    body_token: Optional[str] = None,
    query_token: Optional[str] = None,
    authorization: Optional[str] = None,
) -> RequestContext:
    """Build the request context from the raw credential carriers."""
    result = resolve_identity(extract_token(body_token, query_token, authorization))
    if isinstance(result, Authenticated):
        structlog.contextvars.bind_contextvars(username=result.identity.username)
        return RequestContext(user=result.identity)
    return RequestContext.anonymous()
