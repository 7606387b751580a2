"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The token embeds the identity assertion under a "data" claim and is
valid for token_max_age_minutes (2 hours by default). Nothing is stored
server-side — the signed string the client holds is the only record.

Verification is binary: callers get the assertion back or
an InvalidToken with no reason attached, whether the signature was
wrong, the token was malformed, or it was simply too old.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel, ValidationError

from deepthoughts.config import settings
from deepthoughts.errors import InvalidToken


class IdentityAssertion(BaseModel):
    """The minimal claims proving who issued a request."""

    id: str
    username: str
    email: str

    model_config = {"frozen": True}


def sign_token(
    identity: IdentityAssertion,
    issued_at: Optional[datetime] = None,
    max_age_minutes: Optional[int] = None,
) -> str:
    """Create a signed, time-boxed token for an identity."""
    now = issued_at or datetime.now(timezone.utc)
    if max_age_minutes is None:
        max_age_minutes = settings.token_max_age_minutes
    lifetime = timedelta(minutes=max_age_minutes)
    payload = {
        "data": identity.model_dump(),
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, max_age_minutes: Optional[int] = None) -> IdentityAssertion:
    """Verify a token and return its identity assertion.

    Besides the signature and `exp`, the token's age (now - iat) must not
    exceed the configured maximum, so a token minted with a generous `exp`
    is still rejected once it is older than the max age.

    Raises InvalidToken on any failure.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["data", "iat", "exp"]},
        )
    except jwt.InvalidTokenError:
        raise InvalidToken() from None

    if max_age_minutes is None:
        max_age_minutes = settings.token_max_age_minutes
    max_age = timedelta(minutes=max_age_minutes)
    issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
    if datetime.now(timezone.utc) - issued_at > max_age:
        raise InvalidToken()

    try:
        return IdentityAssertion.model_validate(payload["data"])
    except ValidationError:
        raise InvalidToken() from None
