"""Client-side token holder.

Learn: The client never verifies signatures (it doesn't have the secret).
It only decodes the token's claims to answer "am I logged in?" and
"who am I?" without a round trip. The server remains the only judge of
whether a token is actually trusted.
"""

import time
from typing import Optional

import jwt

from deepthoughts.auth.jwt import IdentityAssertion


class AuthSession:
    """Holds the bearer token for a client."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token

    def login(self, token: str) -> None:
        self._token = token

    def logout(self) -> None:
        self._token = None

    def logged_in(self) -> bool:
        return bool(self._token) and not self.is_token_expired(self._token)

    def is_token_expired(self, token: str) -> bool:
        """True if the token's exp has passed. Undecodable tokens count as expired."""
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return True
        exp = claims.get("exp")
        return exp is None or exp < time.time()

    def get_profile(self) -> Optional[IdentityAssertion]:
        """The identity embedded in the current token (unverified)."""
        if not self._token:
            return None
        try:
            claims = jwt.decode(self._token, options={"verify_signature": False})
            return IdentityAssertion.model_validate(claims["data"])
        except (jwt.InvalidTokenError, KeyError, ValueError):
            return None
