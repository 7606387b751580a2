"""Authorization gate — the single check every actor-needing operation makes.

Learn: Call require_identity() first, before touching storage, so an
unauthenticated caller can never cause a partial side effect. Public
reads (thoughts, thought, users, user) must not call it.
"""

from deepthoughts.auth.context import RequestContext
from deepthoughts.auth.jwt import IdentityAssertion
from deepthoughts.errors import Unauthenticated


def require_identity(ctx: RequestContext) -> IdentityAssertion:
    """Return the caller's identity, or raise Unauthenticated."""
    if ctx.user is None:
        raise Unauthenticated()
    return ctx.user
