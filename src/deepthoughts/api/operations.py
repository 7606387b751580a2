"""Operation registry — the single query/mutation surface of the API.

Learn: Each operation is registered with its kind, its variables model and
a resolver. The route in ops.py looks the name up, validates the
variables, builds the RequestContext once and calls the resolver.

Public reads (thoughts, thought, users, user) never call the auth gate.
Everything that needs an actor (me and every mutation except addUser and
login) does so inside the service method, before any storage call.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

from deepthoughts.auth.context import RequestContext
from deepthoughts.schemas.operations import (
    AddFriendVariables,
    AddReactionVariables,
    AddThoughtVariables,
    AddUserVariables,
    LoginVariables,
    NoVariables,
    ThoughtsVariables,
    ThoughtVariables,
    UserVariables,
)
from deepthoughts.services.thought_service import ThoughtService
from deepthoughts.services.user_service import UserService
from deepthoughts.store.base import DocumentStore


class Services:
    """Services bound to one store, handed to every resolver."""

    def __init__(self, store: DocumentStore):
        self.users = UserService(store)
        self.thoughts = ThoughtService(store)


Resolver = Callable[[Services, RequestContext, Any], Awaitable[Any]]


@dataclass(frozen=True)
class Operation:
    name: str
    kind: str  # "query" or "mutation"
    variables: type[BaseModel]
    resolve: Resolver


OPERATIONS: dict[str, Operation] = {}


def operation(name: str, kind: str, variables: type[BaseModel] = NoVariables):
    """Register a resolver under an operation name."""

    def decorator(fn: Resolver) -> Resolver:
        OPERATIONS[name] = Operation(name=name, kind=kind, variables=variables, resolve=fn)
        return fn

    return decorator


# ─── Queries ────────────────────────────────────────────


@operation("users", "query")
async def users(svc: Services, ctx: RequestContext, v: NoVariables):
    return await svc.users.list_users()


@operation("user", "query", UserVariables)
async def user(svc: Services, ctx: RequestContext, v: UserVariables):
    return await svc.users.get_user(v.username)


@operation("thoughts", "query", ThoughtsVariables)
async def thoughts(svc: Services, ctx: RequestContext, v: ThoughtsVariables):
    return await svc.thoughts.list_thoughts(v.username)


@operation("thought", "query", ThoughtVariables)
async def thought(svc: Services, ctx: RequestContext, v: ThoughtVariables):
    return await svc.thoughts.get_thought(v.id)


@operation("me", "query")
async def me(svc: Services, ctx: RequestContext, v: NoVariables):
    return await svc.users.me(ctx)


# ─── Mutations ──────────────────────────────────────────


@operation("addUser", "mutation", AddUserVariables)
async def add_user(svc: Services, ctx: RequestContext, v: AddUserVariables):
    return await svc.users.add_user(v.username, v.email, v.password)


@operation("login", "mutation", LoginVariables)
async def login(svc: Services, ctx: RequestContext, v: LoginVariables):
    return await svc.users.login(v.email, v.password)


@operation("addThought", "mutation", AddThoughtVariables)
async def add_thought(svc: Services, ctx: RequestContext, v: AddThoughtVariables):
    return await svc.thoughts.add_thought(ctx, v.thought_text)


@operation("addReaction", "mutation", AddReactionVariables)
async def add_reaction(svc: Services, ctx: RequestContext, v: AddReactionVariables):
    return await svc.thoughts.add_reaction(ctx, v.thought_id, v.reaction_body)


@operation("addFriend", "mutation", AddFriendVariables)
async def add_friend(svc: Services, ctx: RequestContext, v: AddFriendVariables):
    return await svc.users.add_friend(ctx, v.friend_id)
