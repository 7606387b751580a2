"""Operations API — POST /ops/{operation}.

Learn: One route serves every query and mutation. The three credential
carriers are read here and handed to build_request_context(), which is
the only place a RequestContext is created:

    body  {"variables": {...}, "token": "..."}
    query ?token=...
    header Authorization: Bearer ...

Successful calls return {"data": {"<operation>": <result>}}; failures are
rendered by api.error_handling as {"errors": [...]}.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Header, Query
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from deepthoughts.api.deps import get_store
from deepthoughts.api.operations import OPERATIONS, Services
from deepthoughts.auth.context import build_request_context
from deepthoughts.errors import BadUserInput, UnknownOperation
from deepthoughts.schemas.operations import OperationRequest
from deepthoughts.store.base import DocumentStore

logger = structlog.get_logger()

router = APIRouter()


@router.post("/ops/{name}")
async def run_operation(
    name: str,
    body: Optional[OperationRequest] = None,
    token: Optional[str] = Query(None),
    authorization: Optional[str] = Header(None),
    store: DocumentStore = Depends(get_store),
):
    """Run one query or mutation."""
    op = OPERATIONS.get(name)
    if op is None:
        raise UnknownOperation(f"Unknown operation: {name}")

    body = body or OperationRequest()
    try:
        variables = op.variables.model_validate(body.variables)
    except ValidationError as e:
        raise BadUserInput(
            f"Invalid variables for {name}",
            details=jsonable_encoder(e.errors(include_url=False, include_context=False, include_input=False)),
        ) from None

    ctx = build_request_context(
        body_token=body.token,
        query_token=token,
        authorization=authorization,
    )
    logger.debug("ops.run", operation=name, kind=op.kind, authenticated=ctx.is_authenticated)

    result = await op.resolve(Services(store), ctx, variables)
    return {"data": {name: jsonable_encoder(result, by_alias=True)}}
