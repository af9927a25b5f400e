"""
CV Site Backend — Handler Chain Context
=========================================

What:  The per-request object passed along a resource handler chain, and the
       loop that runs the chain.
How:   Each handler receives the RequestContext, may read or change it, and
       either returns normally (continue), calls ctx.stop() (skip the rest of
       the chain), or raises (abort; the exception reaches the global error
       handlers and the session dependency rolls back).
Who:   Created by the endpoints of cvsite.crud.router for every request.

Handler signature:

    async def handler(ctx: RequestContext) -> None: ...
    def handler(ctx: RequestContext) -> None: ...      # sync is accepted too
"""

import inspect
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from cvsite.config import settings
from cvsite.exceptions import ValidationError


@dataclass
class Principal:
    """Identity of the caller; user_id is None for anonymous requests."""

    user_id: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None


@dataclass
class RequestContext:
    """
    State shared by every handler of one request.

    Attributes:
        db:          Request-scoped AsyncSession
        params:      Path parameters (`item_id` is an int after check_params)
        query:       Query-string parameters
        payload:     Decoded JSON body (empty dict for bodiless requests)
        principal:   Caller identity
        pattern:     Filter mapping applied by list/retrieve/update/patch
        result:      Response body; handlers overwrite it
        status_code: Response status
    """

    db: AsyncSession
    request: Optional[Request] = None
    params: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)
    principal: Principal = field(default_factory=Principal)
    pattern: Dict[str, Any] = field(default_factory=dict)
    result: Any = None
    status_code: int = 200
    stopped: bool = False

    def stop(self) -> None:
        """Ends the chain after the current handler; `result` is sent as-is."""
        self.stopped = True

    @classmethod
    async def from_request(cls, request: Request, db: AsyncSession) -> "RequestContext":
        return cls(
            db=db,
            request=request,
            params=dict(request.path_params),
            query=dict(request.query_params),
            payload=await read_payload(request),
            principal=Principal(user_id=request.headers.get(settings.user_header) or None),
        )


async def read_payload(request: Request) -> Dict[str, Any]:
    """Decodes a JSON object body; bodiless requests yield an empty dict."""
    if request.method in ("GET", "DELETE", "HEAD"):
        return {}
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(message=f"Request body is not valid JSON: {e}", field="body")
    if not isinstance(payload, dict):
        raise ValidationError(message="Request body must be a JSON object", field="body")
    return payload


async def run_chain(handlers: Sequence[Any], ctx: RequestContext) -> RequestContext:
    """Runs handlers in order until one stops the chain or raises."""
    for handler in handlers:
        outcome = handler(ctx)
        if inspect.isawaitable(outcome):
            await outcome
        if ctx.stopped:
            break
    return ctx
