"""
CV Site Backend — Request Parameter Validator
===============================================

What:  The handler placed at the head of every resource chain.
How:   Malformed ids and paging parameters are rejected with a 400 before any
       hook or query runs, so handlers can rely on clean integer values.

Rules:
    item_id  positive integer (path)
    limit    integer in [0, MAX_PAGE_SIZE] (query); 0 means "no pagination"
    cursor   positive integer (query)

Ids and cursors are capped at MAX_ID, the largest value an Integer
primary key column can hold.
"""

from typing import Any, Optional

from cvsite.config import settings
from cvsite.crud.context import RequestContext
from cvsite.exceptions import ValidationError

MAX_ID = 2**31 - 1


def _parse_int(name: str, raw: Any, minimum: int, maximum: Optional[int] = None) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError(message=f"'{name}' must be an integer, got '{raw}'", field=name)
    if value < minimum:
        raise ValidationError(message=f"'{name}' must be >= {minimum}", field=name)
    if maximum is not None and value > maximum:
        raise ValidationError(message=f"'{name}' must be <= {maximum}", field=name)
    return value


def check_params(ctx: RequestContext) -> None:
    if "item_id" in ctx.params:
        ctx.params["item_id"] = _parse_int("item_id", ctx.params["item_id"], minimum=1, maximum=MAX_ID)

    if ctx.query.get("limit") not in (None, ""):
        limit = _parse_int("limit", ctx.query["limit"], minimum=0)
        if limit > settings.max_page_size:
            raise ValidationError(
                message=f"'limit' must be <= {settings.max_page_size}",
                field="limit",
                context={"max_page_size": settings.max_page_size},
            )
        ctx.query["limit"] = limit
    else:
        ctx.query.pop("limit", None)

    if ctx.query.get("cursor") not in (None, ""):
        ctx.query["cursor"] = _parse_int("cursor", ctx.query["cursor"], minimum=1, maximum=MAX_ID)
    else:
        ctx.query.pop("cursor", None)
