"""
CV Site Backend — Shared Column Mixins
========================================

What:  Columns every CRUD-managed table carries: the creating principal,
       the soft-delete marker and the creation timestamp.
Who:   Mixed into Skill and Project; read by cvsite.crud.resource to decide
       which columns a payload may never overwrite.

Soft delete:
    DELETE never removes a row. It sets `deleted = true`; list and retrieve
    filter on `deleted IS NOT true`, so NULL counts as "not deleted".
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CRUDColumnsMixin:
    # Identifier of the principal that created the row (from the user header)
    creator: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        default=None,
        comment="Principal that created the record",
    )

    deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
        comment="Soft-delete marker; rows are never physically removed",
    )

    # Python-side default so the value is present right after flush
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
