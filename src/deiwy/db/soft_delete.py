"""Soft-delete support for ORM models.

Rows of a :class:`SoftDeleteMixin` subclass are never removed by the
application; instead ``deleted_at`` is stamped. Every ORM ``SELECT`` issued
through a :class:`~sqlalchemy.orm.Session` silently filters those rows out
unless the statement opts in with ``execution_options(include_deleted=True)``.
Lazy and eager relationship loads are filtered too, so collections such as
``Conversation.messages`` never surface deleted rows.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, event
from sqlalchemy.orm import (
    Mapped,
    ORMExecuteState,
    Session,
    mapped_column,
    with_loader_criteria,
)

INCLUDE_DELETED = "include_deleted"


class SoftDeleteMixin:
    """Adds a nullable ``deleted_at`` marker to a mapped class."""

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    @property
    def is_deleted(self) -> bool:
        """Return True once the row has been soft-deleted."""
        return self.deleted_at is not None


@event.listens_for(Session, "do_orm_execute")
def _exclude_soft_deleted(execute_state: ORMExecuteState) -> None:
    if (
        execute_state.is_select
        and not execute_state.is_column_load
        and not execute_state.execution_options.get(INCLUDE_DELETED, False)
    ):
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(
                SoftDeleteMixin,
                lambda cls: cls.deleted_at.is_(None),
                include_aliases=True,
            )
        )
