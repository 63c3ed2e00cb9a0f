from __future__ import annotations

from datetime import datetime, timezone
from functools import total_ordering
from typing import Any

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps to models.

    - created_at: set once on insert (UTC)
    - updated_at: auto-updated on each update (UTC)
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )


def _nulls_first(value: Any) -> tuple[bool, Any]:
    return (value is not None, value)


@total_ordering
class BusinessKeyMixin:
    """Equality, hashing and ordering driven by a business key.

    Subclasses list the attribute names making up their key in
    ``_business_key_fields``. Equality, ``hash()`` and ordering all read the
    key through :meth:`business_key`, so two rows compare equal exactly when
    they are equal. ``None`` sorts before any value at every key position.

    The surrogate ``id`` never takes part: a row keeps its identity before
    and after being flushed.
    """

    # Attribute names making up the key, in comparison order.
    _business_key_fields = ()

    def business_key(self) -> tuple[Any, ...]:
        return tuple(getattr(self, name) for name in self._business_key_fields)

    def sort_key(self) -> tuple[tuple[bool, Any], ...]:
        return tuple(_nulls_first(value) for value in self.business_key())

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return NotImplemented
        return self.business_key() == other.business_key()  # type: ignore[attr-defined]

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.sort_key() < other.sort_key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.business_key()))


def compare(a: BusinessKeyMixin | None, b: BusinessKeyMixin | None) -> int:
    """Three-way comparison by business key; a ``None`` record sorts first.

    Returns:
        -1, 0 or 1. ``0`` is returned exactly when ``a == b``.
    """
    if a is None or b is None:
        return (a is not None) - (b is not None)
    left, right = a.sort_key(), b.sort_key()
    return (left > right) - (left < right)
