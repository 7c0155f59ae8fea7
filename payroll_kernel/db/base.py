"""
Module: payroll_kernel.db.base
Responsibility: Declarative base and column-type conventions shared by the
    payroll ORM models.
Architecture position: Kernel > DB.  Lowest import target of the persistence
    layer; must not import models/, services/ or outer layers.

Invariants enforced:
    - Every table has a uuid4 primary key stored as String(36), so the same
      schema runs on PostgreSQL and SQLite.
    - ``Mapped[Decimal]`` columns are Numeric(18, 2); payroll amounts never
      pass through float.
    - ``Mapped[datetime]`` columns are timezone-aware on write.  SQLite drops
      the offset, so DTO conversion goes through ``as_utc``.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID in Python, 36-character string in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(18, 2),
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a stored timestamp to an aware UTC datetime."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
