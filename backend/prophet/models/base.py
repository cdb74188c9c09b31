"""Column mixins shared by Prophet tables."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, Uuid

from prophet.utils.time_utils import utc_now


class UUIDMixin:
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)


class TimestampMixin:
    """
    created_at / updated_at stamped in Python rather than by the database.

    Services pass their own ``now`` so that every row written by one stake
    or resolution carries the same instant; these defaults only apply when
    a row is built without one.
    """

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )
