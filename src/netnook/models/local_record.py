"""SQLAlchemy model backing the local key/value cache."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from netnook.db.session import Base
from netnook.db.time import utcnow


class LocalRecord(Base):
    """A single persisted blob of local state.

    The cache keeps a handful of independent blobs (feed state, connection
    configuration, device identity, profile extensions), each replaced
    wholesale on write.
    """

    __tablename__ = "local_record"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    # JSON document or plain token, depending on the key.
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
