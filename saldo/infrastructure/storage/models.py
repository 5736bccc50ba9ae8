"""
SQLAlchemy ORM models for local key-value storage
"""
from datetime import datetime

from sqlalchemy import String, Text, TIMESTAMP, func
from sqlalchemy.orm import Mapped, mapped_column

from saldo.infrastructure.storage.session import Base


class StoredItem(Base):
    """
    Durable key-value entry (token, cached profile snapshot)

    Keys must stay stable across releases, otherwise session restoration
    after an upgrade finds nothing.
    """
    __tablename__ = "stored_items"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
