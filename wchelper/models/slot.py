"""ORM model for the local key/value slot store (fallback persistence)."""

from sqlalchemy import Column, DateTime, String, Text, func

from wchelper.models.base import Base


class Slot(Base):
    """
    One named slot holding a JSON-serialized record or collection.

    key: logical storage key (e.g. 'wc_users', 'wc_session')
    """

    __tablename__ = "slots"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
