from sqlalchemy import Column, DateTime, Index, String, Text, func

from orderassist.core.database import Base


class SessionEntry(Base):
    __tablename__ = "session_entries"

    key = Column(String, primary_key=True)
    value_json = Column(Text, nullable=False, default="null")
    expires_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


Index("ix_session_entries_expires_at", SessionEntry.expires_at)
