from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text
from database import Base


class CollectionRecord(Base):
    """One serialized JSON array per named collection."""

    __tablename__ = "collections"
    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[str] = mapped_column(String(32))
