from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkItem(Base):
    __tablename__ = "links"

    # Surrogate key; doubles as the insertion-order tie-break for listings
    id = Column(Integer, primary_key=True, autoincrement=True)

    code = Column(String(8), unique=True, index=True, nullable=False)
    target_url = Column(String(2048), nullable=False)

    total_clicks = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    last_clicked = Column(DateTime(timezone=True), nullable=True)
