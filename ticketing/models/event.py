"""
Event model for the catalog that bookings reference.

Date and time are kept as the organiser typed them ("2026-12-05",
"7:00 PM - 10:00 PM"); they are printed on tickets, never computed with.
"""

from sqlalchemy import Column, String, JSON

from ticketing.db.base import Base, TimestampMixin, new_id


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=False)
    date = Column(String(50), nullable=False)
    event_time = Column(String(100), nullable=True)
    category = Column(String(100), nullable=True)
    address = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    standard_price = Column(String(50), nullable=True)
    vip_price = Column(String(50), nullable=True)
    refreshments = Column(String(255), nullable=True)
    image_url = Column(String(1024), nullable=True)
    sponsor_logos = Column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, date={self.date})>"
