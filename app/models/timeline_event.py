# app/models/timeline_event.py
"""
Timeline events table: append-only audit trail of changes to a vehicle.
Rows are written by the timeline recorder and never updated; they are removed
only when their vehicle is deleted.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time import utc_now


class TimelineEvent(Base):
    __tablename__ = "timeline_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(String(50), nullable=False, index=True)
    description = Column(Text)
    department = Column(String(100), index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    timestamp = Column(DateTime, nullable=False, default=utc_now, index=True)

    vehicle = relationship("Vehicle", back_populates="timeline_events")
    user = relationship("User")

    @property
    def vin(self):
        return self.vehicle.vin if self.vehicle is not None else None

    def __repr__(self):
        return f"<TimelineEvent {self.id} vehicle={self.vehicle_id} type={self.event_type}>"
