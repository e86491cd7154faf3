# app/models/team.py
"""
Teams table: groups users by department.
Team managers are notified alongside the assignee when a vehicle changes status.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time import utc_now


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text)
    department = Column(String(100))
    created_at = Column(DateTime, nullable=False, default=utc_now)

    members = relationship("User", back_populates="team", order_by="User.name")
    assignments = relationship(
        "VehicleAssignment",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="VehicleAssignment.created_at.desc()",
    )

    @property
    def vehicle_count(self) -> int:
        return len(self.assignments)

    def __repr__(self):
        return f"<Team {self.id} name={self.name}>"
