# app/models/vehicle_assignment.py
"""
Vehicle assignments table: hands a vehicle to a team, optionally naming the
member who does the work. A vehicle is assigned to a given team at most once.
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.enums import Priority
from app.utils.time import utc_now


class VehicleAssignment(Base):
    __tablename__ = "vehicle_assignments"
    __table_args__ = (UniqueConstraint("vehicle_id", "team_id", name="uq_vehicle_assignment_team"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    priority = Column(String(20), nullable=False, default=Priority.MEDIUM.value)
    due_date = Column(Date)
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)

    vehicle = relationship("Vehicle", back_populates="assignments")
    team = relationship("Team", back_populates="assignments")
    user = relationship("User")

    @property
    def vin(self):
        return self.vehicle.vin if self.vehicle is not None else None

    def __repr__(self):
        return f"<VehicleAssignment vehicle={self.vehicle_id} team={self.team_id}>"
