# app/models/vehicle.py
"""
Vehicles table: one row per vehicle in reconditioning.
VIN is unique, upper-cased on the way in, and never changed after creation.
completed_at is stamped the first time the vehicle reaches COMPLETED and never cleared.
"""

from sqlalchemy import Column, Float, ForeignKey, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.enums import Priority, VehicleStatus
from app.utils.time import utc_now


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vin = Column(String(17), unique=True, nullable=False, index=True)
    stock_number = Column(String(50), index=True)
    year = Column(Integer, nullable=False)
    make = Column(String(100), nullable=False, index=True)
    model = Column(String(100), nullable=False)
    trim = Column(String(100))
    color = Column(String(50))
    mileage = Column(Integer)
    status = Column(String(30), nullable=False, default=VehicleStatus.PENDING.value, index=True)
    priority = Column(String(20), nullable=False, default=Priority.MEDIUM.value)
    current_location = Column(String(100))      # department the vehicle is sitting in
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True)
    reconditioning_cost = Column(Float)
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime, nullable=False, default=utc_now)
    completed_at = Column(DateTime)

    assigned_to = relationship("User")
    timeline_events = relationship(
        "TimelineEvent",
        back_populates="vehicle",
        order_by="[TimelineEvent.timestamp.desc(), TimelineEvent.id.desc()]",
        cascade="all, delete-orphan",
    )
    assignments = relationship("VehicleAssignment", back_populates="vehicle", cascade="all, delete-orphan")

    @property
    def days_in_recon(self) -> int:
        end = self.completed_at or utc_now()
        if not self.created_at:
            return 0
        return max((end - self.created_at).days, 0)

    def __repr__(self):
        return f"<Vehicle {self.vin} {self.year} {self.make} {self.model} status={self.status}>"
