# app/models/user.py
"""
Users table: accounts that sign in, get vehicles assigned and receive notifications.
Email is stored lower-cased so uniqueness is case-insensitive.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.enums import UserRole
from app.utils.time import utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(200))
    password_hash = Column(String(255))
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"))
    department = Column(String(100))
    phone = Column(String(20))                 # E.164, used for SMS
    is_active = Column(Boolean, nullable=False, default=True)
    reset_token_hash = Column(String(64), index=True)   # SHA-256 of the emailed token
    reset_token_expires_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime)

    team = relationship("Team", back_populates="members")

    def __repr__(self):
        return f"<User {self.id} email={self.email} role={self.role}>"
