# app/models/notification.py
"""
Notifications table: one row per send attempt made on behalf of a user.
Rows start PENDING; the delivery status is written afterwards by a separate call.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, DateTime, Text
from app.database import Base
from app.models.enums import DeliveryStatus, NotificationChannel
from app.utils.time import utc_now


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type = Column(String(50), nullable=False, index=True)
    channel = Column(String(20), nullable=False, default=NotificationChannel.EMAIL.value)
    recipient = Column(String(255))
    subject = Column(String(255))
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=DeliveryStatus.PENDING.value, index=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<Notification {self.id} type={self.type} status={self.status}>"
