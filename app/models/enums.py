# app/models/enums.py
"""Enumerations shared by models, schemas and services."""

from enum import Enum


class VehicleStatus(str, Enum):
    """Reconditioning status of a vehicle. Any status may follow any other."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    AWAITING_PARTS = "AWAITING_PARTS"
    READY_FOR_SALE = "READY_FOR_SALE"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"

    @classmethod
    def values(cls) -> list:
        return [s.value for s in cls]


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


class TimelineEventType(str, Enum):
    """Well-known event types. The column itself is free-form."""

    CHECK_IN = "CHECK_IN"
    STATUS_CHANGE = "STATUS_CHANGE"
    LOCATION_CHANGE = "LOCATION_CHANGE"
    ASSIGNMENT_UPDATE = "ASSIGNMENT_UPDATE"
    NOTE = "NOTE"


class NotificationType(str, Enum):
    VEHICLE_COMPLETED = "VEHICLE_COMPLETED"
    VEHICLE_ON_HOLD = "VEHICLE_ON_HOLD"
    VEHICLE_BACK_IN_PROGRESS = "VEHICLE_BACK_IN_PROGRESS"
    STATUS_UPDATE = "STATUS_UPDATE"
    ASSIGNMENT_UPDATE = "ASSIGNMENT_UPDATE"
    NEW_VEHICLE_CHECK_IN = "NEW_VEHICLE_CHECK_IN"
    PASSWORD_RESET = "PASSWORD_RESET"
    SYSTEM_ALERT = "SYSTEM_ALERT"


class NotificationChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    WEBHOOK = "webhook"


class DeliveryStatus(str, Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
