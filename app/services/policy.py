# app/services/policy.py
"""
Authorization policy: the single place that decides who may do what.
Routers call policy.require(actor, action, resource) before every operation.
"""

from enum import Enum

from app.errors import UnauthorizedError
from app.models.enums import UserRole


class Action(str, Enum):
    VEHICLE_READ = "vehicle:read"
    VEHICLE_CREATE = "vehicle:create"
    VEHICLE_UPDATE = "vehicle:update"
    VEHICLE_DELETE = "vehicle:delete"
    VEHICLE_TRANSITION = "vehicle:transition"
    TIMELINE_READ = "timeline:read"
    TIMELINE_WRITE = "timeline:write"
    ANALYTICS_READ = "analytics:read"
    NOTIFICATION_SEND = "notification:send"
    NOTIFICATION_READ = "notification:read"
    NOTIFICATION_MANAGE = "notification:manage"
    TEAM_READ = "team:read"
    TEAM_MANAGE = "team:manage"
    USER_MANAGE = "user:manage"
    USER_SET_PASSWORD = "user:set_password"


ALL_ROLES = {UserRole.ADMIN.value, UserRole.MANAGER.value, UserRole.USER.value}
STAFF_ROLES = {UserRole.ADMIN.value, UserRole.MANAGER.value}

ROLE_PERMISSIONS = {
    Action.VEHICLE_READ: ALL_ROLES,
    Action.VEHICLE_CREATE: STAFF_ROLES,
    Action.VEHICLE_UPDATE: STAFF_ROLES,
    Action.VEHICLE_DELETE: {UserRole.ADMIN.value},
    Action.VEHICLE_TRANSITION: STAFF_ROLES,
    Action.TIMELINE_READ: ALL_ROLES,
    Action.TIMELINE_WRITE: STAFF_ROLES,
    Action.ANALYTICS_READ: STAFF_ROLES,
    Action.NOTIFICATION_SEND: ALL_ROLES,
    Action.NOTIFICATION_READ: ALL_ROLES,
    Action.NOTIFICATION_MANAGE: STAFF_ROLES,
    Action.TEAM_READ: ALL_ROLES,
    Action.TEAM_MANAGE: STAFF_ROLES,
    Action.USER_MANAGE: {UserRole.ADMIN.value},
    Action.USER_SET_PASSWORD: {UserRole.ADMIN.value},
}


class AuthorizationPolicy:
    def can_perform(self, actor, action, resource=None) -> bool:
        if actor is None or not getattr(actor, "is_active", True):
            return False
        action = Action(action)
        if actor.role in ROLE_PERMISSIONS.get(action, set()):
            return True
        # Assignees may move their own vehicle through the workflow
        if action == Action.VEHICLE_TRANSITION and resource is not None:
            return resource.assigned_to_id is not None and resource.assigned_to_id == actor.id
        # Anyone may set their own password
        if action == Action.USER_SET_PASSWORD and resource is not None:
            return resource.id == actor.id
        return False

    def require(self, actor, action, resource=None):
        if not self.can_perform(actor, action, resource):
            raise UnauthorizedError(f"Not allowed to perform {Action(action).value}")


policy = AuthorizationPolicy()
