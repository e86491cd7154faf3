# tests/test_status_coordinator.py
"""Unit tests for the status transition coordinator."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock, AsyncMock
from datetime import datetime
from app.errors import NotFoundError, ValidationError
from app.models.enums import NotificationType, VehicleStatus
from app.models.user import User
from app.models.vehicle import Vehicle
from app.services.notification_service import DispatchResult
from app.services.status_service import StatusTransitionCoordinator, notification_type_for


def make_vehicle(status="IN_PROGRESS", assigned_to_id=7, completed_at=None):
    return Vehicle(
        id=1, vin="1HGCM82633A004352", year=2019, make="Honda", model="Accord",
        status=status, current_location="Detail", assigned_to_id=assigned_to_id,
        completed_at=completed_at,
    )


def make_coordinator(vehicle, managers=None):
    db = MagicMock()
    db.query.return_value.filter.return_value.first.return_value = vehicle
    db.query.return_value.filter.return_value.all.return_value = managers or []
    recorder = MagicMock()
    recorder.record.return_value = MagicMock(id=99)
    dispatcher = MagicMock()
    dispatcher.webhook_url = None
    dispatcher.notify_user = AsyncMock(return_value=DispatchResult(True, "Email sent", "tech@example.com"))
    dispatcher.send = AsyncMock(return_value=DispatchResult(True, "Webhook acknowledged (200)", "http://hooks"))
    return StatusTransitionCoordinator(db, recorder, dispatcher), db, recorder, dispatcher


class TestStatusTransitionCoordinator:
    @pytest.mark.asyncio
    async def test_status_change_is_written_and_recorded(self):
        vehicle = make_vehicle("IN_PROGRESS")
        coordinator, db, recorder, dispatcher = make_coordinator(vehicle)

        result = await coordinator.transition(1, "ON_HOLD", User(id=5))

        assert vehicle.status == "ON_HOLD"
        assert result.status_changed is True
        assert result.previous_status == "IN_PROGRESS"
        db.commit.assert_called()
        args, kwargs = recorder.record.call_args
        assert args[1] == "STATUS_CHANGE"
        assert args[2] == "Status changed from IN_PROGRESS to ON_HOLD."
        assert kwargs["user_id"] == 5
        assert kwargs["department"] == "Detail"

    @pytest.mark.asyncio
    async def test_completed_at_set_exactly_once(self):
        vehicle = make_vehicle("IN_PROGRESS")
        coordinator, *_ = make_coordinator(vehicle)

        await coordinator.transition(1, "COMPLETED")
        first_stamp = vehicle.completed_at
        assert isinstance(first_stamp, datetime)

        await coordinator.transition(1, "IN_PROGRESS")
        assert vehicle.completed_at == first_stamp

        await coordinator.transition(1, "COMPLETED")
        assert vehicle.completed_at == first_stamp

    @pytest.mark.asyncio
    async def test_invalid_status_rejected_before_any_read(self):
        coordinator, db, recorder, _ = make_coordinator(make_vehicle())

        with pytest.raises(ValidationError):
            await coordinator.transition(1, "SOLD")

        db.query.assert_not_called()
        recorder.record.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_vehicle_raises_not_found(self):
        coordinator, db, recorder, dispatcher = make_coordinator(None)

        with pytest.raises(NotFoundError):
            await coordinator.transition(404, "COMPLETED")

        recorder.record.assert_not_called()
        dispatcher.notify_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_same_status_still_records_and_notifies(self):
        vehicle = make_vehicle("ON_HOLD")
        coordinator, db, recorder, dispatcher = make_coordinator(vehicle)

        result = await coordinator.transition(1, "ON_HOLD")

        assert result.status_changed is False
        db.commit.assert_not_called()
        recorder.record.assert_called_once()
        dispatcher.notify_user.assert_called_once()

    @pytest.mark.asyncio
    async def test_notification_failure_is_partial_success(self):
        vehicle = make_vehicle("IN_PROGRESS")
        coordinator, db, recorder, dispatcher = make_coordinator(vehicle)
        dispatcher.notify_user.side_effect = RuntimeError("smtp down")

        result = await coordinator.transition(1, "COMPLETED")

        assert vehicle.status == "COMPLETED"
        assert vehicle.completed_at is not None
        recorder.record.assert_called_once()
        assert result.partial_success is True
        assert "smtp down" in result.notification_errors[0]

    @pytest.mark.asyncio
    async def test_unsuccessful_send_reported_not_raised(self):
        coordinator, _, _, dispatcher = make_coordinator(make_vehicle())
        dispatcher.notify_user.return_value = DispatchResult(False, "Failed to send email", "tech@example.com")

        result = await coordinator.transition(1, "AWAITING_PARTS")

        assert result.notifications_sent == 0
        assert result.notification_errors == ["tech@example.com: Failed to send email"]

    @pytest.mark.asyncio
    async def test_unassigned_vehicle_sends_nothing(self):
        coordinator, _, recorder, dispatcher = make_coordinator(make_vehicle(assigned_to_id=None))

        result = await coordinator.transition(1, "READY_FOR_SALE")

        dispatcher.notify_user.assert_not_called()
        assert result.notifications_sent == 0
        assert recorder.record.call_args[1]["user_id"] is None

    @pytest.mark.asyncio
    async def test_team_managers_notified_with_assignee(self):
        vehicle = make_vehicle(assigned_to_id=7)
        vehicle.assigned_to = User(id=7, team_id=3, role="USER")
        managers = [User(id=8, team_id=3, role="MANAGER"), User(id=7, team_id=3, role="USER")]
        coordinator, _, _, dispatcher = make_coordinator(vehicle, managers=managers)

        result = await coordinator.transition(1, "COMPLETED")

        notified = [c.args[0] for c in dispatcher.notify_user.call_args_list]
        assert notified == [7, 8]
        assert dispatcher.notify_user.call_args_list[0].args[1] == NotificationType.VEHICLE_COMPLETED
        assert result.notifications_sent == 2

    @pytest.mark.asyncio
    async def test_outbound_webhook_fired_when_configured(self):
        coordinator, _, _, dispatcher = make_coordinator(make_vehicle(assigned_to_id=None))
        dispatcher.webhook_url = "http://hooks"

        result = await coordinator.transition(1, "IN_PROGRESS")

        message = dispatcher.send.call_args.args[0]
        assert message.channel == "webhook"
        assert message.payload["data"]["status"] == "IN_PROGRESS"
        assert result.notifications_sent == 1

    @pytest.mark.asyncio
    async def test_context_description_appended(self):
        coordinator, _, recorder, _ = make_coordinator(make_vehicle("PENDING"))

        await coordinator.transition(1, "IN_PROGRESS", context={"description": "Started in shop."})

        assert recorder.record.call_args.args[2] == "Status changed from PENDING to IN_PROGRESS. Started in shop."


class TestNotificationType:
    def test_completed(self):
        assert notification_type_for("IN_PROGRESS", VehicleStatus.COMPLETED) == NotificationType.VEHICLE_COMPLETED

    def test_on_hold(self):
        assert notification_type_for("IN_PROGRESS", VehicleStatus.ON_HOLD) == NotificationType.VEHICLE_ON_HOLD

    def test_back_in_progress(self):
        assert notification_type_for("ON_HOLD", VehicleStatus.IN_PROGRESS) == NotificationType.VEHICLE_BACK_IN_PROGRESS

    def test_anything_else(self):
        assert notification_type_for("PENDING", VehicleStatus.IN_PROGRESS) == NotificationType.STATUS_UPDATE
