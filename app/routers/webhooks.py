# app/routers/webhooks.py
"""
Inbound webhook from the external recon system.
POST /webhooks/recon: no session; optionally HMAC-signed (see webhook_service).
"""

import json

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.deps import get_coordinator
from app.errors import UnauthorizedError, ValidationError
from app.schemas.webhook import ReconWebhookOut, ReconWebhookPayload
from app.services.status_service import StatusTransitionCoordinator
from app.services.webhook_service import process_recon_webhook, verify_signature
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/webhooks/recon", response_model=ReconWebhookOut, summary="Recon system push")
async def receive_recon_webhook(
    request: Request,
    db: Session = Depends(get_db),
    coordinator: StatusTransitionCoordinator = Depends(get_coordinator),
):
    raw_body = await request.body()
    source = request.client.host if request.client else "unknown"
    logger.info(f"Recon webhook from {source} | {len(raw_body)} bytes")

    signature = request.headers.get("x-recon-signature")
    if settings.WEBHOOK_SECRET and signature:
        timestamp = request.headers.get("x-recon-timestamp", "")
        if not verify_signature(raw_body, signature, timestamp, settings.WEBHOOK_SECRET):
            logger.warning(f"Rejected recon webhook from {source}: bad signature")
            raise UnauthorizedError("Invalid signature")

    try:
        data = json.loads(raw_body or b"{}")
    except ValueError:
        raise ValidationError("Body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Body must be a JSON object")

    try:
        payload = ReconWebhookPayload.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid payload: {e.errors()[0].get('msg', 'malformed field')}")

    return await process_recon_webhook(db, payload, coordinator)
