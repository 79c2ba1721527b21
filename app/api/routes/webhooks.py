# app/api/routes/webhooks.py
"""
Polar webhook endpoint.
Exempt from bearer auth; secured by signature verification instead.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.config import settings
from app.core.logging_config import get_billing_logger
from app.schemas.billing import WebhookAck
from app.services.exceptions import WebhookVerificationError
from app.services.webhook_service import verify_webhook, process_polar_event

router = APIRouter()
billing_log = get_billing_logger()


async def raw_body(request: Request) -> bytes:
    """Exact bytes Polar signed"""
    return await request.body()


@router.post("/polar", response_model=WebhookAck)
def polar_webhook(
    request: Request,
    body: bytes = Depends(raw_body),
    db: Session = Depends(get_db)
):
    """
    Receive Polar events.

    - Invalid signature or non-object body: 400, nothing written
    - Missing userId: acknowledged, nothing written
    - Replayed order.paid: acknowledged, no duplicate transaction
    - Any other failure: 500 so Polar retries
    """
    try:
        event = verify_webhook(body, request.headers, settings.POLAR_WEBHOOK_SECRET)
    except WebhookVerificationError as e:
        billing_log.warning(f"[POLAR] webhook rejected: {e}")
        raise HTTPException(400, "Invalid signature")

    billing_log.info(f"📥 [POLAR] webhook {request.headers.get('webhook-id')}: {event.get('type')}")

    try:
        process_polar_event(db, event)
        db.commit()
    except Exception as e:
        db.rollback()
        billing_log.error(f"❌ [POLAR] webhook error: {e}")
        raise HTTPException(500, "Webhook error")

    return WebhookAck()
