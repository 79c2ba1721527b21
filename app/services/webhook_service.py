# app/services/webhook_service.py
"""
Polar webhook verification and processing.

Polar signs deliveries with the Standard Webhooks scheme. The webhook secret
is used as raw UTF-8 key material, so it is base64 encoded before being handed
to the verifier.
"""
import base64
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session
from standardwebhooks.webhooks import Webhook, WebhookVerificationError as SignatureError

from app.core.logging_config import get_billing_logger
from app.models.billing import DynamicAccess, Transaction
from app.services.exceptions import WebhookVerificationError

log = get_billing_logger()

ORDER_PAID = "order.paid"
SUBSCRIPTION_CANCELED = "subscription.canceled"


# ────────────────────────────────────────────
# Verification
# ────────────────────────────────────────────

def get_verifier(secret: str) -> Webhook:
    """Standard Webhooks verifier keyed with the secret's UTF-8 bytes."""
    if not secret:
        raise WebhookVerificationError("Webhook secret not configured")
    return Webhook(base64.b64encode(secret.encode("utf-8")).decode("ascii"))


def verify_webhook(body: bytes, headers: Mapping[str, str], secret: str) -> Dict[str, Any]:
    """
    Verify a delivery and return the parsed event.

    The library rejects timestamps more than five minutes from now.

    Raises:
        WebhookVerificationError: missing headers, stale timestamp, bad signature
            or a body that is not a JSON object
    """
    verifier = get_verifier(secret)
    try:
        event = verifier.verify(body, dict(headers.items()))
    except SignatureError as e:
        raise WebhookVerificationError(str(e))
    except ValueError:
        # malformed signature entries, undecodable body or invalid JSON
        raise WebhookVerificationError("Malformed webhook delivery")

    if not isinstance(event, dict):
        raise WebhookVerificationError("Body is not a JSON object")
    return event


# ────────────────────────────────────────────
# Payload helpers
# ────────────────────────────────────────────

def _dig(data: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _first(data: Dict[str, Any], *paths) -> Any:
    for path in paths:
        value = _dig(data, *path)
        if value:
            return value
    return None


def _parse_datetime(value: Any) -> Optional[datetime]:
    """ISO-8601 string or epoch seconds -> naive UTC datetime"""
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def extract_user_id(data: Dict[str, Any]) -> Optional[str]:
    user_id = _first(
        data,
        ("metadata", "userId"),
        ("metadata", "user_id"),
        ("customer", "metadata", "userId"),
    )
    return str(user_id) if user_id else None


# ────────────────────────────────────────────
# Processing
# ────────────────────────────────────────────

def upsert_dynamic_access(db: Session, user_id: str, event_type: str, data: Dict[str, Any]) -> DynamicAccess:
    status = _first(data, ("status",), ("subscription", "status")) or "active"
    current_period_end = _parse_datetime(
        _first(data, ("current_period_end",), ("subscription", "current_period_end"))
    )
    cancel_flag = data.get("cancel_at_period_end")

    access = db.query(DynamicAccess).filter(DynamicAccess.user_id == user_id).first()
    if access:
        access.status = status
        access.current_period_end = current_period_end
        if cancel_flag is not None:
            access.cancel_at_period_end = bool(cancel_flag)
    else:
        access = DynamicAccess(
            user_id=user_id,
            status=status,
            subscription_id=_first(data, ("id",), ("subscription", "id")) or "",
            current_period_end=current_period_end,
            cancel_at_period_end=bool(cancel_flag) if event_type == SUBSCRIPTION_CANCELED else False,
            provider="polar",
        )
        db.add(access)

    log.info(f"Dynamic access for {user_id} -> {status} ({event_type})")
    return access


def record_transaction(db: Session, user_id: str, data: Dict[str, Any]) -> Optional[Transaction]:
    """Insert the paid order once per invoice id; replays are no-ops."""
    invoice_id = _first(data, ("id",), ("order", "id"))
    if not invoice_id:
        log.warning(f"[POLAR] webhook: missing invoiceId for {user_id}")
        return None

    existing = db.query(Transaction).filter(Transaction.invoice_id == str(invoice_id)).first()
    if existing:
        log.info(f"Transaction {invoice_id} already recorded")
        return None

    transaction = Transaction(
        user_id=user_id,
        invoice_id=str(invoice_id),
        amount=int(_first(data, ("amount",), ("total_amount",), ("order", "amount")) or 0),
        status=_first(data, ("status",), ("order", "status")) or "paid",
        payment_date=_parse_datetime(
            _first(data, ("created",), ("created_at",), ("order", "created"))
        ) or datetime.utcnow(),
    )
    db.add(transaction)
    log.info(f"💳 Transaction {invoice_id} recorded for {user_id}")
    return transaction


def process_polar_event(db: Session, event: Dict[str, Any]) -> bool:
    """
    Apply a verified event to the billing tables.

    Returns False when the event carries no user id and was ignored.
    The caller commits.
    """
    event_type = event.get("type") or ""
    data = event.get("data") or {}

    user_id = extract_user_id(data)
    if not user_id:
        log.warning(f"[POLAR] webhook: missing userId in metadata (type={event_type})")
        return False

    if "subscription" in event_type:
        upsert_dynamic_access(db, user_id, event_type, data)

    if event_type == ORDER_PAID:
        record_transaction(db, user_id, data)

    return True
