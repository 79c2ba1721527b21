import base64
import hashlib
import hmac
import inspect
import json
import time
from datetime import datetime, timezone

import pytest

from app.api.routes import webhooks
from app.models.billing import DynamicAccess, Transaction
from app.services.exceptions import WebhookVerificationError
from app.services.webhook_service import get_verifier, verify_webhook

from conftest import TEST_WEBHOOK_SECRET

WEBHOOK_URL = "/api/webhook/polar"


def _signed(event, msg_id="msg_1", timestamp=None, secret=TEST_WEBHOOK_SECRET):
    body = json.dumps(event).encode("utf-8")
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed_at = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    headers = {
        "webhook-id": msg_id,
        "webhook-timestamp": str(timestamp),
        "webhook-signature": get_verifier(secret).sign(msg_id, signed_at, body.decode("utf-8")),
        "content-type": "application/json",
    }
    return body, headers


def _subscription_event(event_type="subscription.active", status="active", user_id="u1", **extra):
    data = {
        "id": "sub_123",
        "status": status,
        "current_period_end": "2030-01-01T00:00:00Z",
        "metadata": {"userId": user_id},
    }
    data.update(extra)
    return {"type": event_type, "data": data}


def _order_event(invoice_id="ord_1", user_id="u1"):
    return {
        "type": "order.paid",
        "data": {
            "id": invoice_id,
            "amount": 900,
            "status": "paid",
            "created_at": "2024-05-01T10:00:00Z",
            "customer": {"metadata": {"userId": user_id}},
        },
    }


class TestVerification:

    def test_valid_signature(self):
        body, headers = _signed({"type": "ping"})
        assert verify_webhook(body, headers, TEST_WEBHOOK_SECRET) == {"type": "ping"}

    def test_one_of_several_signatures_matches(self):
        body, headers = _signed({"type": "ping"})
        headers["webhook-signature"] = "v1,AAAA " + headers["webhook-signature"]
        verify_webhook(body, headers, TEST_WEBHOOK_SECRET)

    def test_signature_is_keyed_with_raw_secret_bytes(self):
        body, headers = _signed({"type": "ping"})
        msg_id, timestamp = headers["webhook-id"], headers["webhook-timestamp"]
        expected = base64.b64encode(hmac.new(
            TEST_WEBHOOK_SECRET.encode("utf-8"),
            f"{msg_id}.{timestamp}.".encode("utf-8") + body,
            hashlib.sha256,
        ).digest()).decode("ascii")
        assert headers["webhook-signature"] == f"v1,{expected}"

    def test_wrong_secret(self):
        body, headers = _signed({"type": "ping"}, secret="other")
        with pytest.raises(WebhookVerificationError):
            verify_webhook(body, headers, TEST_WEBHOOK_SECRET)

    def test_stale_timestamp(self):
        body, headers = _signed({"type": "ping"}, timestamp=int(time.time()) - 600)
        with pytest.raises(WebhookVerificationError):
            verify_webhook(body, headers, TEST_WEBHOOK_SECRET)

    def test_missing_headers(self):
        with pytest.raises(WebhookVerificationError):
            verify_webhook(b"{}", {}, TEST_WEBHOOK_SECRET)

    def test_malformed_signature_entry(self):
        body, headers = _signed({"type": "ping"})
        headers["webhook-signature"] = "garbage"
        with pytest.raises(WebhookVerificationError):
            verify_webhook(body, headers, TEST_WEBHOOK_SECRET)

    @pytest.mark.parametrize("payload", [[{"type": "order.paid"}], "order.paid", 42, None])
    def test_body_must_be_an_object(self, payload):
        body, headers = _signed(payload)
        with pytest.raises(WebhookVerificationError):
            verify_webhook(body, headers, TEST_WEBHOOK_SECRET)

    def test_missing_secret(self):
        body, headers = _signed({"type": "ping"})
        with pytest.raises(WebhookVerificationError):
            verify_webhook(body, headers, "")


def test_signed_array_body_is_rejected(client, db_session):
    body, headers = _signed([{"type": "order.paid", "data": {"id": "ord_1", "metadata": {"userId": "u1"}}}])
    response = client.post(WEBHOOK_URL, content=body, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid signature"}
    assert db_session.query(Transaction).count() == 0


def test_handler_is_synchronous():
    # sync endpoints run in the threadpool, keeping DB work off the event loop
    assert not inspect.iscoroutinefunction(webhooks.polar_webhook)


def test_invalid_signature_writes_nothing(client, db_session):
    body, headers = _signed(_subscription_event())
    headers["webhook-signature"] = "v1,AAAA"
    response = client.post(WEBHOOK_URL, content=body, headers=headers)
    assert response.status_code == 400
    assert db_session.query(DynamicAccess).count() == 0


def test_tampered_body_rejected(client, db_session):
    body, headers = _signed(_subscription_event())
    tampered = body.replace(b'"active"', b'"trialing"')
    response = client.post(WEBHOOK_URL, content=tampered, headers=headers)
    assert response.status_code == 400


def test_missing_user_id_is_acknowledged(client, db_session):
    event = {"type": "subscription.active", "data": {"id": "sub_1", "status": "active", "metadata": {}}}
    body, headers = _signed(event)
    response = client.post(WEBHOOK_URL, content=body, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert db_session.query(DynamicAccess).count() == 0


def test_subscription_event_creates_then_updates_access(client, db_session):
    body, headers = _signed(_subscription_event())
    assert client.post(WEBHOOK_URL, content=body, headers=headers).status_code == 200

    access = db_session.query(DynamicAccess).filter_by(user_id="u1").one()
    assert access.status == "active"
    assert access.subscription_id == "sub_123"
    assert access.provider == "polar"
    assert access.cancel_at_period_end is False
    assert access.current_period_end.year == 2030

    body, headers = _signed(
        _subscription_event("subscription.canceled", status="canceled", cancel_at_period_end=True),
        msg_id="msg_2",
    )
    assert client.post(WEBHOOK_URL, content=body, headers=headers).status_code == 200

    db_session.expire_all()
    access = db_session.query(DynamicAccess).filter_by(user_id="u1").one()
    assert access.status == "canceled"
    assert access.cancel_at_period_end is True
    assert db_session.query(DynamicAccess).count() == 1


def test_canceled_subscription_for_new_user(client, db_session):
    body, headers = _signed(
        _subscription_event("subscription.canceled", status="active", user_id="u9", cancel_at_period_end=True)
    )
    client.post(WEBHOOK_URL, content=body, headers=headers)

    access = db_session.query(DynamicAccess).filter_by(user_id="u9").one()
    assert access.status == "active"
    assert access.cancel_at_period_end is True


def test_replayed_order_paid_records_one_transaction(client, db_session):
    body, headers = _signed(_order_event())
    for _ in range(2):
        response = client.post(WEBHOOK_URL, content=body, headers=headers)
        assert response.status_code == 200

    transactions = db_session.query(Transaction).all()
    assert len(transactions) == 1
    assert transactions[0].invoice_id == "ord_1"
    assert transactions[0].amount == 900
    assert transactions[0].user_id == "u1"


def test_order_paid_without_invoice_id(client, db_session):
    event = _order_event()
    del event["data"]["id"]
    body, headers = _signed(event)
    assert client.post(WEBHOOK_URL, content=body, headers=headers).status_code == 200
    assert db_session.query(Transaction).count() == 0


def test_processing_failure_returns_500(client, db_session, monkeypatch):
    def explode(db, event):
        raise RuntimeError("db down")

    monkeypatch.setattr(webhooks, "process_polar_event", explode)
    body, headers = _signed(_subscription_event())
    response = client.post(WEBHOOK_URL, content=body, headers=headers)
    assert response.status_code == 500
    assert response.json() == {"detail": "Webhook error"}
