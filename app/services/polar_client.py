# app/services/polar_client.py
"""
Minimal Polar API client (checkouts and subscription cancellation).
"""
from typing import Any, Dict

import httpx

from app.core.config import settings
from app.core.logging_config import get_billing_logger
from app.services.exceptions import PolarAPIError

log = get_billing_logger()


class PolarClient:
    """Wraps the Polar REST endpoints used by the billing routes"""

    def __init__(self, access_token: str = None, base_url: str = None, timeout: float = None):
        self.access_token = access_token if access_token is not None else settings.POLAR_ACCESS_TOKEN
        self.base_url = (base_url or settings.POLAR_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.POLAR_TIMEOUT

    def _request(self, method: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.access_token:
            raise PolarAPIError("POLAR_ACCESS_TOKEN not configured")

        url = f"{self.base_url}{path}"
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }
        log.debug(f"🌐 POLAR REQUEST: {method} {url}")
        try:
            response = httpx.request(method, url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.error(f"❌ Polar {method} {path} failed: {e.response.status_code} {e.response.text}")
            raise PolarAPIError(f"Polar returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            log.error(f"❌ Polar {method} {path} failed: {e}")
            raise PolarAPIError(str(e)) from e
        return response.json()

    def create_checkout(self, user_id: str) -> str:
        """Create a checkout session tied to ``user_id`` and return its URL."""
        session = self._request("POST", "/checkouts/", {
            "products": [settings.POLAR_PRODUCT_ID],
            "external_customer_id": user_id,
            "metadata": {"userId": user_id},
            "success_url": f"{settings.APP_URL}/billing/success?checkout_id={{CHECKOUT_ID}}",
        })
        url = session.get("url")
        if not url:
            raise PolarAPIError("Checkout session has no URL")
        log.info(f"Checkout session created for {user_id}")
        return url

    def cancel_subscription(self, subscription_id: str) -> Dict[str, Any]:
        """Flag the subscription to end at the current period end."""
        result = self._request("PATCH", f"/subscriptions/{subscription_id}", {
            "cancel_at_period_end": True,
        })
        log.info(f"Subscription {subscription_id} set to cancel at period end")
        return result


def get_polar_client() -> PolarClient:
    """FastAPI dependency"""
    return PolarClient()
