# app/services/exceptions.py
"""
Domain errors raised by the service layer.
Routes translate them into HTTP responses.
"""


class QRCodeNotFoundError(Exception):
    """Unknown, inactive or not-owned QR code"""


class QRDecryptionError(Exception):
    """Stored QR data could not be decrypted"""


class QRValidationError(ValueError):
    """Invalid input for a QR code"""


class DynamicAccessRequiredError(Exception):
    """Caller lacks the paid entitlement for dynamic QR features"""


class WebhookVerificationError(Exception):
    """Webhook signature or timestamp did not verify"""


class PolarAPIError(Exception):
    """Polar API call failed"""
