# app/services/qr_format.py
"""
Formats a logical QR payload into the literal string encoded in the symbol.
Output must stay readable by standard phone scanner apps.
"""
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

from app.schemas.qr_code import QRType, AdditionalData

# Characters encodeURIComponent leaves untouched besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _encode(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def format_qr_data(
    qr_type: Union[QRType, str],
    data: str,
    additional_data: Optional[Union[AdditionalData, Dict[str, Any]]] = None
) -> str:
    """
    Build the encoded payload for ``qr_type``.

    Examples:
        url   example.com            -> https://example.com
        wifi  MyNet (WPA / secret)   -> WIFI:T:WPA;S:MyNet;P:secret;H:false;;
        sms   +123 (hi there)        -> sms:+123?body=hi%20there
    """
    qr_type = QRType(qr_type)
    if isinstance(additional_data, dict):
        additional_data = AdditionalData.model_validate(additional_data)
    extra = additional_data or AdditionalData()

    if qr_type is QRType.URL:
        return data if data.startswith("http") else f"https://{data}"

    if qr_type is QRType.WIFI:
        return f"WIFI:T:{extra.security or ''};S:{data};P:{extra.password or ''};H:false;;"

    if qr_type is QRType.EMAIL:
        params = []
        if extra.subject:
            params.append(f"subject={_encode(extra.subject)}")
        if extra.body:
            params.append(f"body={_encode(extra.body)}")
        email = f"mailto:{data}"
        if params:
            email += "?" + "&".join(params)
        return email

    if qr_type is QRType.PHONE:
        return f"tel:{data}"

    if qr_type is QRType.SMS:
        if extra.message:
            return f"sms:{data}?body={_encode(extra.message)}"
        return f"sms:{data}"

    if qr_type is QRType.TEXT:
        return data

    raise ValueError(f"Unsupported QR type: {qr_type}")
