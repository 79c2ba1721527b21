# app/api/public.py
"""
Public scan endpoints. No authentication: these are what printed QR codes hit.
"""
import html
import logging
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, HTMLResponse, PlainTextResponse
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.exceptions import QRCodeNotFoundError, QRDecryptionError
from app.services.redirect_service import ScanMeta, resolve_short_id

router = APIRouter(tags=["Scan"])
log = logging.getLogger("qrforge.scan")

# Target edits must apply on the very next scan
NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "Surrogate-Control": "no-store",
}


def _error_page(title: str, message: str, status_code: int) -> HTMLResponse:
    body = (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{html.escape(title)}</title></head><body>"
        f"<h1>{html.escape(title)}</h1><p>{html.escape(message)}</p>"
        "<a href=\"/\">Go to QR Generator</a></body></html>"
    )
    return HTMLResponse(body, status_code=status_code, headers=NO_CACHE_HEADERS)


@router.get("/qr/{short_id}")
def scan_qr(short_id: str, request: Request, db: Session = Depends(get_db)):
    """
    Resolve a scanned code.

    - Unknown or inactive: 404
    - Dynamic: redirect to the target, never cached
    - Static: ``{"content": ...}``
    """
    try:
        resolution = resolve_short_id(db, short_id, ScanMeta.from_headers(request.headers))
    except QRCodeNotFoundError:
        return JSONResponse({"detail": "QR Code not found"}, status_code=404)
    except QRDecryptionError:
        return JSONResponse({"detail": "Error processing QR code"}, status_code=500)
    except Exception as e:
        log.error(f"❌ Error processing QR scan {short_id}: {e}")
        return JSONResponse({"detail": "Internal server error"}, status_code=500)

    if resolution.is_redirect:
        return RedirectResponse(
            resolution.value,
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
            headers=NO_CACHE_HEADERS
        )
    return JSONResponse({"content": resolution.value}, headers=NO_CACHE_HEADERS)


@router.get("/r/{short_code}")
def legacy_redirect(short_code: str, request: Request, db: Session = Depends(get_db)):
    """Legacy short links: server-side redirect, plain text for static codes."""
    try:
        resolution = resolve_short_id(db, short_code, ScanMeta.from_headers(request.headers))
    except QRCodeNotFoundError:
        return _error_page(
            "QR Code Not Found",
            "The QR code you're looking for doesn't exist or has been removed.",
            404
        )
    except Exception as e:
        log.error(f"❌ Redirect error for {short_code}: {e}")
        return _error_page(
            "Error Processing Request",
            "An error occurred while processing the QR code redirect.",
            500
        )

    if resolution.is_redirect:
        return RedirectResponse(resolution.value, status_code=status.HTTP_307_TEMPORARY_REDIRECT, headers=NO_CACHE_HEADERS)
    return PlainTextResponse(resolution.value, headers=NO_CACHE_HEADERS)


@router.get("/api/redirect/{short_code}")
def client_redirect(short_code: str, request: Request, db: Session = Depends(get_db)):
    """Resolve for a client-side redirect; returns the destination instead of redirecting."""
    try:
        resolution = resolve_short_id(db, short_code, ScanMeta.from_headers(request.headers))
    except QRCodeNotFoundError:
        return JSONResponse({"detail": "QR code not found"}, status_code=404)
    except QRDecryptionError:
        return JSONResponse({"detail": "Error processing QR code"}, status_code=500)
    except Exception as e:
        log.error(f"❌ Redirect error for {short_code}: {e}")
        return JSONResponse({"detail": "Internal server error"}, status_code=500)

    return JSONResponse({
        "destinationUrl": resolution.value if resolution.is_redirect else None,
        "content": None if resolution.is_redirect else resolution.value,
        "title": resolution.title,
        "shortCode": resolution.short_id,
    }, headers=NO_CACHE_HEADERS)
