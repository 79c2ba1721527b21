# app/main.py
"""
FastAPI application for QRForge.

Public scan routes live at the root (/qr, /r); the authenticated API and the
Polar webhook live under /api.
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import APP_NAME, APP_URL, LOG_LEVEL, LOG_TO_FILES
from app.core.logging_config import setup_logging
from app.db.session import init_db, test_db_connection
from app.api.public import router as public_router
from app.api.routes.router import api_router

setup_logging(APP_NAME, LOG_LEVEL, log_to_files=LOG_TO_FILES)

log = logging.getLogger("qrforge")
log.info("="*80)
log.info("🚀 Application starting")
log.info("="*80)

# Initialize database
try:
    init_db()
    if test_db_connection():
        log.info("✅ Database initialized")
except Exception as e:
    log.error(f"❌ Database error: {e}")

# FastAPI app
app = FastAPI(
    title="QRForge - QR Code API",
    description="Static and dynamic QR codes with scan analytics",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# ────────────────────────────────────────────
# CORS Configuration
# ────────────────────────────────────────────
ALLOWED_ORIGINS = [
    APP_URL,
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)

# ────────────────────────────────────────────
# Routers
# ────────────────────────────────────────────
app.include_router(public_router)
app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["Meta"])
def health():
    """Liveness probe"""
    return {"ok": True}
