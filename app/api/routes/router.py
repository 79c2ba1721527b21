"""Main API router combining all /api endpoints"""
from fastapi import APIRouter

from app.api.routes import qr_codes, billing, webhooks

api_router = APIRouter()

# Include all routers
api_router.include_router(qr_codes.router, prefix="/qr", tags=["QR Codes"])
api_router.include_router(billing.router, tags=["Billing"])
api_router.include_router(webhooks.router, prefix="/webhook", tags=["Webhooks"])
