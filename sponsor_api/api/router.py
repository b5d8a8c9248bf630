from __future__ import annotations

from fastapi import APIRouter

from sponsor_api.api.confirmed_sponsorships_api import router as confirmed_sponsorships_router
from sponsor_api.api.meta_api import router as meta_router
from sponsor_api.api.newsletters_api import router as newsletters_router
from sponsor_api.api.public_api import router as public_router
from sponsor_api.api.sponsorships_api import router as sponsorships_router

router = APIRouter()

# Include sub-routers
router.include_router(meta_router, tags=["meta"])
router.include_router(newsletters_router, prefix="/newsletters", tags=["newsletters"])
router.include_router(public_router, prefix="/sponsor", tags=["public"])
router.include_router(sponsorships_router, prefix="/sponsorships", tags=["sponsorships"])
router.include_router(
    confirmed_sponsorships_router,
    prefix="/confirmed_sponsorships",
    tags=["confirmed sponsorships"],
)
