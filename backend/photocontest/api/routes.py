from __future__ import annotations

from fastapi import APIRouter

from photocontest.api.routes_competitions import router as competitions_router
from photocontest.api.routes_moderation import router as moderation_router
from photocontest.api.routes_photos import router as photos_router
from photocontest.api.routes_voting import router as voting_router

router = APIRouter(prefix='/api', tags=['api'])
router.include_router(competitions_router)
router.include_router(photos_router)
router.include_router(voting_router)
router.include_router(moderation_router)
