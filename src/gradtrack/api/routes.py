from __future__ import annotations

from fastapi import APIRouter

from gradtrack.api import applications, chat, preparation, research

router = APIRouter(prefix="/api", tags=["api"])
router.include_router(applications.router)
router.include_router(preparation.router)
router.include_router(research.router)
router.include_router(chat.router)
