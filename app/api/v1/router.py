from fastapi import APIRouter

from modules.notifications.api import (
    channels_router,
    notifications_router,
    preferences_router,
    templates_router,
)

router = APIRouter()
router.include_router(notifications_router)
router.include_router(templates_router)
router.include_router(preferences_router)
router.include_router(channels_router)
