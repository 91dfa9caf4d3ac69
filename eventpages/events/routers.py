from fastapi import APIRouter

from .features.create_event.router import router as create_event_router
from .features.dashboard.router import router as dashboard_router
from .features.delete_event.router import router as delete_event_router
from .features.edit_event.router import router as edit_event_router
from .features.guest_list.router import router as guest_list_router
from .features.public_event.router import router as public_event_router
from .features.publish_event.router import router as publish_event_router

router = APIRouter()

router.include_router(dashboard_router)
router.include_router(create_event_router)
router.include_router(edit_event_router)
router.include_router(delete_event_router)
router.include_router(publish_event_router)
router.include_router(guest_list_router)
router.include_router(public_event_router)
