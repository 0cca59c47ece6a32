from fastapi import APIRouter

from pda.api.routes.auth import router as auth_router
from pda.api.routes.friend_requests import router as friend_requests_router
from pda.api.routes.health import router as health_router
from pda.api.routes.messages import router as messages_router
from pda.api.routes.notes import router as notes_router
from pda.api.routes.users import router as users_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(users_router, prefix="/users", tags=["users"])
router.include_router(messages_router, prefix="/messages", tags=["messages"])
router.include_router(notes_router, prefix="/notes", tags=["notes"])
router.include_router(friend_requests_router, prefix="/friend-requests", tags=["friend-requests"])
