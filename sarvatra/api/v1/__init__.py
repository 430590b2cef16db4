"""API v1 routes."""

from fastapi import APIRouter

from sarvatra.api.v1 import admin, ai, auth, commands, health, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, tags=["users"])
router.include_router(commands.router, prefix="/commands", tags=["commands"])
router.include_router(ai.router, prefix="/ai", tags=["ai"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
