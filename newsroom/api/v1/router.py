from fastapi import APIRouter

from .endpoints import health, storage

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])

# Admin storage tools - orphaned image cleanup, bucket config, uploads
api_router.include_router(storage.router, prefix="/admin/storage", tags=["admin-storage"])
