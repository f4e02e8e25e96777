# app/api/v1/router.py
from fastapi import APIRouter

from .endpoints import health, pages, revisions, site_settings

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(pages.router, prefix="/pages", tags=["pages"])
api_router.include_router(revisions.router, prefix="/revisions", tags=["revisions"])
api_router.include_router(site_settings.router, prefix="/settings", tags=["settings"])
