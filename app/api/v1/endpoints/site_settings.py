# =============================================================================
# Site Settings Endpoints (identidad global del sitio)
# app/api/v1/endpoints/site_settings.py
# =============================================================================
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.site import SiteSettingsIn, SiteSettingsOut
from app.services.site_service import get_settings, save_settings

router = APIRouter()


@router.get("", response_model=SiteSettingsOut, response_model_exclude_none=True)
def get_settings_endpoint(db: Session = Depends(get_db)):
    return get_settings(db)


@router.put("", response_model=SiteSettingsOut, response_model_exclude_none=True)
def save_settings_endpoint(payload: SiteSettingsIn, db: Session = Depends(get_db)):
    saved = save_settings(db, payload)
    if saved is None:
        raise HTTPException(status_code=503, detail="Save failed")
    return saved
