# app/services/site_service.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.site import SITE_SETTINGS_ID, SiteSettings
from app.schemas.site import SiteSettingsIn, SiteSettingsOut
from app.services.page_service import get_nav_links

logger = logging.getLogger(__name__)

# valores cuando todavía no hay fila guardada
DEFAULT_SITE_SETTINGS = SiteSettingsIn(
    band_name="Westwood Community Band",
    logo_url="https://picsum.photos/id/1025/200/200",
    primary_color="#1e3a8a",
    secondary_color="#dc2626",
    footer_text="© 2024 Westwood Community Band. Supporting local music since 1985.",
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _load(db: Session) -> Optional[SiteSettings]:
    try:
        return db.get(SiteSettings, SITE_SETTINGS_ID)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Loading site settings failed")
        return None


def get_settings(db: Session) -> SiteSettingsOut:
    """
    Settings vigentes. Sin fila (o si la lectura falla) se devuelven los
    defaults; navLinks siempre sale de las páginas actuales.
    """
    row = _load(db)
    if row is None:
        return SiteSettingsOut(**dict(DEFAULT_SITE_SETTINGS), nav_links=get_nav_links(db))
    return SiteSettingsOut(
        band_name=row.band_name,
        logo_url=row.logo_url,
        primary_color=row.primary_color,
        secondary_color=row.secondary_color,
        footer_text=row.footer_text,
        nav_links=get_nav_links(db),
        updated_at=row.updated_at,
    )


def save_settings(db: Session, payload: SiteSettingsIn) -> Optional[SiteSettingsOut]:
    """Upsert de la fila única. Error de persistencia -> rollback, log y None."""
    try:
        row = db.get(SiteSettings, SITE_SETTINGS_ID)
        if row is None:
            row = SiteSettings(id=SITE_SETTINGS_ID)
            db.add(row)
        row.band_name = payload.band_name
        row.logo_url = payload.logo_url
        row.primary_color = payload.primary_color
        row.secondary_color = payload.secondary_color
        row.footer_text = payload.footer_text
        row.updated_at = _now_utc()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Saving site settings failed")
        return None

    logger.info("Saved site settings (%s)", payload.band_name)
    return get_settings(db)
