# app/schemas/site.py
# Pydantic: request/response de la configuración global del sitio
from __future__ import annotations
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.content import NavLink
from app.schemas.page import CamelModel


class SiteSettingsIn(CamelModel):
    band_name: str = Field(..., min_length=1, max_length=200)
    logo_url: str = Field("", max_length=500)
    primary_color: str = Field(..., min_length=1, max_length=32)
    secondary_color: str = Field(..., min_length=1, max_length=32)
    footer_text: str = ""


class SiteSettingsOut(SiteSettingsIn):
    """Settings + links de navegación derivados de las páginas (no se guardan)."""
    nav_links: List[NavLink] = Field(default_factory=list)
    updated_at: Optional[datetime] = None
