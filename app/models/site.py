# app/models/site.py
# Identidad del sitio: una sola fila (id=1) con nombre, logo, colores y footer
from __future__ import annotations
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base

SITE_SETTINGS_ID = 1


class SiteSettings(Base):
    __tablename__ = "site_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SITE_SETTINGS_ID)
    band_name: Mapped[str] = mapped_column(String(200), default="Westwood Community Band")
    logo_url: Mapped[str] = mapped_column(String(500), default="")
    primary_color: Mapped[str] = mapped_column(String(32), default="#1e3a8a")
    secondary_color: Mapped[str] = mapped_column(String(32), default="#dc2626")
    footer_text: Mapped[str] = mapped_column(Text, default="")

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
