# app/models/page.py
# Modelos de páginas: Page (contenido JSON polimórfico) y PageRevision (snapshots)
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, func
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

# JSONB en Postgres, JSON genérico en SQLite (tests / local)
JSONType = JSON().with_variant(JSONB(), "postgresql")

PAGE_LAYOUTS = ("full", "sidebar-left", "sidebar-right")


class Page(Base):
    __tablename__ = "pages"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(200))   # ruta pública, e.g. "/about"
    layout: Mapped[str] = mapped_column(String(16), default="full")
    sidebar_width: Mapped[int] = mapped_column(Integer, default=25)

    # Section[] o Block[]; sin tag en filas legacy (ver content_shape)
    sections: Mapped[list[Any]] = mapped_column(JSONType, default=list)
    # "sections" | "blocks"; NULL en filas escritas antes del discriminador
    content_shape: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    sidebar_blocks: Mapped[Optional[list[Any]]] = mapped_column(JSONType, nullable=True)

    show_in_nav: Mapped[Optional[bool]] = mapped_column(Boolean, default=True, nullable=True)
    nav_order: Mapped[Optional[int]] = mapped_column(Integer, default=999, nullable=True)
    nav_label: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    revisions: Mapped[list["PageRevision"]] = relationship(
        "PageRevision",
        back_populates="page",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("slug", name="uq_pages_slug"),
        Index("ix_pages_archived_nav_order", "is_archived", "nav_order"),
    )


class PageRevision(Base):
    __tablename__ = "page_revisions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    page_id: Mapped[str] = mapped_column(ForeignKey("pages.id", ondelete="CASCADE"), index=True)

    # orden total por página, independiente de la resolución del reloj
    version_idx: Mapped[int] = mapped_column(Integer)
    snapshot: Mapped[dict[str, Any]] = mapped_column(JSONType)
    label: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    # = updated_at de la fila ANTES del guardado que generó este snapshot
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    page: Mapped["Page"] = relationship("Page", back_populates="revisions")

    __table_args__ = (
        UniqueConstraint("page_id", "version_idx", name="uq_page_revisions_per_page"),
        Index("ix_page_revisions_page_version", "page_id", "version_idx"),
    )
