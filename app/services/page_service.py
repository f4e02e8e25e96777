# app/services/page_service.py
# Repositorio de páginas: lectura normalizada + guardado con snapshot previo
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.settings import settings
from app.models.page import Page, PageRevision
from app.schemas.content import ContentShape, NavLink, Section, new_id
from app.schemas.page import PageConfig, PageCreate, PageOut
from app.services.content_normalizer import detect_shape
from app.services.revision_service import (
    create_revision,
    page_from_snapshot,
    prune_revisions,
    snapshot_of,
)

logger = logging.getLogger(__name__)

# intento original + un reintento ante choque de version_idx o alta simultánea
SAVE_ATTEMPTS = 2


class SlugConflictError(ValueError):
    """Otro página ya usa el slug; se rechaza antes de cualquier escritura."""


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_slug(slug: str) -> str:
    s = (slug or "").strip()
    if not s.startswith("/"):
        s = "/" + s
    if len(s) > 1:
        s = s.rstrip("/")
    return s


def placeholder_section() -> Section:
    return Section(id=new_id(), type="text", title="New Section", content="Start writing here.")


# -------- Lectura --------
def to_page_out(row: Page) -> PageOut:
    page = page_from_snapshot(snapshot_of(row), page_id=row.id)
    shape = detect_shape(row.sections, row.content_shape)
    return PageOut(
        **dict(page),
        content_shape=ContentShape.SECTIONS.value if shape is ContentShape.UNKNOWN else shape.value,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def get_page(db: Session, page_id: str) -> Optional[PageOut]:
    try:
        row = db.get(Page, page_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Loading page %s failed", page_id)
        return None
    return to_page_out(row) if row is not None else None


def get_page_by_slug(db: Session, slug: str, *, include_archived: bool = False) -> Optional[PageOut]:
    stmt = select(Page).where(Page.slug == normalize_slug(slug))
    if not include_archived:
        stmt = stmt.where(Page.is_archived.is_(False))
    try:
        row = db.scalar(stmt)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Loading page by slug %s failed", slug)
        return None
    return to_page_out(row) if row is not None else None


def _list(db: Session, *, archived: bool) -> List[PageOut]:
    stmt = (
        select(Page)
        .where(Page.is_archived.is_(archived))
        .order_by(func.coalesce(Page.nav_order, settings.DEFAULT_NAV_ORDER).asc(), Page.title.asc())
    )
    try:
        rows: Sequence[Page] = db.scalars(stmt).all()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Listing pages (archived=%s) failed", archived)
        return []
    return [to_page_out(r) for r in rows]


def list_nav_pages(db: Session) -> List[PageOut]:
    """Páginas no archivadas, por navOrder."""
    return _list(db, archived=False)


def list_archived_pages(db: Session) -> List[PageOut]:
    return _list(db, archived=True)


def get_nav_links(db: Session) -> List[NavLink]:
    """Links de header/footer: visibles en nav, no archivadas; label = navLabel o title."""
    pages = [p for p in list_nav_pages(db) if p.show_in_nav is not False]
    return [
        NavLink(id=p.id, label=p.nav_label if p.nav_label is not None else p.title, path=p.slug, order=i)
        for i, p in enumerate(pages)
    ]


# -------- Escritura --------
def _assert_slug_available(db: Session, *, slug: str, page_id: str) -> None:
    clash = db.scalar(select(Page.id).where(Page.slug == slug, Page.id != page_id))
    if clash is not None:
        raise SlugConflictError(f"Slug '{slug}' is already used by page '{clash}'")


def _apply(row: Page, page: PageConfig, slug: str) -> None:
    row.title = page.title
    row.slug = slug
    row.layout = page.layout
    row.sidebar_width = page.sidebar_width
    # blocks no vacíos ganan: la página fue compuesta en el composer libre
    if page.blocks:
        row.sections = [b.to_json() for b in page.blocks]
        row.content_shape = ContentShape.BLOCKS.value
    else:
        row.sections = [s.to_json() for s in page.sections]
        row.content_shape = ContentShape.SECTIONS.value
    row.sidebar_blocks = [sb.to_json() for sb in page.sidebar_blocks] if page.sidebar_blocks is not None else None
    row.show_in_nav = page.show_in_nav
    row.nav_order = page.nav_order
    row.nav_label = page.nav_label
    row.is_archived = page.is_archived
    row.updated_at = _now_utc()


def _with_unique_ids(page: PageConfig) -> PageConfig:
    """Los ids de sections/blocks son únicos dentro de la página: los repetidos reciben uno nuevo."""
    def _dedupe(items):
        seen: set[str] = set()
        out = []
        for item in items:
            if item.id in seen:
                logger.warning("Duplicate content id %s on page %s, assigning a new one", item.id, page.id)
                item = item.model_copy(update={"id": new_id()})
            seen.add(item.id)
            out.append(item)
        return out

    update = {"sections": _dedupe(page.sections)}
    if page.blocks:
        update["blocks"] = _dedupe(page.blocks)
    return page.model_copy(update=update)


def _load_for_update(db: Session, page_id: str) -> Optional[Page]:
    # FOR UPDATE serializa guardados concurrentes de la misma página (Postgres; SQLite lo ignora)
    stmt = (
        select(Page)
        .where(Page.id == page_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.scalar(stmt)


def save_page(db: Session, page: PageConfig, *, revision_label: Optional[str] = None) -> Optional[PageOut]:
    """
    Upsert de la página con snapshot previo.
    - Slug duplicado -> SlugConflictError, sin snapshot ni escritura.
    - Si la fila existe, su estado ANTES del guardado pasa a PageRevision.
    - Snapshot + upsert se confirman juntos; el recorte de retención va aparte.
    - Guardados concurrentes: last write wins. Si otro guardado tomó el mismo
      version_idx (IntegrityError), se reintenta una vez sobre el estado nuevo.
    - Error de persistencia -> rollback, log y None.
    """
    slug = normalize_slug(page.slug)
    page = _with_unique_ids(page)

    for attempt in range(SAVE_ATTEMPTS):
        try:
            _assert_slug_available(db, slug=slug, page_id=page.id)

            row = _load_for_update(db, page.id)
            if row is not None:
                create_revision(db, row=row, label=revision_label)
            else:
                row = Page(id=page.id, created_at=_now_utc())
                db.add(row)

            _apply(row, page, slug)
            db.commit()
            break
        except IntegrityError:
            db.rollback()
            if attempt + 1 < SAVE_ATTEMPTS:
                logger.warning("Concurrent save on page %s, retrying", page.id)
                continue
            logger.exception("Saving page %s failed", page.id)
            return None
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Saving page %s failed", page.id)
            return None

    prune_revisions(db, page_id=page.id)
    logger.info("Saved page %s (%s)", page.id, slug)
    return to_page_out(row)


def create_page(db: Session, payload: PageCreate) -> Optional[PageOut]:
    """Página nueva con una sección de texto de ejemplo. No genera revisión."""
    page_id = payload.id or new_id()
    existing = db.get(Page, page_id)
    if existing is not None:
        raise ValueError(f"Page '{page_id}' already exists")

    page = PageConfig(
        id=page_id,
        title=payload.title,
        slug=payload.slug,
        layout=payload.layout,
        sidebar_width=payload.sidebar_width,
        sections=[placeholder_section()],
        show_in_nav=payload.show_in_nav,
        nav_order=payload.nav_order if payload.nav_order is not None else settings.DEFAULT_NAV_ORDER,
        nav_label=payload.nav_label,
    )
    return save_page(db, page)


def set_archived(db: Session, page_id: str, archived: bool) -> Optional[PageOut]:
    """Archivar = soft delete (oculta de la nav). Pasa por save_page, así queda en el historial."""
    current = get_page(db, page_id)
    if current is None:
        return None
    page = current.model_copy(update={"is_archived": archived})
    return save_page(db, page)


def delete_page(db: Session, page_id: str) -> bool:
    """Borrado duro; las revisiones de la página se borran con ella."""
    try:
        row = db.get(Page, page_id)
        if row is None:
            return False
        db.execute(delete(PageRevision).where(PageRevision.page_id == page_id))
        db.delete(row)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Deleting page %s failed", page_id)
        return False
    logger.info("Deleted page %s and its revisions", page_id)
    return True
