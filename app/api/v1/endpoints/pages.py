# =============================================================================
# Page Endpoints (listado, CRUD, archivo, vistas render/builder, historial)
# app/api/v1/endpoints/pages.py
# =============================================================================
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.content import NavLink
from app.schemas.page import (
    PageConfig,
    PageCreate,
    PageOut,
    PageSave,
    RenderOut,
    RevisionSummary,
)
from app.services.content_normalizer import normalize_blocks
from app.services.page_service import (
    SlugConflictError,
    create_page,
    delete_page,
    get_nav_links,
    get_page,
    get_page_by_slug,
    list_archived_pages,
    list_nav_pages,
    save_page,
    set_archived,
)
from app.services.revision_service import list_revisions
from app.services.tab_groups import consolidate_tab_groups
from app.utils.payload_guard import enforce_page_content_size

router = APIRouter()


def _get_page_or_404(db: Session, page_id: str) -> PageOut:
    page = get_page(db, page_id)
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return page


def _render(page: PageConfig) -> RenderOut:
    units = consolidate_tab_groups(page.sections)
    return RenderOut(
        page_id=page.id,
        slug=page.slug,
        title=page.title,
        layout=page.layout,
        sidebar_width=page.sidebar_width,
        units=[u.to_dict() for u in units],
        sidebar_blocks=page.sidebar_blocks,
    )


# ============================================================================ #
# Listados (rutas fijas antes de /{page_id})
# ============================================================================ #
@router.get("", response_model=List[PageOut], response_model_exclude_none=True)
def list_pages_endpoint(db: Session = Depends(get_db)):
    return list_nav_pages(db)


@router.get("/archived", response_model=List[PageOut], response_model_exclude_none=True)
def list_archived_endpoint(db: Session = Depends(get_db)):
    return list_archived_pages(db)


@router.get("/nav", response_model=List[NavLink])
def nav_links_endpoint(db: Session = Depends(get_db)):
    return get_nav_links(db)


@router.get("/by-slug", response_model=RenderOut, response_model_exclude_none=True)
def page_by_slug_endpoint(slug: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    # lectura pública: páginas archivadas no se sirven
    page = get_page_by_slug(db, slug)
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return _render(page)


# ============================================================================ #
# CRUD
# ============================================================================ #
@router.post("", response_model=PageOut, status_code=201, response_model_exclude_none=True)
def create_page_endpoint(payload: PageCreate, db: Session = Depends(get_db)):
    try:
        page = create_page(db, payload)
    except ValueError as e:
        # SlugConflictError o id duplicado
        raise HTTPException(status_code=409, detail=str(e))
    if page is None:
        raise HTTPException(status_code=503, detail="Save failed")
    return page


@router.get("/{page_id}", response_model=PageOut, response_model_exclude_none=True)
def get_page_endpoint(page_id: str, db: Session = Depends(get_db)):
    return _get_page_or_404(db, page_id)


@router.put("/{page_id}", response_model=PageOut, response_model_exclude_none=True)
def save_page_endpoint(page_id: str, payload: PageSave, db: Session = Depends(get_db)):
    """
    Guardado completo: snapshot del estado anterior + upsert.
    Si `blocks` viene no vacío, gana sobre `sections`.
    """
    if payload.id is not None and payload.id != page_id:
        raise HTTPException(status_code=400, detail="Body id does not match path id")

    enforce_page_content_size(
        payload.model_dump(mode="json", by_alias=True, include={"sections", "blocks", "sidebar_blocks"})
    )

    page = PageConfig(**{**dict(payload), "id": page_id})
    try:
        saved = save_page(db, page)
    except SlugConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if saved is None:
        raise HTTPException(status_code=503, detail="Save failed")
    return saved


@router.delete("/{page_id}", status_code=204)
def delete_page_endpoint(page_id: str, db: Session = Depends(get_db)):
    _get_page_or_404(db, page_id)
    if not delete_page(db, page_id):
        raise HTTPException(status_code=503, detail="Delete failed")
    return Response(status_code=204)


# ============================================================================ #
# Archivo (soft delete)
# ============================================================================ #
def _set_archived_or_fail(db: Session, page_id: str, archived: bool) -> PageOut:
    _get_page_or_404(db, page_id)
    try:
        page = set_archived(db, page_id, archived)
    except SlugConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if page is None:
        raise HTTPException(status_code=503, detail="Save failed")
    return page


@router.post("/{page_id}/archive", response_model=PageOut, response_model_exclude_none=True)
def archive_page_endpoint(page_id: str, db: Session = Depends(get_db)):
    return _set_archived_or_fail(db, page_id, True)


@router.post("/{page_id}/unarchive", response_model=PageOut, response_model_exclude_none=True)
def unarchive_page_endpoint(page_id: str, db: Session = Depends(get_db)):
    return _set_archived_or_fail(db, page_id, False)


# ============================================================================ #
# Vistas
# ============================================================================ #
@router.get("/{page_id}/render", response_model=RenderOut, response_model_exclude_none=True)
def render_page_endpoint(page_id: str, db: Session = Depends(get_db)):
    return _render(_get_page_or_404(db, page_id))


@router.get("/{page_id}/builder")
def builder_view_endpoint(page_id: str, db: Session = Depends(get_db)):
    """Vista Block[] para el composer libre; páginas semánticas pasan por el fallback."""
    page = _get_page_or_404(db, page_id)
    if page.blocks is not None:
        blocks = page.blocks
    else:
        blocks = normalize_blocks([s.to_json() for s in page.sections])
    return {"pageId": page.id, "blocks": [b.to_json() for b in blocks]}


@router.get("/{page_id}/revisions", response_model=List[RevisionSummary])
def list_page_revisions_endpoint(page_id: str, db: Session = Depends(get_db)):
    _get_page_or_404(db, page_id)
    return list_revisions(db, page_id=page_id)
