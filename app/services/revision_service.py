# app/services/revision_service.py
from __future__ import annotations

import copy
import hashlib
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Mapping, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.settings import settings
from app.models.page import PAGE_LAYOUTS, Page, PageRevision
from app.schemas.page import PageConfig, RevisionOut, RevisionSummary
from app.services.content_normalizer import normalize

logger = logging.getLogger(__name__)

# Campos (en orden fijo) que definen "el mismo contenido"; nunca timestamps.
FINGERPRINT_FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "slug",
    "layout",
    "sidebarWidth",
    "sections",
    "sidebarBlocks",
    "showInNav",
    "navOrder",
    "navLabel",
    "isArchived",
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------------
# Snapshot <-> Page
# -----------------------------
def snapshot_of(row: Page) -> dict[str, Any]:
    """Copia completa de los campos persistidos de la fila (no un diff)."""
    return {
        "id": row.id,
        "title": row.title,
        "slug": row.slug,
        "layout": row.layout,
        "sidebarWidth": row.sidebar_width,
        "sections": copy.deepcopy(row.sections if row.sections is not None else []),
        "sidebarBlocks": copy.deepcopy(row.sidebar_blocks),
        "showInNav": row.show_in_nav,
        "navOrder": row.nav_order,
        "navLabel": row.nav_label,
        "isArchived": row.is_archived,
        "contentShape": row.content_shape,
    }


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


def _int_or(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return int(value)


def _bool_or(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def page_from_snapshot(snapshot: Mapping[str, Any] | None, *, page_id: str) -> PageConfig:
    """
    Reconstruye una PageConfig completa desde un snapshot (o desde snapshot_of(row)).
    Campos ausentes en snapshots viejos toman el default actual del esquema.
    """
    snap = snapshot if isinstance(snapshot, Mapping) else {}
    content = normalize(snap.get("sections"), snap.get("contentShape"))

    layout = snap.get("layout")
    sidebar_blocks = snap.get("sidebarBlocks")
    nav_label = snap.get("navLabel")

    return PageConfig(
        id=_str_or(snap.get("id"), page_id),
        title=snap.get("title") if isinstance(snap.get("title"), str) else "",
        slug=_str_or(snap.get("slug"), f"/{page_id}"),
        layout=layout if layout in PAGE_LAYOUTS else "full",
        sidebar_width=max(0, min(100, _int_or(snap.get("sidebarWidth"), settings.DEFAULT_SIDEBAR_WIDTH))),
        sections=content.sections,
        blocks=content.blocks,
        sidebar_blocks=(
            [sb for sb in sidebar_blocks if isinstance(sb, dict)]
            if isinstance(sidebar_blocks, list) else None
        ),
        show_in_nav=_bool_or(snap.get("showInNav"), True),
        nav_order=_int_or(snap.get("navOrder"), settings.DEFAULT_NAV_ORDER),
        nav_label=nav_label if isinstance(nav_label, str) else None,
        is_archived=_bool_or(snap.get("isArchived"), False),
    )


# -----------------------------
# Fingerprint (vista, no persistido)
# -----------------------------
def _strip_nulls(value: Any) -> Any:
    # undefined y null cuentan como iguales a cualquier profundidad
    if isinstance(value, dict):
        return {k: _strip_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_strip_nulls(v) for v in value]
    return value


def fingerprint(snapshot: Mapping[str, Any] | None) -> str:
    snap = snapshot if isinstance(snapshot, Mapping) else {}
    ordered = [[name, _strip_nulls(snap.get(name))] for name in FINGERPRINT_FIELDS]
    raw = json.dumps(ordered, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def is_same_content(a: Mapping[str, Any] | None, b: Mapping[str, Any] | None) -> bool:
    return fingerprint(a) == fingerprint(b)


# -----------------------------
# Escritura
# -----------------------------
def _next_version_idx(db: Session, page_id: str) -> int:
    """
    Calcula el siguiente índice de versión (version_idx) para una página.
    """
    max_idx = db.scalar(
        select(func.max(PageRevision.version_idx)).where(PageRevision.page_id == page_id)
    )
    return 1 if max_idx is None else int(max_idx) + 1


def create_revision(
    db: Session,
    *,
    row: Page,
    label: Optional[str] = None,
) -> PageRevision:
    """
    Snapshot del estado ANTES del guardado.
    - Llamar antes de aplicar cambios a `row`.
    - No hace commit; el caller (save_page) hace commit junto con el upsert.
    """
    rev = PageRevision(
        id=str(uuid.uuid4()),
        page_id=row.id,
        version_idx=_next_version_idx(db, row.id),
        snapshot=snapshot_of(row),
        label=label,
        created_at=row.updated_at or _now_utc(),
    )
    db.add(rev)
    return rev


def prune_revisions(db: Session, *, page_id: str, keep: Optional[int] = None) -> int:
    """
    Deja sólo las `keep` revisiones más recientes. Corre inline después de
    cada snapshot; si falla se registra y el guardado ya hecho se mantiene.
    """
    keep = keep if keep is not None else settings.REVISION_RETENTION
    try:
        stale_ids = list(
            db.scalars(
                select(PageRevision.id)
                .where(PageRevision.page_id == page_id)
                .order_by(PageRevision.version_idx.desc())
                .offset(keep)
            )
        )
        if not stale_ids:
            return 0
        db.execute(delete(PageRevision).where(PageRevision.id.in_(stale_ids)))
        db.commit()
        return len(stale_ids)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Revision pruning failed for page %s", page_id)
        return 0


# -----------------------------
# Lectura
# -----------------------------
def _summary(rev: PageRevision, *, is_current: bool = False) -> dict[str, Any]:
    snap = rev.snapshot if isinstance(rev.snapshot, dict) else {}
    return {
        "id": rev.id,
        "page_id": rev.page_id,
        "version_idx": rev.version_idx,
        "created_at": rev.created_at,
        "label": rev.label,
        "title": snap.get("title") if isinstance(snap.get("title"), str) else "",
        "slug": snap.get("slug") if isinstance(snap.get("slug"), str) else "",
        "is_current": is_current,
    }


def list_revisions(db: Session, *, page_id: str) -> List[RevisionSummary]:
    """
    Revisiones de la página, más reciente primero. La primera cuyo fingerprint
    coincide con la fila viva se marca `is_current` (como máximo una).
    """
    try:
        row = db.get(Page, page_id)
        revisions = list(
            db.scalars(
                select(PageRevision)
                .where(PageRevision.page_id == page_id)
                .order_by(PageRevision.version_idx.desc())
            )
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Listing revisions failed for page %s", page_id)
        return []

    current = fingerprint(snapshot_of(row)) if row is not None else None
    out: List[RevisionSummary] = []
    flagged = False
    for rev in revisions:
        is_current = False
        if not flagged and current is not None and fingerprint(rev.snapshot) == current:
            is_current = flagged = True
        out.append(RevisionSummary(**_summary(rev, is_current=is_current)))
    return out


def get_revision(db: Session, *, revision_id: str) -> Optional[RevisionOut]:
    try:
        rev = db.get(PageRevision, revision_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Fetching revision %s failed", revision_id)
        return None
    if rev is None:
        return None
    page = page_from_snapshot(rev.snapshot, page_id=rev.page_id)
    return RevisionOut(**_summary(rev), page=page)


# -----------------------------
# Restore
# -----------------------------
class RestoreStatus(str, Enum):
    RESTORED = "restored"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass
class RestoreResult:
    status: RestoreStatus
    page: Optional[PageConfig] = None

    @property
    def ok(self) -> bool:
        return self.status is RestoreStatus.RESTORED


def restore_revision(db: Session, *, revision_id: str) -> RestoreResult:
    """
    Restaura un snapshot como un guardado normal: save_page snapshotea primero
    el estado actual, así que restaurar siempre se puede deshacer.
    """
    from app.services.page_service import SlugConflictError, save_page  # import tardío (ciclo)

    try:
        rev = db.get(PageRevision, revision_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Fetching revision %s for restore failed", revision_id)
        return RestoreResult(RestoreStatus.FAILED)
    if rev is None:
        return RestoreResult(RestoreStatus.NOT_FOUND)

    # la página dueña manda sobre el id guardado dentro del snapshot
    page = page_from_snapshot(rev.snapshot, page_id=rev.page_id).model_copy(update={"id": rev.page_id})
    try:
        saved = save_page(db, page, revision_label=f"before restore of v{rev.version_idx}")
    except SlugConflictError as e:
        logger.warning("Restore of revision %s rejected: %s", revision_id, e)
        return RestoreResult(RestoreStatus.CONFLICT)
    if saved is None:
        return RestoreResult(RestoreStatus.FAILED)
    return RestoreResult(RestoreStatus.RESTORED, saved)
