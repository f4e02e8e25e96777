# scripts/migrate_media_hub_to_tabs.py
# Migración única: cada sección legacy `media-hub` pasa a tres secciones en tabs
# (gallery / audio-playlist / video-gallery, tabGroup 'media'). El resto queda igual.
# Cada página tocada pasa por save_page, así el estado previo queda en el historial.
from __future__ import annotations
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.models.page import Page
from app.schemas.content import Section
from app.services.content_migrations import migrate_media_hub_sections
from app.services.page_service import SlugConflictError, get_page, save_page


def run() -> int:
    db: Session = SessionLocal()
    total = 0
    try:
        rows = db.scalars(select(Page).order_by(Page.id)).all()
        if not rows:
            print("No hay páginas. Nada que migrar.")
            return 0

        for row in rows:
            new_sections, replaced = migrate_media_hub_sections(row.sections)
            if not replaced:
                continue
            page = get_page(db, row.id)
            if page is None:
                continue
            page = page.model_copy(update={
                "sections": [Section.model_validate(s) for s in new_sections if isinstance(s, dict)],
                "blocks": None,
            })
            try:
                saved = save_page(db, page, revision_label="before media-hub migration")
            except SlugConflictError as e:
                print(f"! Página {row.id} omitida: {e}")
                continue
            if saved is None:
                raise RuntimeError(f"No se pudo guardar la página '{row.id}'")
            total += replaced
            print(f"~ Actualizada {row.slug or row.id}: {replaced} media-hub -> tabs")

        if total == 0:
            print("No se encontraron secciones media-hub. Nada que migrar.")
        else:
            print(f"[OK] {total} sección(es) media-hub reemplazadas.")
        return total
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    run()
