# scripts/seed_pages.py
# Páginas iniciales del sitio (home / about / schedule). Idempotente: no pisa páginas existentes.
from __future__ import annotations
from sqlalchemy.orm import Session

from app.db.base import Base
from app.core.logging import configure_logging
from app.db.session import SessionLocal, engine
import app.models.page  # noqa: F401
from app.models.site import SITE_SETTINGS_ID, SiteSettings
from app.schemas.page import PageConfig
from app.services.page_service import get_page, save_page
from app.services.site_service import DEFAULT_SITE_SETTINGS, save_settings

INITIAL_PAGES = [
    {
        "id": "home",
        "title": "Home",
        "slug": "/",
        "layout": "full",
        "sidebarWidth": 25,
        "navOrder": 0,
        "sections": [
            {
                "id": "h1",
                "type": "hero",
                "title": "Making Music Together",
                "content": (
                    "The Westwood Community Band is a non-profit organization dedicated to bringing "
                    "quality music to our local community. We welcome musicians of all skill levels!"
                ),
                "imageUrl": "https://picsum.photos/id/10/1200/600",
            },
            {
                "id": "h2",
                "type": "text",
                "title": "Our Mission",
                "content": (
                    "To provide a welcoming environment for musicians to perform and grow, while "
                    "entertaining the Westwood area with diverse musical performances."
                ),
            },
        ],
    },
    {
        "id": "about",
        "title": "About Us",
        "slug": "/about",
        "layout": "sidebar-right",
        "sidebarWidth": 30,
        "navOrder": 1,
        "sections": [
            {
                "id": "a1",
                "type": "image-text",
                "title": "History of the Band",
                "content": (
                    "Founded in 1985 by a group of passionate local musicians, we have grown from a "
                    "small ensemble to a full community concert band."
                ),
                "imageUrl": "https://picsum.photos/id/103/600/400",
            }
        ],
    },
    {
        "id": "schedule",
        "title": "Schedule",
        "slug": "/schedule",
        "layout": "full",
        "sidebarWidth": 25,
        "navOrder": 2,
        "sections": [
            {
                "id": "s1",
                "type": "schedule",
                "title": "Upcoming Performances",
                "content": "Check out our winter concert series!",
            }
        ],
    },
]


def run(create_tables: bool = True):
    if create_tables:
        # útil en SQLite local; en Postgres usar `alembic upgrade head`
        Base.metadata.create_all(bind=engine)

    db: Session = SessionLocal()
    try:
        for raw in INITIAL_PAGES:
            if get_page(db, raw["id"]) is not None:
                print(f"= Página '{raw['id']}' ya existe, se deja igual")
                continue
            saved = save_page(db, PageConfig.model_validate(raw))
            if saved is None:
                raise RuntimeError(f"No se pudo guardar la página '{raw['id']}'")
            print(f"+ Creada página '{saved.id}' ({saved.slug})")

        if db.get(SiteSettings, SITE_SETTINGS_ID) is None:
            if save_settings(db, DEFAULT_SITE_SETTINGS) is None:
                raise RuntimeError("No se pudieron guardar los settings del sitio")
            print("+ Settings del sitio creados")
        print("[OK] seed de páginas listo")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    run()
