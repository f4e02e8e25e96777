# app/services/content_migrations.py
# Migraciones de contenido legacy (sobre el JSON crudo de pages.sections)
from __future__ import annotations

from typing import Any, List, Tuple

LEGACY_MEDIA_HUB = "media-hub"
MEDIA_TAB_GROUP = "media"


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def expand_media_hub_section(media_hub: dict) -> List[dict]:
    """
    Reemplaza una sección `media-hub` por tres secciones agrupadas en tabs,
    en el mismo orden: Photos (gallery), Recordings (audio-playlist), Videos (video-gallery).
    """
    base_id = str(media_hub.get("id") or "media")
    return [
        {
            "id": f"{base_id}-photos",
            "type": "gallery",
            "title": "Photos",
            "content": "",
            "tabGroup": MEDIA_TAB_GROUP,
            "tabLabel": "Photos",
            "galleryEvents": _list(media_hub.get("mediaPhotos")),
        },
        {
            "id": f"{base_id}-recordings",
            "type": "audio-playlist",
            "title": "Recordings",
            "content": "",
            "tabGroup": MEDIA_TAB_GROUP,
            "tabLabel": "Recordings",
            "audioItems": _list(media_hub.get("mediaRecordings")),
        },
        {
            "id": f"{base_id}-videos",
            "type": "video-gallery",
            "title": "Videos",
            "content": "",
            "tabGroup": MEDIA_TAB_GROUP,
            "tabLabel": "Videos",
            "videoItems": _list(media_hub.get("mediaVideos")),
        },
    ]


def migrate_media_hub_sections(sections: Any) -> Tuple[List[Any], int]:
    """Devuelve (secciones nuevas, cantidad de media-hub reemplazadas). El resto queda igual."""
    out: List[Any] = []
    replaced = 0
    for section in _list(sections):
        if isinstance(section, dict) and section.get("type") == LEGACY_MEDIA_HUB:
            out.extend(expand_media_hub_section(section))
            replaced += 1
        else:
            out.append(section)
    return out, replaced
