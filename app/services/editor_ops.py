# app/services/editor_ops.py
# Operaciones puras del editor sobre listas en memoria (sections, blocks,
# sidebar blocks). Nunca persisten: el resultado se guarda con save_page.
from __future__ import annotations

import copy
import re
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from app.schemas.content import (
    BlockBase,
    ContentModel,
    GalleryEvent,
    Section,
    SidebarBlock,
    new_id,
    parse_block,
)

T = TypeVar("T")


def _item_id(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        return item.get("id")
    return getattr(item, "id", None)


def index_of(items: Sequence[Any], item_id: str) -> int:
    for i, item in enumerate(items):
        if _item_id(item) == item_id:
            return i
    return -1


# -------- Listas --------
def insert_item(items: Sequence[T], item: T, index: Optional[int] = None) -> List[T]:
    """Inserta en `index` (recortado al rango); sin índice, al final."""
    out = list(items)
    if index is None:
        out.append(item)
    else:
        out.insert(max(0, min(index, len(out))), item)
    return out


def _by_field_name(model_cls: type, updates: Dict[str, Any]) -> Dict[str, Any]:
    # acepta claves camelCase (alias) o snake_case; todo se lleva al nombre del campo
    names = {f.alias: name for name, f in model_cls.model_fields.items() if f.alias}
    return {names.get(k, k): v for k, v in updates.items()}


def update_item(items: Sequence[T], item_id: str, updates: Dict[str, Any]) -> List[T]:
    """Merge superficial de `updates` sobre el item con ese id; el id no cambia."""
    out: List[T] = []
    for item in items:
        if _item_id(item) != item_id:
            out.append(item)
        elif isinstance(item, dict):
            changes = {k: v for k, v in updates.items() if k != "id"}
            out.append({**item, **changes})  # type: ignore[arg-type]
        elif isinstance(item, ContentModel):
            changes = {k: v for k, v in _by_field_name(type(item), updates).items() if k != "id"}
            out.append(type(item).model_validate({**item.model_dump(), **changes}))
        else:
            out.append(item)
    return out


def remove_item(items: Sequence[T], item_id: str) -> List[T]:
    return [item for item in items if _item_id(item) != item_id]


def move_item(items: Sequence[T], from_index: int, to_index: int) -> List[T]:
    """Reordena por índice (drag & drop). Índices fuera de rango se recortan."""
    out = list(items)
    if not out:
        return out
    last = len(out) - 1
    from_index = max(0, min(from_index, last))
    to_index = max(0, min(to_index, last))
    if from_index == to_index:
        return out
    item = out.pop(from_index)
    out.insert(to_index, item)
    return out


def move_item_by_id(items: Sequence[T], active_id: str, over_id: str) -> List[T]:
    old, new = index_of(items, active_id), index_of(items, over_id)
    if old == -1 or new == -1:
        return list(items)
    return move_item(items, old, new)


# -------- Factories --------
BLOCK_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "richText": {"content": "Click to edit text…"},
    "image": {"src": "", "alt": "", "caption": "", "borderRadius": 8, "padding": 8},
    "separator": {"thickness": 1, "style": "solid", "color": "#CBD5E1", "width": "content"},
    "spacer": {"height": 32},
    "button": {
        "label": "Click me",
        "href": "#",
        "variant": "primary",
        "borderRadius": 999,
        "paddingX": 16,
        "paddingY": 10,
    },
}


def create_block_of_type(block_type: str) -> BlockBase:
    """Block nuevo con los defaults del composer; un tipo desconocido cae a richText."""
    defaults = BLOCK_DEFAULTS.get(block_type)
    if defaults is None:
        raw = {"id": new_id(), "type": "richText", "content": "New block"}
    else:
        raw = {"id": new_id(), "type": block_type, **defaults}
    block = parse_block(raw)
    if block is None:
        raise ValueError(f"Invalid defaults for block type '{block_type}'")
    return block


SECTION_PLACEHOLDERS: Dict[str, Dict[str, Any]] = {
    "hero": {"title": "Welcome", "content": "A short introduction.", "minHeight": 400},
    "text": {"title": "New Section", "content": "Start writing here."},
    "image-text": {"title": "New Section", "content": "Describe the image.", "imageUrl": ""},
    "gallery": {"title": "Gallery", "galleryEvents": []},
    "contact": {"title": "Contact", "content": ""},
    "schedule": {"title": "Schedule", "content": ""},
    "performances": {"title": "Performances", "performanceItems": []},
    "table": {"title": "Table", "tableData": {"headers": ["Column 1", "Column 2"], "rows": [["", ""]]}},
    "separator": {"separatorStyle": "line", "separatorSpacing": "medium"},
    "downloads": {"title": "Downloads", "downloadItems": []},
    "audio-playlist": {"title": "Recordings", "audioItems": []},
    "video-gallery": {"title": "Videos", "videoItems": []},
}


def create_section_of_type(section_type: str) -> Section:
    placeholder = SECTION_PLACEHOLDERS.get(section_type, SECTION_PLACEHOLDERS["text"])
    kind = section_type if section_type in SECTION_PLACEHOLDERS else "text"
    return Section.model_validate({"id": new_id(), "type": kind, **copy.deepcopy(placeholder)})


def clone_block(block: BlockBase) -> BlockBase:
    """Copia profunda con id nuevo (duplicar en el canvas)."""
    return block.model_copy(update={"id": new_id()}, deep=True)


# -------- Sidebar --------
def add_sidebar_block(blocks: Sequence[SidebarBlock], block_type: str = "custom") -> List[SidebarBlock]:
    block = SidebarBlock(
        id=new_id(),
        type=block_type,
        order=len(blocks),
        title="Custom" if block_type == "custom" else None,
        content="",
    )
    return [*blocks, block]


def remove_sidebar_block(blocks: Sequence[SidebarBlock], block_id: str) -> List[SidebarBlock]:
    """Quita el bloque y renumera `order` para que quede contiguo."""
    kept = [b for b in blocks if b.id != block_id]
    return [b.model_copy(update={"order": i}) for i, b in enumerate(kept)]


# -------- Slugs de eventos de galería --------
_APOSTROPHES = re.compile(r"['’]")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    s = _APOSTROPHES.sub("", (value or "").lower())
    s = _NON_ALNUM.sub("-", s)
    return s.strip("-")


def ensure_event_slugs(events: Sequence[GalleryEvent]) -> List[GalleryEvent]:
    """Deriva el slug desde el título donde falte; los slugs existentes se respetan."""
    out: List[GalleryEvent] = []
    for ev in events:
        if ev.slug.strip():
            out.append(ev)
        else:
            out.append(ev.model_copy(update={"slug": slugify(ev.title) or ev.id}))
    return out
