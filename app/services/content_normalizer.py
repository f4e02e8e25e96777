# app/services/content_normalizer.py
# Detección de forma (Sections vs Blocks) + conversiones entre esquemas.
# Corre en cada lectura; nunca lanza excepciones por payloads malformados.
from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from app.schemas.content import (
    BLOCK_TYPES,
    BlockBase,
    ContentShape,
    Section,
    new_id,
    parse_block,
)

logger = logging.getLogger(__name__)

SPACER_DEFAULT_HEIGHT = 32
SPACER_LARGE_THRESHOLD = 48


@dataclass
class NormalizedContent:
    """Resultado canónico de `normalize`: la forma detectada y ambas vistas."""
    shape: ContentShape
    sections: List[Section] = field(default_factory=list)
    blocks: Optional[List[BlockBase]] = None


# -------- Helpers --------
def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _num(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    return value if isinstance(value, (int, float)) else None


def _id(raw: dict) -> str:
    value = raw.get("id")
    return value if isinstance(value, str) and value else new_id()


def _elements(raw: Any) -> list[dict]:
    if not isinstance(raw, list):
        return []
    return [el for el in raw if isinstance(el, dict)]


# -------- Clasificación --------
def detect_shape(raw: Any, stored_shape: Optional[str] = None) -> ContentShape:
    """
    Clasifica el contenido crudo de la columna.
    - Si la fila trae discriminador (`content_shape`) válido, manda el discriminador.
    - Lista vacía -> SECTIONS (vacío es válido para ambas formas).
    - Todos los elementos con `type` en BLOCK_TYPES -> BLOCKS.
    - Cualquier otra lista -> SECTIONS (el esquema semántico es el default histórico).
    - No-lista -> UNKNOWN.
    """
    if stored_shape in (ContentShape.SECTIONS.value, ContentShape.BLOCKS.value):
        return ContentShape(stored_shape)
    if not isinstance(raw, list):
        return ContentShape.UNKNOWN
    if not raw:
        return ContentShape.SECTIONS
    if all(isinstance(el, dict) and el.get("type") in BLOCK_TYPES for el in raw):
        return ContentShape.BLOCKS
    return ContentShape.SECTIONS


def is_block_shaped(raw: Any) -> bool:
    return detect_shape(raw) is ContentShape.BLOCKS


# -------- Block -> Section --------
def block_to_section_dict(block: dict) -> dict:
    """Convierte un block crudo al dict de la Section equivalente (una regla por tipo)."""
    sid = _id(block)
    btype = block.get("type")

    if btype == "richText":
        title = _str(block.get("title")) or ""
        content = _str(block.get("content")) or ""
        if (_str(block.get("displayStyle")) or "text") == "hero":
            out = {"id": sid, "type": "hero", "title": title, "content": content}
            image_url = _str(block.get("imageUrl"))
            if image_url is not None:
                out["imageUrl"] = image_url
            min_height = _num(block.get("heroHeightPx"))
            if min_height is not None:
                out["minHeight"] = min_height
            return out
        return {"id": sid, "type": "text", "title": title, "content": content}

    if btype == "image":
        out = {
            "id": sid,
            "type": "image-text",
            "title": _str(block.get("alt")) or "",
            "content": _str(block.get("caption")) or "",
        }
        src = _str(block.get("src"))
        if src is not None:
            out["imageUrl"] = src
        return out

    if btype == "separator":
        style = "dotted" if block.get("style") in ("dotted", "dashed") else "line"
        return {"id": sid, "type": "separator", "title": "", "content": "", "separatorStyle": style}

    if btype == "spacer":
        height = _num(block.get("height"))
        if height is None:
            height = SPACER_DEFAULT_HEIGHT
        return {
            "id": sid,
            "type": "separator",
            "title": "",
            "content": "",
            "separatorStyle": "space",
            "separatorSpacing": "large" if height > SPACER_LARGE_THRESHOLD else "medium",
        }

    if btype == "button":
        label = _str(block.get("label"))
        href = _str(block.get("href"))
        content = ""
        if href:
            content = f'<a href="{html.escape(href, quote=True)}">{html.escape(label or "Link")}</a>'
        return {"id": sid, "type": "text", "title": label if label is not None else "Button", "content": content}

    return {"id": sid, "type": "text", "title": "", "content": _str(block.get("content")) or ""}


def blocks_to_sections(blocks: Iterable[Any]) -> List[Section]:
    out: List[Section] = []
    for raw in blocks:
        if not isinstance(raw, dict) or not raw.get("type"):
            continue
        out.append(_section_or_default(block_to_section_dict(raw)))
    return out


# -------- Section -> Block (fallback con pérdida) --------
def section_to_block_dict(section: dict) -> dict:
    """
    Solo texto: toda sección que no sea separator ni hero colapsa a un richText.
    No es un round trip soportado; sirve para que el composer no reviente con datos viejos.
    """
    bid = _id(section)
    if section.get("type") == "separator":
        return {
            "id": bid,
            "type": "separator",
            "thickness": 1,
            "style": "dotted" if section.get("separatorStyle") == "dotted" else "solid",
        }
    title = _str(section.get("title")) or ""
    content = _str(section.get("content")) or ""
    if section.get("type") == "hero":
        # único caso sin pérdida: el hero vuelve a ser un richText estilo hero
        out = {"id": bid, "type": "richText", "displayStyle": "hero", "title": title, "content": content}
        image_url = _str(section.get("imageUrl"))
        if image_url is not None:
            out["imageUrl"] = image_url
        min_height = _num(section.get("minHeight"))
        if min_height is not None:
            out["heroHeightPx"] = min_height
        return out
    return {
        "id": bid,
        "type": "richText",
        "content": f"{title}\n\n{content}".strip() if title else content,
    }


def sections_to_blocks(sections: Iterable[Any]) -> List[BlockBase]:
    out: List[BlockBase] = []
    for raw in sections:
        if isinstance(raw, Section):
            raw = raw.to_json()
        if not isinstance(raw, dict):
            continue
        block = parse_block(section_to_block_dict(raw))
        if block is not None:
            out.append(block)
    return out


# -------- API pública --------
def _section_or_default(raw: dict) -> Section:
    try:
        return Section.model_validate(raw)
    except ValidationError:
        # los validadores son tolerantes; esto sólo cubre payloads realmente rotos
        logger.warning("Unparseable section payload, defaulting to empty text section")
        return Section(id=_id(raw), type="text")


def normalize_sections(raw: Any, stored_shape: Optional[str] = None) -> List[Section]:
    """Vista semántica (Section[]) de cualquier contenido almacenado."""
    shape = detect_shape(raw, stored_shape)
    if shape is ContentShape.BLOCKS:
        return blocks_to_sections(_elements(raw))
    return [_section_or_default(el) for el in _elements(raw)]


def normalize_blocks(raw: Any, stored_shape: Optional[str] = None) -> List[BlockBase]:
    """Vista del composer libre (Block[]); los datos semánticos pasan por el fallback."""
    shape = detect_shape(raw, stored_shape)
    if shape is not ContentShape.BLOCKS:
        return sections_to_blocks(_elements(raw))

    out: List[BlockBase] = []
    for el in _elements(raw):
        block = parse_block(el)
        if block is None:
            # discriminador dice blocks pero el elemento no lo es
            block = parse_block(section_to_block_dict(el))
        if block is not None:
            out.append(block)
    return out


def normalize(raw: Any, stored_shape: Optional[str] = None) -> NormalizedContent:
    shape = detect_shape(raw, stored_shape)
    if shape is ContentShape.BLOCKS:
        return NormalizedContent(
            shape=shape,
            sections=normalize_sections(raw, shape.value),
            blocks=normalize_blocks(raw, shape.value),
        )
    if shape is ContentShape.UNKNOWN:
        return NormalizedContent(shape=ContentShape.SECTIONS, sections=[])
    return NormalizedContent(shape=shape, sections=normalize_sections(raw, shape.value))
