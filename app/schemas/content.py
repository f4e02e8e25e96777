# app/schemas/content.py
# Pydantic: modelo de contenido: Sections (semánticas) y Blocks (composer libre)
#
# La columna pages.sections es JSON sin esquema y puede traer payloads de
# versiones pasadas o futuras del modelo. Por eso estos modelos nunca fallan
# por un `type` desconocido ni por un campo opcional con tipo incorrecto:
# el valor inválido se lee como ausente y los items inválidos de una lista
# se descartan.
from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    WrapValidator,
)
from pydantic.alias_generators import to_camel

SECTION_TYPES: tuple[str, ...] = (
    "hero",
    "text",
    "image-text",
    "gallery",
    "contact",
    "schedule",
    "performances",
    "table",
    "separator",
    "downloads",
    "audio-playlist",
    "video-gallery",
)

BLOCK_TYPES: tuple[str, ...] = ("richText", "image", "separator", "spacer", "button")

SectionType = Literal[
    "hero", "text", "image-text", "gallery", "contact", "schedule",
    "performances", "table", "separator", "downloads", "audio-playlist", "video-gallery",
]
BlockType = Literal["richText", "image", "separator", "spacer", "button"]


class ContentShape(str, Enum):
    SECTIONS = "sections"
    BLOCKS = "blocks"
    UNKNOWN = "unknown"


def new_id() -> str:
    """Id corto y opaco (9 chars hex), estable una vez persistido."""
    return uuid.uuid4().hex[:9]


# -------- Validadores tolerantes --------
def _or_none(value: Any, handler):
    try:
        return handler(value)
    except ValidationError:
        return None


def _valid_items(value: Any, handler):
    if not isinstance(value, list):
        return None
    out = []
    for item in value:
        try:
            out.extend(handler([item]) or [])
        except ValidationError:
            continue
    return out


def _valid_items_or_empty(value: Any, handler):
    return _valid_items(value, handler) or []


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _id_or_new(value: Any) -> str:
    return value if isinstance(value, str) and value else new_id()


def _type_or_text(value: Any) -> str:
    return value if isinstance(value, str) and value else "text"


Lenient = WrapValidator(_or_none)
LenientList = WrapValidator(_valid_items)
ItemsOrEmpty = WrapValidator(_valid_items_or_empty)
Text = BeforeValidator(_text)
AnyId = BeforeValidator(_id_or_new)

Number = Union[int, float]


class ContentModel(BaseModel):
    # camelCase en el JSON persistido; claves desconocidas se conservan
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------- Sub-entidades ----------
class GalleryMediaItem(ContentModel):
    id: Annotated[str, AnyId] = Field(default_factory=new_id)
    type: Annotated[str, Text] = "image"  # image | audio | video
    url: Annotated[str, Text] = ""
    caption: Annotated[Optional[str], Lenient] = None
    duration: Annotated[Optional[str], Lenient] = None


class GalleryEvent(ContentModel):
    id: Annotated[str, AnyId] = Field(default_factory=new_id)
    title: Annotated[str, Text] = ""
    slug: Annotated[str, Text] = ""
    description: Annotated[Optional[str], Lenient] = None
    cover_image_url: Annotated[Optional[str], Lenient] = None
    media: Annotated[List[GalleryMediaItem], ItemsOrEmpty] = Field(default_factory=list)


class DownloadLink(ContentModel):
    label: Annotated[str, Text] = ""
    url: Annotated[str, Text] = ""


class DownloadItem(ContentModel):
    """Un recurso descargable: o bien un `url`, o bien varios `links` con nombre."""
    id: Annotated[str, AnyId] = Field(default_factory=new_id)
    label: Annotated[str, Text] = ""
    url: Annotated[Optional[str], Lenient] = None
    links: Annotated[Optional[List[DownloadLink]], LenientList] = None
    description: Annotated[Optional[str], Lenient] = None
    duration: Annotated[Optional[str], Lenient] = None


class DownloadGroup(ContentModel):
    id: Annotated[str, AnyId] = Field(default_factory=new_id)
    title: Annotated[str, Text] = ""
    items: Annotated[List[DownloadItem], ItemsOrEmpty] = Field(default_factory=list)


class PerformanceItem(ContentModel):
    id: Annotated[str, AnyId] = Field(default_factory=new_id)
    title: Annotated[str, Text] = ""
    date: Annotated[Optional[str], Lenient] = None
    time: Annotated[Optional[str], Lenient] = None
    venue: Annotated[Optional[str], Lenient] = None
    description: Annotated[Optional[str], Lenient] = None
    ticket_url: Annotated[Optional[str], Lenient] = None


class TableData(ContentModel):
    headers: Annotated[List[str], ItemsOrEmpty] = Field(default_factory=list)
    rows: Annotated[List[List[str]], ItemsOrEmpty] = Field(default_factory=list)


class SectionStyle(ContentModel):
    """Presets de estilo (padding, bordes, posición de imagen); sin CSS crudo."""
    padding: Annotated[Optional[str], Lenient] = None
    border: Annotated[Optional[str], Lenient] = None
    border_radius: Annotated[Optional[str], Lenient] = None
    image_position: Annotated[Optional[str], Lenient] = None
    image_size: Annotated[Optional[str], Lenient] = None


# ---------- Section ----------
class Section(ContentModel):
    """
    Unidad semántica de contenido.
    `type` decide qué campos opcionales aplican; el resto se ignora.
    Un `type` fuera de SECTION_TYPES se conserva tal cual (el renderer decide el default).
    """
    id: Annotated[str, AnyId] = Field(default_factory=new_id)
    type: Annotated[str, BeforeValidator(_type_or_text)] = "text"
    title: Annotated[str, Text] = ""
    content: Annotated[str, Text] = ""

    image_url: Annotated[Optional[str], Lenient] = None
    style: Annotated[Optional[SectionStyle], Lenient] = None
    gallery_events: Annotated[Optional[List[GalleryEvent]], LenientList] = None
    performance_items: Annotated[Optional[List[PerformanceItem]], LenientList] = None
    download_items: Annotated[Optional[List[DownloadItem]], LenientList] = None
    download_groups: Annotated[Optional[List[DownloadGroup]], LenientList] = None
    audio_items: Annotated[Optional[List[GalleryMediaItem]], LenientList] = None
    video_items: Annotated[Optional[List[GalleryMediaItem]], LenientList] = None
    table_data: Annotated[Optional[TableData], Lenient] = None
    separator_style: Annotated[Optional[str], Lenient] = None    # line | space | dotted
    separator_spacing: Annotated[Optional[str], Lenient] = None  # small | medium | large

    # layout
    min_height: Annotated[Optional[Number], Lenient] = None
    max_width: Annotated[Optional[Union[int, float, str]], Lenient] = None
    tab_group: Annotated[Optional[str], Lenient] = None
    tab_label: Annotated[Optional[str], Lenient] = None

    @property
    def is_known_type(self) -> bool:
        return self.type in SECTION_TYPES

    @property
    def tab_group_key(self) -> Optional[str]:
        key = (self.tab_group or "").strip()
        return key or None


# ---------- Blocks ----------
class WrapperStyle(ContentModel):
    width_mode: Annotated[Optional[str], Lenient] = None
    min_height: Annotated[Optional[Number], Lenient] = None
    background: Annotated[Optional[str], Lenient] = None
    border_preset: Annotated[Optional[str], Lenient] = None
    radius: Annotated[Optional[Union[int, float, str]], Lenient] = None
    shadow: Annotated[Optional[str], Lenient] = None


class BlockBase(ContentModel):
    id: Annotated[str, AnyId] = Field(default_factory=new_id)
    wrapper_style: Annotated[Optional[WrapperStyle], Lenient] = None


class RichTextBlock(BlockBase):
    type: Literal["richText"] = "richText"
    content: Annotated[str, Text] = ""
    # text | header | hero; el mismo bloque puede representar un hero o un párrafo
    display_style: Annotated[Optional[str], Lenient] = None
    title: Annotated[Optional[str], Lenient] = None
    image_url: Annotated[Optional[str], Lenient] = None
    hero_height_px: Annotated[Optional[Number], Lenient] = None


class ImageBlock(BlockBase):
    type: Literal["image"] = "image"
    src: Annotated[str, Text] = ""
    alt: Annotated[str, Text] = ""
    caption: Annotated[Optional[str], Lenient] = None
    border_radius: Annotated[Optional[Number], Lenient] = None
    padding: Annotated[Optional[Number], Lenient] = None


class SeparatorBlock(BlockBase):
    type: Literal["separator"] = "separator"
    thickness: Annotated[Optional[Number], Lenient] = None
    style: Annotated[Optional[str], Lenient] = None  # solid | dashed | dotted
    color: Annotated[Optional[str], Lenient] = None
    width: Annotated[Optional[str], Lenient] = None


class SpacerBlock(BlockBase):
    type: Literal["spacer"] = "spacer"
    height: Annotated[Optional[Number], Lenient] = None


class ButtonBlock(BlockBase):
    type: Literal["button"] = "button"
    label: Annotated[Optional[str], Lenient] = None
    href: Annotated[Optional[str], Lenient] = None
    variant: Annotated[Optional[str], Lenient] = None
    border_radius: Annotated[Optional[Number], Lenient] = None
    padding_x: Annotated[Optional[Number], Lenient] = None
    padding_y: Annotated[Optional[Number], Lenient] = None


Block = Annotated[
    Union[RichTextBlock, ImageBlock, SeparatorBlock, SpacerBlock, ButtonBlock],
    Field(discriminator="type"),
]

_block_adapter: TypeAdapter = TypeAdapter(Block)


def parse_block(raw: Any) -> Optional[BlockBase]:
    """Block tipado a partir de un dict crudo; None si no es un block reconocible."""
    if not isinstance(raw, dict):
        return None
    try:
        return _block_adapter.validate_python(raw)
    except ValidationError:
        return None


# ---------- Sidebar / navegación ----------
class SidebarBlock(ContentModel):
    id: Annotated[str, AnyId] = Field(default_factory=new_id)
    type: Annotated[str, BeforeValidator(lambda v: v if isinstance(v, str) and v else "custom")] = "custom"
    title: Annotated[Optional[str], Lenient] = None
    content: Annotated[Optional[str], Lenient] = None
    order: Annotated[int, BeforeValidator(lambda v: v if isinstance(v, int) and not isinstance(v, bool) else 0)] = 0


class NavLink(BaseModel):
    id: str
    label: str
    path: str
    order: int
