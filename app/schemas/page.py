# app/schemas/page.py
# Pydantic: requests/responses para Pages y Revisions
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from app.schemas.content import Block, Section, SidebarBlock

PageLayout = Literal["full", "sidebar-left", "sidebar-right"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Page ----------
class PageConfig(CamelModel):
    """
    Página completa tal como la consume el editor.
    `sections` siempre es la vista semántica; `blocks` sólo viene cuando la
    página fue compuesta con el composer libre (y gana al guardar).
    """
    id: str = Field(..., min_length=1, max_length=64)
    title: str = Field("", max_length=200)
    slug: str = Field(..., min_length=1, max_length=200)
    layout: PageLayout = "full"
    sidebar_width: int = Field(25, ge=0, le=100)
    sections: List[Section] = Field(default_factory=list)
    blocks: Optional[List[Block]] = None
    sidebar_blocks: Optional[List[SidebarBlock]] = None
    show_in_nav: bool = True
    nav_order: int = 999
    nav_label: Optional[str] = Field(None, max_length=200)
    is_archived: bool = False


class PageSave(PageConfig):
    # el id viene en el path; en el body es opcional
    id: Optional[str] = Field(None, max_length=64)  # type: ignore[assignment]

    @model_validator(mode="after")
    def _unique_content_ids(self) -> "PageSave":
        # ids repetidos en el body del editor son un error del cliente (422)
        for name, items in (("sections", self.sections), ("blocks", self.blocks or [])):
            ids = [item.id for item in items]
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            if dupes:
                raise ValueError(f"Duplicate {name} ids: {', '.join(dupes)}")
        return self


class PageCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200)
    id: Optional[str] = Field(None, min_length=1, max_length=64)
    layout: PageLayout = "full"
    sidebar_width: int = Field(25, ge=0, le=100)
    show_in_nav: bool = True
    nav_order: Optional[int] = None
    nav_label: Optional[str] = Field(None, max_length=200)


class PageOut(PageConfig):
    content_shape: str = "sections"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RenderOut(CamelModel):
    page_id: str
    slug: str
    title: str
    layout: PageLayout
    sidebar_width: int
    units: List[Dict[str, Any]]
    sidebar_blocks: Optional[List[SidebarBlock]] = None


# ---------- Revision ----------
class RevisionSummary(CamelModel):
    id: str
    page_id: str
    version_idx: int
    created_at: Optional[datetime] = None
    label: Optional[str] = None
    title: str = ""
    slug: str = ""
    is_current: bool = False


class RevisionOut(RevisionSummary):
    page: PageConfig
