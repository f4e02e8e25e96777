# app/services/tab_groups.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

from app.schemas.content import Section


@dataclass(frozen=True)
class RenderUnit:
    """
    Unidad de render: una sección suelta o un grupo de 2+ secciones adyacentes
    con el mismo `tabGroup`. `active_index` es estado de vista; nunca reordena.
    """
    sections: tuple[Section, ...]
    tab_group: Optional[str] = None
    active_index: int = 0

    @property
    def is_group(self) -> bool:
        return self.tab_group is not None

    @property
    def tab_labels(self) -> List[str]:
        labels = []
        for i, s in enumerate(self.sections):
            label = (s.tab_label or "").strip() or (s.title or "").strip() or f"Tab {i + 1}"
            labels.append(label)
        return labels

    @property
    def active_section(self) -> Section:
        return self.sections[self.active_index]

    def to_dict(self) -> Dict[str, Any]:
        if not self.is_group:
            return {"kind": "section", "section": self.sections[0].to_json()}
        return {
            "kind": "tabs",
            "tabGroup": self.tab_group,
            "activeIndex": self.active_index,
            "tabs": [
                {"label": label, "section": s.to_json()}
                for label, s in zip(self.tab_labels, self.sections)
            ],
        }


def consolidate_tab_groups(sections: Sequence[Section]) -> List[RenderUnit]:
    """
    Recorre izquierda→derecha. Una sección con `tabGroup` consume todas las
    siguientes *inmediatas* con el mismo valor (trim). Mismo tag separado por
    otra sección = grupos distintos: [A, A, B, A] -> {A,A}, {B}, {A}.
    """
    units: List[RenderUnit] = []
    i = 0
    n = len(sections)
    while i < n:
        key = sections[i].tab_group_key
        if key is None:
            units.append(RenderUnit(sections=(sections[i],)))
            i += 1
            continue

        j = i + 1
        while j < n and sections[j].tab_group_key == key:
            j += 1
        run = tuple(sections[i:j])
        if len(run) >= 2:
            units.append(RenderUnit(sections=run, tab_group=key))
        else:
            units.append(RenderUnit(sections=run))
        i = j
    return units


def select_tab(unit: RenderUnit, index: int) -> RenderUnit:
    if not unit.is_group:
        return unit
    index = max(0, min(index, len(unit.sections) - 1))
    return replace(unit, active_index=index)
