from __future__ import annotations

import json
from typing import Any

from fastapi import HTTPException

from app.core.settings import settings


def enforce_page_content_size(content: Any) -> None:
    """
    Limita el tamaño del JSON serializado (en KB) del contenido de una página
    (sections/blocks/sidebarBlocks). 413 si se pasa del límite.
    """
    limit_kb = float(settings.MAX_PAGE_CONTENT_KB or 0)
    if limit_kb <= 0:
        return
    # JSON compacto para medir el tamaño real en el cable
    b = json.dumps(content, ensure_ascii=False, separators=(",", ":"), default=str).encode("utf-8")
    kb = len(b) / 1024.0
    if kb > limit_kb:
        raise HTTPException(
            status_code=413,
            detail=f"Payload too large: page content is {kb:.1f}KB, limit is {limit_kb:.0f}KB",
        )
