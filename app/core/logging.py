# app/core/logging.py
import logging
from typing import Optional, Union

from .settings import settings

ISO_FMT = "%Y-%m-%dT%H:%M:%S%z"

def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """Un solo basicConfig para app + scripts; el nivel sale de LOG_LEVEL si no se pasa."""
    logging.basicConfig(
        level=level if level is not None else settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
        datefmt=ISO_FMT,
    )
    # el pool/engine de SQLAlchemy es muy ruidoso en DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
