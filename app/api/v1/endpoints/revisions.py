# app/api/v1/endpoints/revisions.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.page import PageOut, RevisionOut
from app.services.revision_service import RestoreStatus, get_revision, restore_revision

router = APIRouter()


@router.get("/{revision_id}", response_model=RevisionOut, response_model_exclude_none=True)
def get_revision_endpoint(revision_id: str, db: Session = Depends(get_db)):
    rev = get_revision(db, revision_id=revision_id)
    if rev is None:
        raise HTTPException(status_code=404, detail="Revision not found")
    return rev


@router.post("/{revision_id}/restore", response_model=PageOut, response_model_exclude_none=True)
def restore_revision_endpoint(revision_id: str, db: Session = Depends(get_db)):
    """
    Restaura la revisión como un guardado normal: el estado actual queda
    snapshoteado antes, así que el restore se puede deshacer.
    """
    result = restore_revision(db, revision_id=revision_id)
    if result.status is RestoreStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Revision not found")
    if result.status is RestoreStatus.CONFLICT:
        raise HTTPException(status_code=409, detail="Slug is already used by another page")
    if not result.ok:
        raise HTTPException(status_code=503, detail="Restore failed")
    return result.page
