# tests/test_revisions.py
import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from app.db.base import Base
from app.models.page import PageRevision
from app.schemas.page import PageConfig
from app.core.settings import settings
from app.services.page_service import SlugConflictError, get_page, save_page
from app.services import revision_service
from app.services.revision_service import (
    RestoreStatus,
    fingerprint,
    get_revision,
    is_same_content,
    list_revisions,
    page_from_snapshot,
    prune_revisions,
    restore_revision,
)


def _page(pid="p1", *, title="Page", slug=None, content="A", **extra) -> PageConfig:
    return PageConfig(
        id=pid,
        title=title,
        slug=slug or f"/{pid}",
        sections=[{"id": "s1", "type": "text", "title": "T", "content": content}],
        **extra,
    )


def _revision_count(db, page_id):
    return db.scalar(select(func.count()).select_from(PageRevision).where(PageRevision.page_id == page_id))


def _content(page):
    return page.sections[0].content


# ---------- Snapshot al guardar ----------
def test_first_save_creates_no_revision(db):
    assert save_page(db, _page()) is not None
    assert _revision_count(db, "p1") == 0


def test_each_save_snapshots_previous_state(db):
    save_page(db, _page(content="A"))
    save_page(db, _page(content="B"))
    revs = list_revisions(db, page_id="p1")
    assert len(revs) == 1
    rev = get_revision(db, revision_id=revs[0].id)
    assert _content(rev.page) == "A"
    assert rev.version_idx == 1


def test_revision_created_at_is_previous_updated_at(db):
    first = save_page(db, _page(content="A"))
    save_page(db, _page(content="B"))
    rev = list_revisions(db, page_id="p1")[0]
    assert rev.created_at.replace(tzinfo=None) == first.updated_at.replace(tzinfo=None)


def test_retention_keeps_newest_fifty(db):
    save_page(db, _page(content="v0"))
    for i in range(1, 56):
        save_page(db, _page(content=f"v{i}"))

    revs = list_revisions(db, page_id="p1")
    assert len(revs) == 50
    assert revs[0].version_idx == 55
    assert revs[-1].version_idx == 6
    # más reciente primero, sin saltos
    assert [r.version_idx for r in revs] == list(range(55, 5, -1))
    # el snapshot de vN guarda el contenido que la página tenía antes del guardado N
    assert [_content(get_revision(db, revision_id=r.id).page) for r in revs] == [f"v{i}" for i in range(54, 4, -1)]


def test_prune_with_custom_keep(db):
    for i in range(5):
        save_page(db, _page(content=f"v{i}"))
    assert prune_revisions(db, page_id="p1", keep=2) == 2
    assert _revision_count(db, "p1") == 2


# ---------- Fingerprint / isCurrent ----------
def test_fingerprint_ignores_nulls_and_key_order():
    a = {"title": "x", "navLabel": None, "sections": [{"b": 1, "a": None, "c": {"z": 1, "y": 2}}]}
    b = {"sections": [{"c": {"y": 2, "z": 1}, "b": 1}], "title": "x"}
    assert fingerprint(a) == fingerprint(b)
    assert is_same_content(a, b)


def test_fingerprint_ignores_timestamps_and_shape_tag():
    a = {"title": "x", "updatedAt": "2024-01-01", "contentShape": "sections"}
    b = {"title": "x", "updatedAt": "2025-01-01"}
    assert fingerprint(a) == fingerprint(b)


def test_fingerprint_detects_real_changes():
    assert fingerprint({"title": "x"}) != fingerprint({"title": "y"})
    assert fingerprint({"sections": [1, 2]}) != fingerprint({"sections": [2, 1]})


def test_noop_save_marks_newest_revision_current(db):
    save_page(db, _page(content="A"))
    save_page(db, _page(content="B"))
    save_page(db, _page(content="B"))
    revs = list_revisions(db, page_id="p1")
    assert [r.is_current for r in revs] == [True, False]


def test_at_most_one_current(db):
    save_page(db, _page(content="A"))
    save_page(db, _page(content="A"))
    save_page(db, _page(content="A"))
    revs = list_revisions(db, page_id="p1")
    assert len(revs) == 2
    assert sum(r.is_current for r in revs) == 1
    assert revs[0].is_current


def test_list_revisions_unknown_page_is_empty(db):
    assert list_revisions(db, page_id="nope") == []


# ---------- Restore ----------
def test_restore_unknown_revision(db):
    assert restore_revision(db, revision_id="missing").status is RestoreStatus.NOT_FOUND
    assert get_revision(db, revision_id="missing") is None


def test_restore_is_idempotent_and_undoable(db):
    save_page(db, _page(content="A"))
    save_page(db, _page(content="B"))
    rev_a = list_revisions(db, page_id="p1")[0]

    first = restore_revision(db, revision_id=rev_a.id)
    assert first.ok
    assert _content(first.page) == "A"
    assert _revision_count(db, "p1") == 2

    second = restore_revision(db, revision_id=rev_a.id)
    assert second.ok
    assert _revision_count(db, "p1") == 3
    assert first.page.sections == second.page.sections

    # el estado B sigue en el historial: el restore se puede deshacer
    contents = [_content(get_revision(db, revision_id=r.id).page) for r in list_revisions(db, page_id="p1")]
    assert "B" in contents


def test_end_to_end_history_scenario(db):
    save_page(db, _page(content="A"))
    save_page(db, _page(content="B"))
    save_page(db, _page(content="C"))

    revs = list_revisions(db, page_id="p1")
    assert [_content(get_revision(db, revision_id=r.id).page) for r in revs] == ["B", "A"]
    assert not any(r.is_current for r in revs)

    restored = restore_revision(db, revision_id=revs[1].id)
    assert restored.ok
    assert _content(get_page(db, "p1")) == "A"

    revs = list_revisions(db, page_id="p1")
    assert [_content(get_revision(db, revision_id=r.id).page) for r in revs] == ["C", "B", "A"]
    assert revs[0].label == "before restore of v1"
    assert [r.is_current for r in revs] == [False, False, True]


def test_restore_rejected_when_slug_taken(db):
    save_page(db, _page("p1", slug="/one", content="A"))
    save_page(db, _page("p1", slug="/uno", content="B"))
    rev = list_revisions(db, page_id="p1")[0]
    save_page(db, _page("p2", slug="/one"))

    result = restore_revision(db, revision_id=rev.id)
    assert result.status is RestoreStatus.CONFLICT
    assert _revision_count(db, "p1") == 1
    assert get_page(db, "p1").slug == "/uno"


# ---------- Conflictos y fallos ----------
def test_duplicate_slug_rejected_without_revision(db):
    save_page(db, _page("p1", slug="/x"))
    save_page(db, _page("p2", slug="/y"))
    with pytest.raises(SlugConflictError):
        save_page(db, _page("p2", slug="/x"))
    assert _revision_count(db, "p2") == 0
    assert get_page(db, "p2").slug == "/y"


def test_persistence_failure_returns_none_and_leaves_no_revision(db, monkeypatch):
    save_page(db, _page(content="A"))

    def boom():
        raise OperationalError("UPDATE pages", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", boom)
    assert save_page(db, _page(content="B")) is None
    monkeypatch.undo()

    assert _revision_count(db, "p1") == 0
    assert _content(get_page(db, "p1")) == "A"


def test_prune_failure_keeps_the_save(db, monkeypatch):
    monkeypatch.setattr(settings, "REVISION_RETENTION", 1)
    save_page(db, _page(content="A"))
    save_page(db, _page(content="B"))

    def boom(*args, **kwargs):
        raise OperationalError("DELETE FROM page_revisions", {}, Exception("database is locked"))

    # sólo el recorte usa Session.execute; el guardado ya está confirmado cuando falla
    monkeypatch.setattr(db, "execute", boom)
    saved = save_page(db, _page(content="C"))
    monkeypatch.undo()

    assert saved is not None
    assert _content(get_page(db, "p1")) == "C"
    assert _revision_count(db, "p1") == 2


# ---------- Snapshots viejos ----------
def test_old_snapshot_missing_fields_gets_defaults():
    page = page_from_snapshot({"title": "Old", "sections": [{"type": "text", "content": "x"}]}, page_id="legacy")
    assert page.id == "legacy"
    assert page.slug == "/legacy"
    assert page.layout == "full"
    assert page.sidebar_width == 25
    assert page.show_in_nav is True
    assert page.nav_order == 999
    assert page.is_archived is False
    assert page.sidebar_blocks is None
    assert page.sections[0].content == "x"


def test_garbage_snapshot_does_not_raise():
    page = page_from_snapshot("not a dict", page_id="g")
    assert page.sections == []
    page = page_from_snapshot({"layout": "diagonal", "sidebarWidth": True, "sidebarBlocks": [1, {"title": "T"}]}, page_id="g")
    assert page.layout == "full"
    assert page.sidebar_width == 25
    assert len(page.sidebar_blocks) == 1


# ---------- Guardados concurrentes ----------
def test_interleaved_saves_last_write_wins(tmp_path, monkeypatch):
    # dos sesiones sobre el mismo archivo: cada una es un editor distinto
    engine = create_engine(f"sqlite:///{tmp_path / 'cms.db'}")
    Base.metadata.create_all(bind=engine)
    make_session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    editor_a, editor_b = make_session(), make_session()
    try:
        save_page(editor_a, _page(content="A"))

        real_next = revision_service._next_version_idx
        state = {"interleaved": False}

        def next_idx(db, page_id):
            idx = real_next(db, page_id)
            if db is editor_b and not state["interleaved"]:
                # A guarda entre el cálculo del índice de B y su commit
                state["interleaved"] = True
                assert save_page(editor_a, _page(content="A2")) is not None
            return idx

        monkeypatch.setattr(revision_service, "_next_version_idx", next_idx)
        saved = save_page(editor_b, _page(content="B"))

        assert state["interleaved"] is True
        assert saved is not None
        assert _content(get_page(editor_b, "p1")) == "B"

        revs = list_revisions(editor_b, page_id="p1")
        assert [r.version_idx for r in revs] == [2, 1]
        assert [_content(get_revision(editor_b, revision_id=r.id).page) for r in revs] == ["A2", "A"]
    finally:
        editor_a.close()
        editor_b.close()
        engine.dispose()


# ---------- Ids de contenido ----------
def test_duplicate_section_ids_get_fresh_ids(db):
    page = PageConfig(
        id="p1",
        title="Dupes",
        slug="/p1",
        sections=[
            {"id": "dup", "type": "text", "content": "first"},
            {"id": "dup", "type": "text", "content": "second"},
        ],
    )
    saved = save_page(db, page)
    ids = [s.id for s in saved.sections]
    assert len(ids) == 2
    assert ids[0] == "dup"
    assert ids[1] != "dup"
    assert [s.id for s in get_page(db, "p1").sections] == ids


def test_duplicate_block_ids_get_fresh_ids(db):
    page = PageConfig(
        id="p1",
        title="Blocks",
        slug="/p1",
        blocks=[
            {"id": "b", "type": "spacer", "height": 10},
            {"id": "b", "type": "spacer", "height": 20},
        ],
    )
    save_page(db, page)
    stored = get_page(db, "p1").blocks
    assert stored[0].id == "b"
    assert stored[1].id != "b"
    assert [b.height for b in stored] == [10, 20]
