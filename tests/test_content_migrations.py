# tests/test_content_migrations.py
from app.schemas.content import Section
from app.schemas.page import PageConfig
from app.services.content_migrations import expand_media_hub_section, migrate_media_hub_sections
from app.services.page_service import get_page, save_page
from app.services.revision_service import list_revisions
from app.services.tab_groups import consolidate_tab_groups

MEDIA_HUB = {
    "id": "mh",
    "type": "media-hub",
    "title": "Media",
    "mediaPhotos": [{"id": "e1", "title": "Spring", "slug": "spring", "media": []}],
    "mediaRecordings": [{"id": "r1", "type": "audio", "url": "a.mp3"}],
}


def test_expand_media_hub_section():
    out = expand_media_hub_section(MEDIA_HUB)
    assert [s["id"] for s in out] == ["mh-photos", "mh-recordings", "mh-videos"]
    assert [s["type"] for s in out] == ["gallery", "audio-playlist", "video-gallery"]
    assert {s["tabGroup"] for s in out} == {"media"}
    assert [s["tabLabel"] for s in out] == ["Photos", "Recordings", "Videos"]
    assert out[0]["galleryEvents"] == MEDIA_HUB["mediaPhotos"]
    assert out[1]["audioItems"] == MEDIA_HUB["mediaRecordings"]
    assert out[2]["videoItems"] == []


def test_migrate_keeps_other_sections_in_place():
    sections = [{"id": "t", "type": "text"}, MEDIA_HUB, {"id": "c", "type": "contact"}]
    out, replaced = migrate_media_hub_sections(sections)
    assert replaced == 1
    assert [s["id"] for s in out] == ["t", "mh-photos", "mh-recordings", "mh-videos", "c"]


def test_migrate_without_media_hub_is_noop():
    sections = [{"id": "t", "type": "text"}]
    assert migrate_media_hub_sections(sections) == (sections, 0)
    assert migrate_media_hub_sections(None) == ([], 0)


def test_migrated_page_renders_one_tab_group(db):
    save_page(db, PageConfig(id="media", title="Media", slug="/media", sections=[MEDIA_HUB]))
    page = get_page(db, "media")
    new_sections, _ = migrate_media_hub_sections([s.to_json() for s in page.sections])
    save_page(db, page.model_copy(update={"sections": [Section.model_validate(s) for s in new_sections]}))

    units = consolidate_tab_groups(get_page(db, "media").sections)
    assert len(units) == 1
    assert units[0].tab_labels == ["Photos", "Recordings", "Videos"]
    assert len(list_revisions(db, page_id="media")) == 1
