# tests/test_editor_ops.py
import pytest

from app.schemas.content import (
    ButtonBlock,
    GalleryEvent,
    ImageBlock,
    RichTextBlock,
    Section,
    SidebarBlock,
    WrapperStyle,
)
from app.services.editor_ops import (
    add_sidebar_block,
    clone_block,
    create_block_of_type,
    create_section_of_type,
    ensure_event_slugs,
    insert_item,
    move_item,
    move_item_by_id,
    remove_item,
    remove_sidebar_block,
    slugify,
    update_item,
)


def _ids(items):
    return [i["id"] if isinstance(i, dict) else i.id for i in items]


ITEMS = [{"id": "a"}, {"id": "b"}, {"id": "c"}]


def test_insert_item():
    assert _ids(insert_item(ITEMS, {"id": "x"})) == ["a", "b", "c", "x"]
    assert _ids(insert_item(ITEMS, {"id": "x"}, 1)) == ["a", "x", "b", "c"]
    assert _ids(insert_item(ITEMS, {"id": "x"}, 99)) == ["a", "b", "c", "x"]
    assert _ids(ITEMS) == ["a", "b", "c"]


def test_update_item_dicts_and_models():
    out = update_item(ITEMS, "b", {"title": "B", "id": "hijack"})
    assert out[1] == {"id": "b", "title": "B"}

    sections = [Section(id="s1", type="text", title="Old")]
    out = update_item(sections, "s1", {"title": "New", "tabGroup": "media"})
    assert isinstance(out[0], Section)
    assert out[0].title == "New"
    assert out[0].tab_group == "media"
    assert sections[0].title == "Old"


def test_update_item_accepts_field_names():
    sections = [Section(id="s1", type="text", tab_group="old", tab_label="Old")]
    out = update_item(sections, "s1", {"tab_group": "new", "tabLabel": "New"})
    assert out[0].tab_group == "new"
    assert out[0].tab_label == "New"

    blocks = [ButtonBlock(id="b1", label="Go", href="#")]
    out = update_item(blocks, "b1", {"padding_x": 24, "id": "other"})
    assert isinstance(out[0], ButtonBlock)
    assert out[0].padding_x == 24
    assert out[0].id == "b1"


def test_remove_item():
    assert _ids(remove_item(ITEMS, "b")) == ["a", "c"]
    assert _ids(remove_item(ITEMS, "zzz")) == ["a", "b", "c"]


@pytest.mark.parametrize("src,dst,expected", [
    (0, 2, ["b", "c", "a"]),
    (2, 0, ["c", "a", "b"]),
    (1, 1, ["a", "b", "c"]),
    (-5, 50, ["b", "c", "a"]),
])
def test_move_item(src, dst, expected):
    assert _ids(move_item(ITEMS, src, dst)) == expected


def test_move_item_by_id():
    assert _ids(move_item_by_id(ITEMS, "c", "a")) == ["c", "a", "b"]
    assert _ids(move_item_by_id(ITEMS, "c", "missing")) == ["a", "b", "c"]
    assert move_item([], 0, 1) == []


def test_create_block_defaults():
    button = create_block_of_type("button")
    assert isinstance(button, ButtonBlock)
    assert (button.label, button.href, button.variant) == ("Click me", "#", "primary")
    image = create_block_of_type("image")
    assert isinstance(image, ImageBlock)
    assert image.border_radius == 8
    assert create_block_of_type("spacer").height == 32


def test_unknown_block_type_is_rich_text():
    block = create_block_of_type("carousel")
    assert isinstance(block, RichTextBlock)
    assert block.content == "New block"


def test_create_section_of_type():
    table = create_section_of_type("table")
    assert table.type == "table"
    assert table.table_data.headers == ["Column 1", "Column 2"]
    assert create_section_of_type("nonsense").type == "text"
    assert create_section_of_type("text").id != create_section_of_type("text").id


def test_clone_block_is_deep_with_new_id():
    block = create_block_of_type("richText")
    block = block.model_copy(update={"wrapper_style": WrapperStyle(background="#fff")})
    copy = clone_block(block)
    assert copy.id != block.id
    assert copy.content == block.content
    assert copy.wrapper_style is not block.wrapper_style


def test_sidebar_blocks():
    blocks = add_sidebar_block([], "custom")
    blocks = add_sidebar_block(blocks, "hours")
    assert [b.order for b in blocks] == [0, 1]
    assert blocks[0].title == "Custom" and blocks[1].title is None

    first_id = blocks[0].id
    left = remove_sidebar_block(blocks, first_id)
    assert len(left) == 1
    assert left[0].order == 0
    assert isinstance(left[0], SidebarBlock)


@pytest.mark.parametrize("title,slug", [
    ("Spring Concert 2024", "spring-concert-2024"),
    ("Director's Cut", "directors-cut"),
    ("  --Hello, World!--  ", "hello-world"),
    ("", ""),
])
def test_slugify(title, slug):
    assert slugify(title) == slug


def test_ensure_event_slugs_keeps_existing():
    events = [
        GalleryEvent(id="e1", title="Fall Gala"),
        GalleryEvent(id="e2", title="Other", slug="custom"),
        GalleryEvent(id="e3", title="!!!"),
    ]
    out = ensure_event_slugs(events)
    assert [e.slug for e in out] == ["fall-gala", "custom", "e3"]


def test_create_block_with_unparseable_defaults_raises(monkeypatch):
    monkeypatch.setattr("app.services.editor_ops.parse_block", lambda raw: None)
    with pytest.raises(ValueError):
        create_block_of_type("spacer")
