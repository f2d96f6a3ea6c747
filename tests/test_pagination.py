from urllib.parse import parse_qs, urlparse

import pytest

from lingo_python_api import LingoAPI, datatypes

from conftest import FakeSession


def asset_item(index: int) -> dict:
    return {"uuid": f"item-{index}", "type": "asset", "display_order": index}


def heading(uuid: str, content: str) -> dict:
    return {"uuid": uuid, "short_id": f"short-{uuid}", "type": "heading", "data": {"content": content}}


def section_page(items: list) -> dict:
    return {"section": {"uuid": "s1", "name": "Logos", "items": items}}


def queries(session: FakeSession) -> list:
    return [parse_qs(urlparse(r.url).query) for r in session.sent]


def test_fetch_section_single_page(client: LingoAPI, session: FakeSession):
    session.queue_result(section_page([asset_item(0)]))
    section = client.fetch_section("s1", version=3, page=2, limit=10)
    assert isinstance(section, datatypes.Section)
    assert section.items[0].id == "item-0"
    assert queries(session) == [{"v": ["3"], "page": ["2"], "limit": ["10"]}]


def test_fetch_all_items_pages_until_short_page(client: LingoAPI, session: FakeSession):
    """450 items with pages of 200 take exactly 3 requests."""
    items = [asset_item(i) for i in range(450)]
    for start in (0, 200, 400):
        session.queue_result(section_page(items[start : start + 200]))

    result = client.fetch_all_items_in_section("s1")

    assert len(session.sent) == 3
    assert [q["page"] for q in queries(session)] == [["1"], ["2"], ["3"]]
    assert all(q["limit"] == ["200"] for q in queries(session))
    assert [item.id for item in result] == [f"item-{i}" for i in range(450)]


def test_fetch_all_items_exact_multiple_needs_empty_page(client: LingoAPI, session: FakeSession):
    session.queue_result(section_page([asset_item(i) for i in range(200)]))
    session.queue_result(section_page([]))
    assert len(client.fetch_all_items_in_section("s1")) == 200
    assert len(session.sent) == 2


def test_fetch_all_items_raw(raw_client: LingoAPI, session: FakeSession):
    session.queue_result(section_page([asset_item(0)]))
    assert raw_client.fetch_all_items_in_section("s1") == [
        {"id": "item-0", "type": "asset", "displayOrder": 0}
    ]


def test_items_for_heading_stops_at_next_heading(client: LingoAPI, session: FakeSession):
    """[H1, A, B, H2, C] returns [A, B] for H1."""
    session.queue_result(
        section_page(
            [heading("h1", "Colors"), asset_item(1), asset_item(2), heading("h2", "Fonts"), asset_item(3)]
        )
    )
    result = client.fetch_items_for_heading("s1", "Colors")
    assert [item.id for item in result] == ["item-1", "item-2"]
    assert len(session.sent) == 1


@pytest.mark.parametrize("heading_id", ["h1", "short-h1", "Colors"])
def test_items_for_heading_matches_id_short_id_or_content(
    raw_client: LingoAPI, session: FakeSession, heading_id: str
):
    session.queue_result(section_page([heading("h1", "Colors"), asset_item(1)]))
    session.queue_result(section_page([]))
    result = raw_client.fetch_items_for_heading("s1", heading_id)
    assert [item["id"] for item in result] == ["item-1"]


def test_items_for_heading_spans_pages(client: LingoAPI, session: FakeSession):
    first = [asset_item(i) for i in range(198)] + [heading("h1", "Colors"), asset_item(500)]
    session.queue_result(section_page(first))
    session.queue_result(section_page([asset_item(501), heading("h2", "Fonts")]))
    result = client.fetch_items_for_heading("s1", "h1")
    assert [item.id for item in result] == ["item-500", "item-501"]
    assert len(session.sent) == 2


def test_items_for_heading_first_occurrence_wins(client: LingoAPI, session: FakeSession):
    session.queue_result(
        section_page(
            [heading("h1", "Colors"), asset_item(1), heading("h2", "Colors"), asset_item(2)]
        )
    )
    result = client.fetch_items_for_heading("s1", "Colors")
    assert [item.id for item in result] == ["item-1"]


def test_items_for_missing_heading_is_empty(client: LingoAPI, session: FakeSession):
    session.queue_result(section_page([asset_item(1), asset_item(2)]))
    session.queue_result(section_page([]))
    assert client.fetch_items_for_heading("s1", "Nope") == []
    assert len(session.sent) == 2


def test_fetch_assets_for_heading_is_an_alias(client: LingoAPI, session: FakeSession):
    session.queue_result(section_page([heading("h1", "Colors"), asset_item(1)]))
    session.queue_result(section_page([]))
    result = client.fetch_assets_for_heading("s1", "Colors")
    assert [item.id for item in result] == ["item-1"]
