import base64
import json
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from lingo_python_api import LingoAPI, RequestOptions, datatypes
from lingo_python_api.lingo_api import DEFAULT_BASE_URL, encode_query, parse_json_response
from lingo_python_api.lingo_error import ErrorCode, LingoError

from conftest import SPACE_ID, TOKEN, FakeSession, make_response

KIT_UUID = "3fa85f64-5717-4562-b3fc-2c963f66afa6"


# --- Request builder ---


def test_query_string_is_appended(client: LingoAPI):
    prepared = client.request_params(
        "GET", "/sections/abc", {"query": {"v": 0, "page": 1, "limit": None}}
    )
    assert prepared.url == f"{DEFAULT_BASE_URL}/sections/abc?v=0&page=1"
    assert prepared.method == "GET"


def test_encode_query_flattens_values():
    assert encode_query({"flag": True, "ids": ["a", "b"], "skip": None}) == "flag=true&ids=a%2Cb"


def test_no_query_no_question_mark(client: LingoAPI):
    prepared = client.request_params("GET", "/kits", {"query": {"v": None}})
    assert prepared.url == f"{DEFAULT_BASE_URL}/kits"


def test_auth_and_client_headers(client: LingoAPI):
    prepared = client.request_params("GET", "/kits")
    expected = base64.b64encode(f"{SPACE_ID}:{TOKEN}".encode()).decode()
    assert prepared.headers["Authorization"] == f"Basic {expected}"
    assert prepared.headers["x-lingo-client"] == f"LingoPython/{LingoAPI.VERSION}"
    assert prepared.headers["Content-Type"] == "application/json"


def test_header_overrides_cannot_replace_auth(client: LingoAPI):
    prepared = client.request_params(
        "GET", "/kits", {"headers": {"Authorization": "Bearer x", "X-Extra": "1"}}
    )
    assert prepared.headers["Authorization"].startswith("Basic ")
    assert prepared.headers["X-Extra"] == "1"


def test_json_body_is_serialized(client: LingoAPI):
    prepared = client.request_params(
        "POST", "/kits", RequestOptions(json_body={"name": "Brand Ü"})
    )
    assert json.loads(prepared.body.decode("utf-8")) == {"name": "Brand Ü"}


def test_json_and_form_body_conflict(client: LingoAPI, session: FakeSession):
    with pytest.raises(LingoError) as exc:
        client.call_api(
            "POST", "/assets", {"json_body": {}, "form_body": {"asset": ("a.png", b"x")}}
        )
    assert exc.value.code == ErrorCode.InvalidParams
    assert session.sent == []


def test_json_body_must_be_mapping(client: LingoAPI):
    with pytest.raises(LingoError) as exc:
        client.request_params("POST", "/kits", {"json_body": ["a", "b"]})
    assert exc.value.code == ErrorCode.InvalidParams


def test_unknown_option_is_rejected(client: LingoAPI):
    with pytest.raises(LingoError) as exc:
        client.request_params("POST", "/kits", {"data": {"name": "x"}})
    assert exc.value.code == ErrorCode.InvalidParams


def test_form_body_sets_multipart_content_type(client: LingoAPI):
    prepared = client.request_params(
        "POST",
        "/assets",
        {
            "form_body": {
                "asset": ("logo.png", b"PNGDATA"),
                "json": (None, '{"name": "logo"}', "application/json"),
            },
            "headers": {"Content-Type": "application/json"},
        },
    )
    assert prepared.headers["Content-Type"].startswith("multipart/form-data; boundary=")
    assert b'name="asset"; filename="logo.png"' in prepared.body
    assert b"PNGDATA" in prepared.body
    assert b'{"name": "logo"}' in prepared.body


def test_base_url_from_environment(monkeypatch, session: FakeSession):
    monkeypatch.setenv("LINGO_PYTHON_API_BASE_URL", "https://lingo.example.com/1/")
    client = LingoAPI(space_id=1, token="t", session=session)
    assert client.request_params("GET", "/kits").url == "https://lingo.example.com/1/kits"


def test_credentials_from_environment(monkeypatch, session: FakeSession):
    monkeypatch.setenv("LINGO_PYTHON_API_SPACE_ID", "42")
    monkeypatch.setenv("LINGO_PYTHON_API_TOKEN", "env-token")
    client = LingoAPI(session=session)
    assert client.is_configured
    expected = base64.b64encode(b"42:env-token").decode()
    assert client.request_params("GET", "/kits").headers["Authorization"] == f"Basic {expected}"


# --- Dispatcher ---


def test_not_configured_fails_before_network(session: FakeSession):
    client = LingoAPI(session=session)
    assert not client.is_configured
    with pytest.raises(LingoError) as exc:
        client.call_api("GET", "/kits")
    assert exc.value.code == ErrorCode.Unauthorized
    assert session.sent == []


def test_setup_configures_client(session: FakeSession):
    client = LingoAPI(session=session)
    client.setup(SPACE_ID, TOKEN)
    session.queue_result({"kits": []})
    assert client.call_api("GET", "/kits") == {"kits": []}


def test_success_result_is_client_keyed(client: LingoAPI, session: FakeSession):
    session.queue_result({"kit": {"kit_uuid": KIT_UUID, "date_added": 10}})
    assert client.call_api("GET", "/kits/x") == {"kit": {"kitId": KIT_UUID, "dateAdded": 10}}


def test_error_envelope_raises(client: LingoAPI, session: FakeSession):
    session.queue_error(404, "Not found", details={"object": "kit"}, recovery={"retry": False})
    with pytest.raises(LingoError) as exc:
        client.call_api("GET", "/kits/x")
    assert exc.value.code == 404
    assert exc.value.kind is ErrorCode.ObjectNotFound
    assert exc.value.details == {"object": "kit"}
    assert exc.value.recovery == {"retry": False}


def test_missing_success_flag_raises_unknown(client: LingoAPI, session: FakeSession):
    session.queue(make_response({}))
    with pytest.raises(LingoError) as exc:
        client.call_api("GET", "/kits")
    assert exc.value.code == ErrorCode.Unknown


def test_parse_json_response_directly():
    assert parse_json_response({"success": True, "result": {"short_id": "a"}}) == {"shortId": "a"}
    with pytest.raises(LingoError):
        parse_json_response({"success": "yes"})


def test_invalid_json_is_surfaced(client: LingoAPI, session: FakeSession):
    session.queue(make_response(text="<html>Bad gateway</html>", status=502))
    with pytest.raises(json.JSONDecodeError):
        client.call_api("GET", "/kits")
    assert len(session.sent) == 1


def test_transport_error_is_wrapped(client: LingoAPI, session: FakeSession):
    session.queue(requests.ConnectionError("connection reset"))
    with pytest.raises(LingoError) as exc:
        client.call_api("GET", "/kits")
    assert exc.value.code == ErrorCode.Unknown
    assert isinstance(exc.value.__cause__, requests.ConnectionError)


def test_timeout_is_passed_to_transport(session: FakeSession):
    client = LingoAPI(space_id=1, token="t", session=session, timeout=5.0)
    session.queue_result({"kits": []})
    client.call_api("GET", "/kits")
    assert session.send_kwargs[0]["timeout"] == 5.0


# --- Endpoint wrappers ---


def test_fetch_kits(client: LingoAPI, session: FakeSession):
    session.queue_result({"kits": [{"kit_uuid": KIT_UUID, "name": "Brand"}]})
    kits = client.fetch_kits()
    assert isinstance(kits[0], datatypes.Kit)
    assert kits[0].kitId == KIT_UUID
    assert session.paths == ["/1/kits"]


def test_fetch_kit_uses_short_id_and_options(client: LingoAPI, session: FakeSession):
    session.queue_result({"kit": {"kit_uuid": KIT_UUID, "versions": [{"version": 0}]}})
    kit = client.fetch_kit("brand-guide-x7y8z9")
    assert kit.versions[0].version == 0
    url = urlparse(session.sent[0].url)
    assert url.path == "/1/kits/x7y8z9"
    assert parse_qs(url.query) == {"options": ["use_versions"]}


def test_fetch_kit_outline(client: LingoAPI, session: FakeSession):
    session.queue_result(
        {
            "kit_version": {
                "kit_uuid": KIT_UUID,
                "version": 2,
                "sections": [{"uuid": "s1", "name": "Colors", "headers": [{"uuid": "h1", "name": "Primary"}]}],
            }
        }
    )
    outline = client.fetch_kit_outline(KIT_UUID, version=2)
    assert outline.sections[0].headers[0].id == "h1"
    assert parse_qs(urlparse(session.sent[0].url).query) == {"v": ["2"]}


def test_disabled_validation_returns_dicts(raw_client: LingoAPI, session: FakeSession):
    session.queue_result({"kits": [{"kit_uuid": KIT_UUID}]})
    assert raw_client.fetch_kits() == [{"kitId": KIT_UUID}]


def test_fetch_asset_direct_links(client: LingoAPI, session: FakeSession):
    session.queue_result({"direct_links": [{"id": 1, "asset_uuid": "a1", "url": "https://x"}]})
    links = client.fetch_asset_direct_links("a1")
    assert links[0].assetId == "a1"
    assert session.paths == ["/1/assets/a1/direct_links"]


def test_fetch_changelog(client: LingoAPI, session: FakeSession):
    session.queue_result({"changelog": [{"event": "asset.created", "user": {"id": 3}}]})
    events = client.fetch_asset_changelog("a1")
    assert events[0].event == "asset.created"
    assert session.paths == ["/1/assets/a1/changelog"]


def test_download_asset(client: LingoAPI, session: FakeSession):
    session.queue_result({"url": "https://cdn.example.com/logo.png"})
    session.queue(make_response(content=b"\x89PNG"))
    assert client.download_asset("a1", type="PNG") == b"\x89PNG"
    query = parse_qs(urlparse(session.sent[0].url).query)
    assert query == {"type": ["PNG"], "response": ["json"]}
    assert session.sent[1].url == "https://cdn.example.com/logo.png"


def test_download_asset_failure(client: LingoAPI, session: FakeSession):
    session.queue_result({"url": "https://cdn.example.com/logo.png"})
    session.queue(make_response(text="AccessDenied", status=403))
    with pytest.raises(LingoError) as exc:
        client.download_asset("a1")
    assert exc.value.code == ErrorCode.Unknown
    assert exc.value.details == {"rawError": "AccessDenied"}


def test_create_kit(client: LingoAPI, session: FakeSession):
    session.queue_result({"kit": {"kit_uuid": KIT_UUID, "name": "New Kit"}})
    kit = client.create_kit("New Kit")
    assert kit.name == "New Kit"
    assert session.sent[0].method == "POST"
    assert json.loads(session.sent[0].body) == {"name": "New Kit"}


def test_create_section(client: LingoAPI, session: FakeSession):
    session.queue_result({"section": {"uuid": "s1", "kit_uuid": KIT_UUID}})
    section = client.create_section(KIT_UUID, "Logos")
    assert section.kitId == KIT_UUID
    assert json.loads(session.sent[0].body) == {"kit_uuid": KIT_UUID, "name": "Logos"}


def test_create_heading(client: LingoAPI, session: FakeSession):
    session.queue_result({"item": {"uuid": "i1", "type": "heading"}})
    client.create_heading(KIT_UUID, "colors-s1", "Primary colors", display_order="append")
    assert json.loads(session.sent[0].body) == {
        "type": "heading",
        "kit_uuid": KIT_UUID,
        "section_uuid": "s1",
        "display_order": "append",
        "data": {"content": "Primary colors"},
    }


def test_create_note_requires_content(client: LingoAPI, session: FakeSession):
    with pytest.raises(LingoError) as exc:
        client.create_note(KIT_UUID, "s1", "")
    assert exc.value.code == ErrorCode.InvalidParams
    assert session.sent == []


def test_create_code_snippet(client: LingoAPI, session: FakeSession):
    session.queue_result({"item": {"uuid": "i1", "type": "code_snippet"}})
    client.create_code_snippet(KIT_UUID, "s1", "print(1)", code_language="python")
    body = json.loads(session.sent[0].body)
    assert body["data"] == {"content": "print(1)", "code_language": "python"}


def test_create_guide_text_only(client: LingoAPI, session: FakeSession):
    session.queue_result({"item": {"uuid": "i1", "type": "guide"}})
    client.create_guide(KIT_UUID, "s1", "Use the full logo", title="Don't")
    body = json.loads(session.sent[0].body)
    assert body["data"] == {"content": "Use the full logo", "title": "Don't", "color": "red"}
    assert body["display_properties"] == {"display_style": "text_only"}


def test_create_guide_rejects_other_titles(client: LingoAPI, session: FakeSession):
    with pytest.raises(LingoError) as exc:
        client.create_guide(KIT_UUID, "s1", "Maybe use it", title="Maybe")
    assert exc.value.code == ErrorCode.InvalidParams
    assert session.sent == []


def test_create_color_asset_in_kit(client: LingoAPI, session: FakeSession):
    session.queue_result({"item": {"uuid": "i1", "type": "asset", "asset": {"uuid": "a1", "type": "COLOR"}}})
    result = client.create_color_asset(
        "#0000FF",
        asset_data={"name": "Brand Blue"},
        item_data={"kitId": KIT_UUID, "sectionId": "s1"},
    )
    assert result.item.asset.type == "COLOR"
    assert json.loads(session.sent[0].body) == {
        "name": "Brand Blue",
        "type": "COLOR",
        "data": {"color": "#0000FF"},
        "item": {"type": "asset", "kit_uuid": KIT_UUID, "section_uuid": "s1"},
    }


def test_create_color_asset_requires_placement_ids(client: LingoAPI):
    with pytest.raises(LingoError) as exc:
        client.create_color_asset("#000000", item_data={"kitId": KIT_UUID})
    assert exc.value.code == ErrorCode.InvalidParams
