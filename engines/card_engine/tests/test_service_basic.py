from fastapi.testclient import TestClient

from engines.card_engine.service.server import create_app


def _client() -> TestClient:
    return TestClient(create_app())


def test_health_endpoint() -> None:
    resp = _client().get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_render_roundtrip() -> None:
    payload = {
        "template": {
            "id": "classic",
            "name": "Classic",
            "version": 2,
            "design": {
                "referenceWidth": 800,
                "referenceHeight": 600,
                "elements": [
                    {"type": "Shape", "id": "bg", "width": 800, "height": 600, "fill": "#000"},
                    {"type": "Text", "id": "name", "x": 40, "y": 40, "fontSize": 24,
                     "content": "fullName", "isBinding": True, "fill": "#fff"},
                    {"type": "Text", "id": "ghost", "content": "ghostField", "isBinding": True},
                ],
            },
        },
        "card": {"fullName": "Jane Doe", "unrelated": 1},
        "surface": {"width": 400, "height": 300},
    }
    resp = _client().post("/cards/render", json=payload)
    assert resp.status_code == 200
    data = resp.json()
    assert [n["id"] for n in data["nodes"]] == ["bg", "name", "ghost"]
    name = data["nodes"][1]
    assert name["type"] == "Text"
    assert (name["absX"], name["absY"], name["fontSize"]) == (20, 20, 12)
    assert name["resolvedContent"] == "Jane Doe"
    assert data["nodes"][2]["resolvedContent"] == "{{ghostField}}"
    assert data["warnings"] == [{"elementId": "ghost", "key": "ghostField"}]


def test_render_without_template_uses_default() -> None:
    resp = _client().post(
        "/cards/render",
        json={"card": {}, "ownerProfile": {"name": "Owner"}, "surface": {"width": 160, "height": 90}},
    )
    assert resp.status_code == 200
    nodes = resp.json()["nodes"]
    assert [n["type"] for n in nodes] == ["Shape", "Text"]
    assert nodes[1]["resolvedContent"] == "Owner"


def test_degenerate_surface_returns_error_envelope() -> None:
    resp = _client().post("/cards/render", json={"card": {}, "surface": {"width": 0, "height": 90}})
    assert resp.status_code == 422
    error = resp.json()["detail"]["error"]
    assert error["code"] == "card_engine.render_surface_invalid"
    assert error["resource_kind"] == "surface"


def test_resolve_endpoint() -> None:
    resp = _client().post("/cards/resolve", json={"card": {"views": "5"}})
    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == "email@example.com"
    assert data["views"] == 5


def test_validate_endpoint_collects_errors() -> None:
    payload = {
        "template": {
            "id": "t",
            "name": "T",
            "version": 99,
            "design": {
                "aspectRatio": "nope",
                "elements": [
                    {"type": "Text", "id": "a", "fontSize": 0},
                    {"type": "Shape", "id": "a", "width": 0, "height": 5},
                ],
            },
        }
    }
    resp = _client().post("/templates/validate", json=payload)
    assert resp.status_code == 200
    codes = sorted(e["code"] for e in resp.json()["errors"])
    assert codes == [
        "design.invalid_aspect_ratio",
        "element.duplicate_id",
        "element.invalid_font_size",
        "element.invalid_size",
    ]


def test_validate_endpoint_reports_missing_element_id_with_everything_else() -> None:
    payload = {
        "template": {
            "id": "",
            "name": "",
            "design": {
                "layout": "weird",
                "aspectRatio": "16-9",
                "elements": [
                    {"type": "Text", "fontSize": 0},
                    {"type": "Shape", "id": "s", "width": -1},
                ],
            },
        }
    }
    resp = _client().post("/templates/validate", json=payload)
    assert resp.status_code == 200
    codes = {e["code"] for e in resp.json()["errors"]}
    assert codes == {
        "template.id_required",
        "template.name_required",
        "design.invalid_layout",
        "design.invalid_aspect_ratio",
        "element.id_required",
        "element.invalid_font_size",
        "element.invalid_size",
    }


def test_default_template_endpoint() -> None:
    data = _client().get("/templates/default").json()
    assert data["id"] == "default"
    assert [e["type"] for e in data["design"]["elements"]] == ["Shape", "Text"]


def test_vcard_endpoint() -> None:
    resp = _client().post("/cards/vcard", json={"card": {"fullName": "Jane Doe"}})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/vcard")
    assert "FN:Jane Doe" in resp.text
