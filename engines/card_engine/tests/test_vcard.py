from engines.card_engine.core.resolver import resolve
from engines.card_engine.core.vcard import to_vcard


def test_vcard_contains_resolved_fields() -> None:
    view = resolve({"fullName": "Jane van Doe", "company": "Acme; Inc", "email": "jane@acme.test"})
    text = to_vcard(view)
    lines = text.split("\r\n")
    assert lines[0] == "BEGIN:VCARD"
    assert "N:van Doe;Jane;;;" in lines
    assert "FN:Jane van Doe" in lines
    assert r"ORG:Acme\; Inc" in lines
    assert "EMAIL:jane@acme.test" in lines
    assert "TITLE:Job Title" in lines
    assert text.endswith("END:VCARD\r\n")
