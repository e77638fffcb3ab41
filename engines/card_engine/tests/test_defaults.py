from engines.card_engine.core.defaults import DEFAULT_TEMPLATE, load_template, template_or_default
from engines.card_engine.core.errors import MissingTemplateError
from engines.card_engine.core.types import Template
from engines.card_engine.core.validator import validate


def test_default_template_is_valid() -> None:
    assert validate(DEFAULT_TEMPLATE).ok
    shape, text = DEFAULT_TEMPLATE.design.elements
    assert shape.type == "Shape"
    assert "gradient" in shape.fill
    assert text.isBinding and text.content == "fullName"
    assert text.align == "center"


def test_template_or_default() -> None:
    tpl = Template(id="x", name="X")
    assert template_or_default(tpl) is tpl
    assert template_or_default(None) is DEFAULT_TEMPLATE
    assert template_or_default({"id": "y", "name": "Y"}).id == "y"
    assert template_or_default({"id": "y"}) is DEFAULT_TEMPLATE
    assert template_or_default("classic") is DEFAULT_TEMPLATE


def test_load_template_substitutes_on_missing() -> None:
    catalog = {"classic": Template(id="classic", name="Classic", version=2)}

    def loader(template_id):
        if template_id == "raises":
            raise MissingTemplateError(template_id)
        return catalog.get(template_id)

    assert load_template(loader, "classic").version == 2
    assert load_template(loader, "unknown") is DEFAULT_TEMPLATE
    assert load_template(loader, "raises") is DEFAULT_TEMPLATE
    assert load_template(loader, None) is DEFAULT_TEMPLATE
