from engines.config import runtime_config


def test_cache_size_defaults_and_overrides(monkeypatch) -> None:
    monkeypatch.delenv("CARD_RENDER_CACHE_SIZE", raising=False)
    assert runtime_config.get_render_cache_size() == runtime_config.DEFAULT_RENDER_CACHE_SIZE
    monkeypatch.setenv("CARD_RENDER_CACHE_SIZE", "-4")
    assert runtime_config.get_render_cache_size() == 0
    monkeypatch.setenv("CARD_RENDER_CACHE_SIZE", "many")
    assert runtime_config.get_render_cache_size() == runtime_config.DEFAULT_RENDER_CACHE_SIZE


def test_reference_width_rejects_non_positive(monkeypatch) -> None:
    monkeypatch.setenv("CARD_REFERENCE_WIDTH", "0")
    assert runtime_config.get_reference_width() == runtime_config.DEFAULT_REFERENCE_WIDTH
    monkeypatch.setenv("CARD_REFERENCE_WIDTH", "640")
    assert runtime_config.get_reference_width() == 640


def test_settings_are_read_on_every_call(monkeypatch) -> None:
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("CARD_RENDER_CACHE_SIZE", "8")
    assert runtime_config.get_render_cache_size() == 8
    monkeypatch.setenv("CARD_RENDER_CACHE_SIZE", "16")
    assert runtime_config.get_render_cache_size() == 16
