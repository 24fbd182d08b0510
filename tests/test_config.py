from __future__ import annotations

from pathlib import Path

import pytest

from memegen.shared.config import RenderContext, ServiceSettings
from memegen.specs.common.errors import ConfigurationError


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "MEMEGEN_FONT_PATH",
        "MEMEGEN_CACHE_DIR",
        "MEMEGEN_STORE_BACKEND",
        "MEMEGEN_FETCH_TIMEOUT",
        "MEMEGEN_MAX_SOURCE_BYTES",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = ServiceSettings.from_env()
    assert settings.font_path == "impact.ttf"
    assert settings.cache_dir == "cache"
    assert settings.store_backend == "file"
    assert settings.fetch_timeout == 10.0
    assert settings.max_source_bytes == 20 * 1024 * 1024


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMEGEN_STORE_BACKEND", "BLOB")
    monkeypatch.setenv("MEMEGEN_FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("MEMEGEN_CACHE_DIR", "/tmp/captions")
    settings = ServiceSettings.from_env()
    assert settings.store_backend == "blob"
    assert settings.fetch_timeout == 2.5
    assert settings.cache_dir == "/tmp/captions"


@pytest.mark.parametrize(
    "name,value",
    [
        ("MEMEGEN_STORE_BACKEND", "redis"),
        ("MEMEGEN_FETCH_TIMEOUT", "soon"),
        ("MEMEGEN_MAX_SOURCE_BYTES", "-1"),
    ],
)
def test_invalid_settings(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        ServiceSettings.from_env()


def test_font_size_scales_with_width(context: RenderContext) -> None:
    assert context.font_size_for(800) == pytest.approx(48.0)
    assert context.font_size_for(1200) == pytest.approx(72.0)
    assert context.font_size_for(5) == 1.0


def test_font_size_keeps_fractional_points(context: RenderContext) -> None:
    assert context.font_size_for(810) == pytest.approx(48.6)
    assert context.font(context.font_size_for(810)).size == pytest.approx(48.6)


def test_missing_font_falls_back_to_default(tmp_path: Path) -> None:
    ctx = RenderContext.load(str(tmp_path / "missing.ttf"))
    assert ctx.font_bytes is None
    assert ctx.font(20).size == 20


def test_unparseable_font_is_a_configuration_error(tmp_path: Path) -> None:
    bad = tmp_path / "bad.ttf"
    bad.write_bytes(b"definitely not a font")
    with pytest.raises(ConfigurationError):
        RenderContext.load(str(bad))
