"""Unit tests for engine preset loading and command resolution."""

import pytest

from texwrap.contexts.rendering.config import (
    default_passes,
    default_timeout,
    load_engine_presets,
    resolve_command,
    temp_dir,
)
from texwrap.contexts.rendering.exceptions import UnknownEnginePresetError


@pytest.mark.unit
def test_load_engine_presets_flattens_yaml():
    """Test that packaged presets load as name -> command."""
    presets = load_engine_presets()

    assert {"pdflatex", "lualatex", "xelatex", "texfot"} <= set(presets)
    for template in presets.values():
        assert "%dir%" in template
        assert "%file%" in template


@pytest.mark.unit
def test_load_engine_presets_custom_file(tmp_path):
    """Test loading presets from a user-supplied file."""
    config = tmp_path / "presets.yaml"
    config.write_text("engines:\n  tectonic:\n    command: tectonic --outdir %dir% %file%\n")

    presets = load_engine_presets(config)

    assert presets == {"tectonic": "tectonic --outdir %dir% %file%"}


@pytest.mark.unit
def test_resolve_command_default_is_pdflatex():
    """Test the default engine command."""
    command = resolve_command()

    assert command == (
        "pdflatex --file-line-error --interaction=nonstopmode --output-directory=%dir% %file%"
    )


@pytest.mark.unit
def test_resolve_command_from_environment(monkeypatch):
    """Test that TEXWRAP_COMMAND overrides the default engine."""
    monkeypatch.setenv("TEXWRAP_COMMAND", "lualatex")

    assert resolve_command().startswith("lualatex ")


@pytest.mark.unit
def test_resolve_command_passes_templates_through():
    """Test that literal templates are not looked up as presets."""
    template = "latexmk -pdf -outdir=%dir% %file%"

    assert resolve_command(template) == template


@pytest.mark.unit
def test_resolve_command_unknown_preset():
    """Test error for a name that is neither a preset nor a template."""
    with pytest.raises(UnknownEnginePresetError) as exc_info:
        resolve_command("troff")

    assert exc_info.value.name == "troff"
    assert "pdflatex" in exc_info.value.available


@pytest.mark.unit
def test_defaults_from_environment(monkeypatch, tmp_path):
    """Test passes, timeout and temp dir environment settings."""
    assert default_passes() == 3
    assert default_timeout() is None

    monkeypatch.setenv("TEXWRAP_PASSES", "2")
    monkeypatch.setenv("TEXWRAP_TIMEOUT", "30")
    monkeypatch.setenv("TEXWRAP_TEMP_DIR", str(tmp_path))

    assert default_passes() == 2
    assert default_timeout() == 30.0
    assert temp_dir() == tmp_path
