"""Unit tests for the build_pdf.py command line interface."""

import importlib.util
import sys
from pathlib import Path

import pytest
from loguru import logger
from typer.testing import CliRunner

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "build_pdf.py"

_spec = importlib.util.spec_from_file_location("build_pdf", SCRIPT_PATH)
build_pdf = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(build_pdf)

runner = CliRunner()


@pytest.fixture
def cli_logs(tmp_path, monkeypatch):
    """Send session logs to tmp_path and restore the default sink afterwards."""
    logs_path = tmp_path / "logs"
    monkeypatch.setattr(build_pdf, "LOGS_PATH", logs_path)
    yield logs_path
    logger.remove()
    logger.add(sys.stderr)


@pytest.mark.unit
def test_command_shows_materialized_command():
    """Test printing the substituted command line."""
    result = runner.invoke(
        build_pdf.app, ["command", "/tmp/doc123", "-e", "engine --batch --out=%dir% %file%"]
    )

    assert result.exit_code == 0
    assert result.output.strip() == "engine --batch --out=/tmp /tmp/doc123"


@pytest.mark.unit
def test_command_unknown_engine():
    """Test error exit for an unknown preset."""
    result = runner.invoke(build_pdf.app, ["command", "/tmp/doc123", "-e", "troff"])

    assert result.exit_code == 1


@pytest.mark.unit
def test_engines_lists_presets():
    """Test listing the packaged presets."""
    result = runner.invoke(build_pdf.app, ["engines"])

    assert result.exit_code == 0
    assert "pdflatex" in result.output
    assert "lualatex" in result.output


@pytest.mark.unit
def test_build_writes_pdf(tmp_path, isolated_env, engine_command, cli_logs):
    """Test a full CLI build with the stand-in engine."""
    source = tmp_path / "paper.tex"
    source.write_text(r"\documentclass{article}\begin{document}Hi\end{document}")

    result = runner.invoke(build_pdf.app, ["build", str(source), "-e", engine_command("ok")])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "paper.pdf").read_bytes().startswith(b"%PDF-")
    assert list(isolated_env.glob("textemp*.pdf")) == []
    assert list(cli_logs.glob("build_*/render.log"))


@pytest.mark.unit
def test_build_failure_exit_code(tmp_path, engine_command, cli_logs):
    """Test that a failed build exits 1 and writes no PDF."""
    source = tmp_path / "paper.tex"
    source.write_text("broken")

    result = runner.invoke(build_pdf.app, ["build", str(source), "-e", engine_command("fail")])

    assert result.exit_code == 1
    assert "engine" in result.output
    assert not (tmp_path / "paper.pdf").exists()


@pytest.mark.unit
def test_build_missing_source(tmp_path):
    """Test error exit when the source file does not exist."""
    result = runner.invoke(build_pdf.app, ["build", str(tmp_path / "nope.tex")])

    assert result.exit_code == 1


@pytest.mark.unit
def test_build_stdin_requires_output():
    """Test that reading from stdin needs an explicit output path."""
    result = runner.invoke(build_pdf.app, ["build", "-"], input="content")

    assert result.exit_code == 1
