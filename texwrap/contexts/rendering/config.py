"""
Rendering Configuration

Reads builder defaults from the environment (optionally via a .env file) and
resolves named engine presets from engine_presets.yaml.

Environment:
    TEXWRAP_COMMAND              Default command template (default: pdflatex preset)
    TEXWRAP_PASSES               Convergence passes per build (default: 3)
    TEXWRAP_TIMEOUT              Per-pass timeout in seconds (default: none)
    TEXWRAP_TEMP_DIR             Directory for temporary source files (default: system temp)
    TEXWRAP_LOGS_PATH            Root for CLI session logs (default: outs/logs)
    TEXWRAP_ENGINE_PRESETS_PATH  Preset file (default: packaged engine_presets.yaml)

Examples:
    >>> resolve_command("lualatex")
    'lualatex --file-line-error --interaction=nonstopmode --output-directory=%dir% %file%'

    >>> resolve_command("latexmk -pdf -outdir=%dir% %file%")
    'latexmk -pdf -outdir=%dir% %file%'
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

from texwrap.contexts.rendering.command import has_placeholder
from texwrap.contexts.rendering.exceptions import UnknownEnginePresetError

load_dotenv()

DEFAULT_ENGINE = "pdflatex"
DEFAULT_PASSES = 3

ENGINE_PRESETS_PATH = Path(
    os.getenv(
        "TEXWRAP_ENGINE_PRESETS_PATH",
        Path(__file__).resolve().parents[2] / "configs" / "engine_presets.yaml",
    )
)
LOGS_PATH = Path(os.getenv("TEXWRAP_LOGS_PATH", "outs/logs"))


def load_engine_presets(config_path: Path = None) -> Dict[str, str]:
    """
    Load engine_presets.yaml and flatten it to a name -> command mapping.

    Collapses nested structure: engines.pdflatex.command -> pdflatex

    Args:
        config_path: Optional path to preset file (defaults to ENGINE_PRESETS_PATH)

    Returns:
        Dict mapping preset names to command templates
    """
    if config_path is None:
        config_path = ENGINE_PRESETS_PATH

    nested = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    return {name: preset["command"] for name, preset in nested["engines"].items()}


def resolve_command(engine: Optional[str] = None, config_path: Path = None) -> str:
    """
    Resolve an engine preset name or literal command template.

    Args:
        engine: Preset name, or a command template containing %dir%/%file%.
                None falls back to TEXWRAP_COMMAND, then the pdflatex preset.
        config_path: Optional preset file

    Returns:
        Command template

    Raises:
        UnknownEnginePresetError: If engine is neither a preset nor a template
    """
    if engine is None:
        engine = os.getenv("TEXWRAP_COMMAND") or DEFAULT_ENGINE

    if has_placeholder(engine):
        return engine

    presets = load_engine_presets(config_path)
    if engine not in presets:
        raise UnknownEnginePresetError(engine, available=list(presets))

    return presets[engine]


def default_passes() -> int:
    """Convergence passes per build from TEXWRAP_PASSES."""
    return int(os.getenv("TEXWRAP_PASSES", DEFAULT_PASSES))


def default_timeout() -> Optional[float]:
    """Per-pass timeout from TEXWRAP_TIMEOUT, None when unset."""
    value = os.getenv("TEXWRAP_TIMEOUT")
    return float(value) if value else None


def temp_dir() -> Path:
    """Directory for auto-generated source files."""
    return Path(os.getenv("TEXWRAP_TEMP_DIR") or tempfile.gettempdir())
