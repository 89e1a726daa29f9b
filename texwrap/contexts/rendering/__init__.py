"""
Rendering Context

Responsibilities:
- Persists source content to a (possibly temporary) file
- Runs the external engine for a fixed number of convergence passes
- Cleans up engine side-files and captures diagnostics
- Runs optional post-processing commands on the rendered PDF

Owns: source file lifecycle, engine invocation, output detection
Never: Parses or modifies source content
"""

from texwrap.contexts.rendering.builder import BuildResult, DocumentBuilder
from texwrap.contexts.rendering.command import materialize
from texwrap.contexts.rendering.config import load_engine_presets, resolve_command
from texwrap.contexts.rendering.exceptions import (
    InvalidCommandTemplateError,
    UnknownEnginePresetError,
)

__all__ = [
    "BuildResult",
    "DocumentBuilder",
    "InvalidCommandTemplateError",
    "UnknownEnginePresetError",
    "load_engine_presets",
    "materialize",
    "resolve_command",
]
