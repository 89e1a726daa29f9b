"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from texwrap.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, command: str = None, verbose: bool = False) -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session
        command: Engine command template recorded in the provenance header
        verbose: Also show DEBUG messages on the console

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Engine command": command} if command else None,
        console_level="DEBUG" if verbose else "INFO",
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_build_start(source_path: Path, command: str, passes: int) -> None:
    """Log start of a build with context."""
    _log_info(f"Starting build: {source_path.name}")
    _log_debug(f"  Source: {source_path}")
    _log_debug(f"  Command: {command}")
    _log_debug(f"  Passes: {passes}")


def log_build_result(result) -> None:
    """
    Log build result with diagnostics.

    Args:
        result: BuildResult from DocumentBuilder.build()
    """
    if result.success:
        _log_success(f"Build succeeded ({result.elapsed_s:.2f}s)")
        _log_debug(f"  PDF: {result.pdf_path}")
        if result.page_count is not None:
            _log_debug(f"  Pages: {result.page_count}")
    else:
        _log_error(f"Build failed ({result.elapsed_s:.2f}s)")

    # Errors are still reported on success, the engine is lenient
    for category, message in result.errors.items():
        first_line = message.strip().splitlines()[0] if message.strip() else ""
        if result.success:
            _log_warning(f"  {category}: {first_line}")
        else:
            _log_error(f"  {category}: {first_line}")

    # Full engine output, bypassing the format template to keep line layout
    if not result.success and result.log:
        logger.opt(raw=True).debug(f"\n{'=' * 80}\nENGINE OUTPUT:\n{'=' * 80}\n{result.log}\n")


def log_post_process_result(command: str, result) -> None:
    """Log outcome of a post-processing command."""
    if result.success:
        _log_success(f"Post-processing succeeded: {command}")
    else:
        _log_error(f"Post-processing failed: {command}")
        _log_error(f"  postProcessor: {result.errors.get('postProcessor', '')}")
