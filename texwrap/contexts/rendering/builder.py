"""
Document Build Module

Stores source content in a file and renders it to PDF with an external
typesetting engine (pdflatex, lualatex, ...) run through the shell.

Derived paths, all relative to the source file:
    <source>.pdf                  rendered output
    <source>.out/.aux/.log        engine side-files, removed after each build
    <dir>/missfont.log            missing-font report, captured then removed
    <dir>/texput.log              fallback log when the input was not found, removed

Example:
    with DocumentBuilder() as doc:
        doc.save_source(tex)
        result = doc.build()
        if result:
            shutil.copy(result.pdf_path, "out.pdf")
        else:
            print(result.errors)
"""

import os
import subprocess
import tempfile
import time
import weakref
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from texwrap.contexts.rendering.command import materialize, validate_template
from texwrap.contexts.rendering.config import (
    default_passes,
    default_timeout,
    resolve_command,
    temp_dir,
)
from texwrap.contexts.rendering.logger import (
    _log_debug,
    _log_error,
    _log_warning,
    log_build_result,
    log_build_start,
    log_post_process_result,
)
from texwrap.utils.pdf_processing import page_count

TEMP_PREFIX = "textemp"
PDF_SUFFIX = ".pdf"

# Engine side-files created next to the source during a build
SIDE_FILE_SUFFIXES = [".out", ".aux", ".log"]
MISSING_FONTS_FILE = "missfont.log"
FALLBACK_LOG_FILE = "texput.log"

# Shell exit status for "command not found"
COMMAND_NOT_FOUND = 127

ENGINE_NOT_FOUND_MESSAGE = "Command not found, engine is not installed or not within the $PATH!"
STALE_PDF_MESSAGE = "Old PDF file could not be deleted"
PDF_MISSING_MESSAGE = "PDF file not found, build not started or failed?"
PDF_REMOVED_MESSAGE = "post-processing removed the PDF!"


@dataclass
class BuildResult:
    """
    Result of a build or post-processing run.

    Truthy iff success, so it can be used where a plain bool was expected.

    Attributes:
        success: Whether the output PDF exists after the run
        errors: Error category -> diagnostic ("pdf", "engine", "missingFonts", "postProcessor")
        log: Console output captured from the run (last engine pass for builds)
        pdf_path: Path to the output PDF (None if the run failed or it does not exist)
        page_count: Number of pages in the output (None if not available)
        passes: Number of commands actually invoked
        elapsed_s: Wall time of the run in seconds
    """

    success: bool
    errors: Dict[str, str] = field(default_factory=dict)
    log: str = ""
    pdf_path: Optional[Path] = None
    page_count: Optional[int] = None
    passes: int = 0
    elapsed_s: float = 0.0

    def __bool__(self) -> bool:
        return self.success


def _remove_if_exists(path: Path) -> bool:
    """
    Remove a file if present.

    Returns:
        True if the file is gone afterwards
    """
    if not path.exists():
        return True
    try:
        path.unlink()
    except OSError as e:
        _log_debug(f"Could not remove {path}: {e}")
        return False
    return True


def _create_temp_source() -> Path:
    """Create an empty, uniquely named source file in the temp directory."""
    directory = temp_dir()
    directory.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=directory)
    os.close(fd)
    return Path(name)


def _join_lines(output: Optional[str]) -> str:
    """Normalize captured output to lines joined by a single newline."""
    return "\n".join(output.splitlines()) if output else ""


class DocumentBuilder:
    """
    Owns one source file and renders it with an external engine.

    If no source path is given a temporary file is created and removed again on
    close() (or when the builder is garbage collected). A given path is used
    as-is and never removed by the builder.

    Args:
        source_path: File to store the source in (default: new temporary file)
        command: Engine preset name or command template with %dir% and %file%
                 (default: TEXWRAP_COMMAND, then the pdflatex preset)
        passes: Engine invocations per build (default: TEXWRAP_PASSES, then 3)
        timeout: Per-invocation timeout in seconds (default: TEXWRAP_TIMEOUT, then none)
        quote_paths: Shell-quote substituted paths (default: False, verbatim)
    """

    def __init__(
        self,
        source_path: Optional[Union[str, Path]] = None,
        command: Optional[str] = None,
        passes: Optional[int] = None,
        timeout: Optional[float] = None,
        quote_paths: bool = False,
    ):
        self._command = validate_template(resolve_command(command))

        passes = default_passes() if passes is None else passes
        if passes < 1:
            raise ValueError(f"passes must be at least 1, got: {passes}")
        self.passes = passes
        self.timeout = default_timeout() if timeout is None else timeout
        self.quote_paths = quote_paths

        self._errors: Dict[str, str] = {}
        self._log = ""

        # created last so a rejected configuration leaves no file behind
        self._is_temporary = source_path is None
        if source_path is None:
            source_path = _create_temp_source()
        self._source_path = Path(os.path.abspath(source_path))

        self._finalizer = (
            weakref.finalize(self, _remove_if_exists, self._source_path)
            if self._is_temporary
            else None
        )

    def __repr__(self) -> str:
        return (
            f"DocumentBuilder(source_path={str(self._source_path)!r}, "
            f"is_temporary={self._is_temporary})"
        )

    # Scoped lifecycle

    def __enter__(self) -> "DocumentBuilder":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Remove the source file if it was auto-generated. Safe to call repeatedly."""
        if self._finalizer is not None:
            self._finalizer()

    # Accessors

    @property
    def source_path(self) -> Path:
        return self._source_path

    @property
    def is_temporary(self) -> bool:
        return self._is_temporary

    @property
    def pdf_path(self) -> Path:
        """Path the output is expected at, whether or not it exists."""
        return Path(f"{self._source_path}{PDF_SUFFIX}")

    @property
    def output_file(self) -> Optional[Path]:
        """Output path if the PDF currently exists on disk, else None."""
        pdf_path = self.pdf_path
        return pdf_path if pdf_path.exists() else None

    @property
    def errors(self) -> Dict[str, str]:
        return self._errors

    @property
    def log(self) -> str:
        return self._log

    @property
    def command(self) -> str:
        return self._command

    @command.setter
    def command(self, cmd: str) -> None:
        self._command = validate_template(resolve_command(cmd))

    def get_command(self) -> str:
        return self.command

    def set_command(self, cmd: str) -> "DocumentBuilder":
        """
        Set a custom engine command.

        May contain the full engine path if it is not within $PATH, or wrap the
        engine (e.g. texfot). %dir% and %file% are replaced with the target
        directory and the source path. Engine availability is not checked.
        """
        self.command = cmd
        return self

    def get_errors(self) -> Dict[str, str]:
        return self.errors

    def get_log(self) -> str:
        return self.log

    def get_source_filename(self) -> Path:
        return self.source_path

    def get_output_file(self) -> Optional[Path]:
        return self.output_file

    # Source file

    def save_source(self, content: str) -> bool:
        """
        Overwrite the source file with content.

        Returns:
            True if the file was written, False on any OS error
        """
        try:
            self._source_path.write_text(content, encoding="utf-8")
        except OSError as e:
            _log_error(f"Could not write source {self._source_path}: {e}")
            return False
        return True

    def delete_source(self) -> None:
        """Delete the source file if it exists."""
        if self._source_path.exists():
            self._source_path.unlink()

    # Rendering

    def _materialize(self, template: str, file: Path) -> str:
        return materialize(template, self._source_path.parent, file, quote=self.quote_paths)

    def _run(self, command: str, capture: bool) -> Tuple[int, str]:
        """
        Run a command through the shell in the source directory.

        Raises:
            subprocess.TimeoutExpired: If the timeout is set and exceeded
        """
        result = subprocess.run(
            command,
            shell=True,
            cwd=self._source_path.parent,
            stdout=subprocess.PIPE if capture else subprocess.DEVNULL,
            # stderr joins the log so shell errors are visible alongside engine output
            stderr=subprocess.STDOUT if capture else subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",  # engines emit latin-1 font metadata
            timeout=self.timeout,
        )
        return result.returncode, result.stdout if capture else ""

    def _result(self, success: bool, start_time: float, passes: int, log: str) -> BuildResult:
        pdf_path = self.output_file if success else None
        return BuildResult(
            success=success,
            errors=dict(self._errors),
            log=log,
            pdf_path=pdf_path,
            page_count=page_count(pdf_path) if pdf_path else None,
            passes=passes,
            elapsed_s=time.time() - start_time,
        )

    def _remove_side_files(self) -> None:
        """Best-effort cleanup of everything the engine leaves next to the source."""
        for suffix in SIDE_FILE_SUFFIXES:
            _remove_if_exists(Path(f"{self._source_path}{suffix}"))

        # good hint for missing font packages, not reflected in the exit code
        missing_fonts = self._source_path.parent / MISSING_FONTS_FILE
        if missing_fonts.exists():
            try:
                self._errors["missingFonts"] = missing_fonts.read_text(
                    encoding="utf-8", errors="replace"
                )
            except OSError as e:
                _log_warning(f"Could not read {missing_fonts}: {e}")
            _remove_if_exists(missing_fonts)

        # written when the engine could not find the input file at all
        _remove_if_exists(self._source_path.parent / FALLBACK_LOG_FILE)

    def build(self) -> BuildResult:
        """
        Render the source file to <source>.pdf.

        The engine is run `passes` times so cross-references (labels, TOC,
        citations) can settle; only the output of the last pass is kept.

        Returns:
            BuildResult, successful iff the PDF exists afterwards. errors may be
            non-empty on success since engines continue past non-fatal problems.
        """
        self._errors = {}
        start_time = time.time()
        pdf_path = self.pdf_path

        # stale output must never pass for fresh output
        if not _remove_if_exists(pdf_path):
            self._errors["pdf"] = STALE_PDF_MESSAGE
            result = self._result(False, start_time, passes=0, log="")
            log_build_result(result)
            return result

        command = self._materialize(self._command, self._source_path)
        log_build_start(self._source_path, command, self.passes)

        returncode = None
        output = ""
        passes_run = 0
        try:
            for i in range(self.passes):
                passes_run += 1
                is_last = i == self.passes - 1
                returncode, output = self._run(command, capture=is_last)
        except subprocess.TimeoutExpired:
            _log_warning(f"Engine timed out on pass {passes_run}/{self.passes}")
            self._errors["engine"] = f"Engine timed out after {self.timeout}s"
            self._log = ""
            returncode = None
            # a killed pass may leave a truncated or unconverged PDF
            _remove_if_exists(pdf_path)

        if returncode is not None:
            self._log = _join_lines(output)

            if returncode == COMMAND_NOT_FOUND:
                self._errors["engine"] = ENGINE_NOT_FOUND_MESSAGE
                result = self._result(False, start_time, passes=passes_run, log=self._log)
                log_build_result(result)
                return result

            # exit code > 0 or no PDF, e.g. lualatex exits 0 on an unwritable cache path
            if returncode != 0 or not pdf_path.exists():
                self._errors["engine"] = self._log

        self._remove_side_files()

        result = self._result(
            pdf_path.exists(), start_time, passes=passes_run, log=self._log
        )
        log_build_result(result)
        return result

    def post_process(self, command: str) -> BuildResult:
        """
        Run a follow-up command on the rendered PDF.

        %dir% is replaced with the target directory and %file% with the PDF
        path. The command is not run at all if there is no PDF yet.

        Returns:
            BuildResult, successful iff the command exited 0 and the PDF still exists
        """
        self._errors = {}
        start_time = time.time()
        pdf_path = self.pdf_path

        if not pdf_path.exists():
            self._errors["postProcessor"] = PDF_MISSING_MESSAGE
            result = self._result(False, start_time, passes=0, log="")
            log_post_process_result(command, result)
            return result

        post_command = self._materialize(command, pdf_path)
        _log_debug(f"Post-processing: {post_command}")

        output = ""
        try:
            returncode, output = self._run(post_command, capture=True)
            output = _join_lines(output)
        except subprocess.TimeoutExpired:
            returncode = None
            self._errors["postProcessor"] = f"Post-processor timed out after {self.timeout}s"

        if returncode is not None and returncode != 0:
            # complete output for debugging
            self._errors["postProcessor"] = output
        elif returncode is not None and not pdf_path.exists():
            self._errors["postProcessor"] = PDF_REMOVED_MESSAGE

        result = self._result(not self._errors, start_time, passes=1, log=output)
        log_post_process_result(command, result)
        return result
