"""
Command Template Module

Turns a command template into the shell command line handed to the engine.

Templates carry two placeholders:
    %dir%   - directory of the source file (engine output directory)
    %file%  - path of the source file, without any output suffix

Substitution is plain text replacement. Paths are inserted verbatim unless
quoting is requested, so paths containing shell-special characters need
quote=True.

Example:
    >>> materialize("engine --batch --out=%dir% %file%", "/tmp", "/tmp/doc123")
    'engine --batch --out=/tmp /tmp/doc123'
"""

import shlex
from pathlib import Path
from typing import List, Union

from texwrap.contexts.rendering.exceptions import InvalidCommandTemplateError

DIR_PLACEHOLDER = "%dir%"
FILE_PLACEHOLDER = "%file%"
PLACEHOLDERS = [DIR_PLACEHOLDER, FILE_PLACEHOLDER]


def missing_placeholders(template: str) -> List[str]:
    """Return the placeholders not present in template."""
    return [placeholder for placeholder in PLACEHOLDERS if placeholder not in template]


def has_placeholder(template: str) -> bool:
    """True if template contains at least one placeholder."""
    return any(placeholder in template for placeholder in PLACEHOLDERS)


def validate_template(template: str) -> str:
    """
    Check that a command template carries both placeholders.

    Does not check whether the engine binary exists.

    Args:
        template: Command template to check

    Returns:
        The template, unchanged

    Raises:
        InvalidCommandTemplateError: If the template is empty or a placeholder is missing
    """
    if not template or not template.strip():
        raise InvalidCommandTemplateError("Command template is empty", template=template)

    missing = missing_placeholders(template)
    if missing:
        raise InvalidCommandTemplateError(
            "Command template must contain both %dir% and %file%",
            template=template,
            missing=missing,
        )

    return template


def materialize(
    template: str,
    directory: Union[str, Path],
    file: Union[str, Path],
    quote: bool = False,
) -> str:
    """
    Substitute the placeholders in a command template.

    Args:
        template: Command template containing %dir% and/or %file%
        directory: Value for %dir%
        file: Value for %file%
        quote: Shell-quote the substituted values (default: False, verbatim)

    Returns:
        Command line ready to be run through the shell
    """
    directory = str(directory)
    file = str(file)

    if quote:
        directory = shlex.quote(directory)
        file = shlex.quote(file)

    return template.replace(DIR_PLACEHOLDER, directory).replace(FILE_PLACEHOLDER, file)
