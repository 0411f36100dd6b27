"""
Macro expansion, whitespace normalization and argument tokenization.

These are the text transforms applied to user-supplied step fields
before they become process arguments. All functions are pure.
"""

from __future__ import annotations

import logging
import re
import shlex
from collections.abc import Mapping

logger = logging.getLogger(__name__)

# ${NAME} | $NAME | %NAME%
_MACRO_RE = re.compile(
    r"\$\{(?P<braced>[A-Za-z0-9_.]+)\}"
    r"|\$(?P<plain>[A-Za-z0-9_]+)"
    r"|%(?P<windows>[A-Za-z0-9_]+)%"
)

_WHITESPACE_RUN_RE = re.compile(r"[\t\r\n]+")


def normalize_whitespace(text: str) -> str:
    """Collapse every run of tabs, carriage returns and newlines to one space."""
    return _WHITESPACE_RUN_RE.sub(" ", text)


def replace_macro(text: str, variables: Mapping[str, str]) -> str:
    """Replace ``$NAME``, ``${NAME}`` and ``%NAME%`` with values from ``variables``.

    Placeholders with no matching variable are left as they are, so a
    later pass against another map can still resolve them.
    """
    if not text:
        return text

    def _sub(match: re.Match[str]) -> str:
        key = match.group("braced") or match.group("plain") or match.group("windows")
        value = variables.get(key)
        return match.group(0) if value is None else value

    return _MACRO_RE.sub(_sub, text)


def expand_macros(
    text: str,
    environment: Mapping[str, str],
    build_variables: Mapping[str, str],
) -> str:
    """Expand ``text`` against the environment, then the build variables.

    Build variables take precedence: an environment entry shadowed by a
    build variable of the same name is not used in the first pass.
    """
    visible_env = {k: v for k, v in environment.items() if k not in build_variables}
    expanded = replace_macro(text, visible_env)
    return replace_macro(expanded, build_variables)


def normalize(
    text: str,
    environment: Mapping[str, str],
    build_variables: Mapping[str, str],
) -> str:
    """Whitespace-normalize ``text`` and expand its macros."""
    return expand_macros(normalize_whitespace(text), environment, build_variables)


def tokenize(text: str | None) -> list[str]:
    """Split a command-line string into arguments.

    Whitespace separates tokens; single and double quotes group and are
    removed. Backslashes are kept literally so Windows paths survive.
    """
    if not text or not text.strip():
        return []

    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.escape = ""
    try:
        return list(lexer)
    except ValueError as e:
        # Unbalanced quote: hand the words through as typed
        logger.warning("Cannot tokenize %r (%s), splitting on whitespace", text, e)
        return text.split()


def format_command(args: list[str]) -> str:
    """Render an argument list for display, quoting arguments with spaces."""
    return " ".join(f'"{a}"' if (not a or any(c.isspace() for c in a)) else a for a in args)
