"""Glob to regular expression conversion.

Deleted files can no longer be expanded by a filesystem glob, so the glob
patterns recorded for each target are converted into regular expressions
and matched against the deleted paths instead.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional, Pattern

logger = logging.getLogger("projgen.impact.glob")

_ESCAPED = set("/$^+.()=!|")


def glob_to_regex(
    glob: str,
    extended: bool = False,
    globstar: bool = False,
    flags: str = "",
) -> str:
    """Convert a glob pattern into a regular expression string.

    Args:
        glob: The glob pattern.
        extended: Support ``?``, ``[...]`` classes and ``{a,b}`` alternation.
        globstar: ``**`` spans directories and ``*`` stops at ``/``. Without it
            every ``*`` matches anything, including ``/``.
        flags: ``"g"`` leaves the expression unanchored.

    Examples:
        >>> glob_to_regex("Sources/*.swift")
        '^Sources\\\\/.*\\\\.swift$'
        >>> glob_to_regex("a/**/b", globstar=True)
        '^a\\\\/((?:[^/]*(?:\\\\/|$))*)b$'
    """
    out = []
    in_group = False
    i = 0
    length = len(glob)

    while i < length:
        c = glob[i]

        if c in _ESCAPED:
            out.append("\\" + c)
        elif c == "?":
            out.append("." if extended else "\\?")
        elif c in "[]":
            out.append(c if extended else "\\" + c)
        elif c == "{":
            if extended:
                in_group = True
                out.append("(")
            else:
                out.append("\\{")
        elif c == "}":
            if extended:
                in_group = False
                out.append(")")
            else:
                out.append("\\}")
        elif c == ",":
            out.append("|" if in_group else "\\,")
        elif c == "*":
            star_count = 1
            while i + 1 < length and glob[i + 1] == "*":
                star_count += 1
                i += 1
            prev_char = glob[i - star_count] if i - star_count >= 0 else None
            next_char = glob[i + 1] if i + 1 < length else None

            if not globstar:
                out.append(".*")
            else:
                is_globstar = (
                    star_count > 1
                    and prev_char in ("/", None)
                    and next_char in ("/", None)
                )
                if is_globstar:
                    out.append("((?:[^/]*(?:\\/|$))*)")
                    if next_char == "/":
                        i += 1
                else:
                    out.append("([^/]*)")
        else:
            out.append(c)
        i += 1

    expression = "".join(out)
    if "g" not in flags:
        expression = "^" + expression + "$"
    return expression


class PatternCache:
    """Compiles each glob once per run.

    Patterns that do not compile are logged once and never match.
    """

    def __init__(self) -> None:
        self._compiled: Dict[tuple, Optional[Pattern[str]]] = {}

    def compile(
        self,
        glob: str,
        extended: bool = True,
        globstar: bool = True,
        flags: str = "",
    ) -> Optional[Pattern[str]]:
        key = (glob, extended, globstar, flags)
        if key not in self._compiled:
            expression = glob_to_regex(glob, extended=extended, globstar=globstar, flags=flags)
            try:
                self._compiled[key] = re.compile(expression)
            except re.error as exc:
                logger.warning("Error creating regex for pattern %s: %s", expression, exc)
                self._compiled[key] = None
        return self._compiled[key]

    def matches(self, glob: str, path: str, flags: str = "") -> bool:
        pattern = self.compile(glob, flags=flags)
        return pattern is not None and pattern.search(path) is not None

    def __len__(self) -> int:
        return len(self._compiled)
