"""Post-processing of recognized text before it becomes an overlay.

Maths
-----
The maths service answers with bare LaTeX, but some responses already carry
delimiters.  Any outer ``$ ... $``, ``$$ ... $$``, ``\\( ... \\)`` or
``\\[ ... \\]`` pair is removed first, then the expression is always wrapped
as inline maths, ``\\( ... \\)``, so overlays are never double-delimited.

Prose
-----
Recognizers may pad their answer with whitespace or blank lines.  Lines are
right-stripped and runs of blank lines collapse to a single one.
"""

import re
from typing import Optional

_OUTER_DELIMITERS = [
    re.compile(r"^\$\$((?:(?!\$\$).)*)\$\$$", re.DOTALL),
    re.compile(r"^\$([^$]*)\$$"),
    re.compile(r"^\\\(((?:(?!\\\)).)*)\\\)$", re.DOTALL),
    re.compile(r"^\\\[((?:(?!\\\]).)*)\\\]$", re.DOTALL),
]

_BLANK_RUN = re.compile(r"\n{3,}")


def strip_math_delimiters(latex: str) -> str:
    """Remove one outer pair of math delimiters, if present."""
    text = latex.strip()
    for pattern in _OUTER_DELIMITERS:
        m = pattern.match(text)
        if m:
            return m.group(1).strip()
    return text


def wrap_inline_math(latex: str) -> Optional[str]:
    """Wrap *latex* as ``\\(latex\\)``; ``None`` when there is no expression."""
    inner = strip_math_delimiters(latex)
    if not inner:
        return None
    return "\\(" + inner + "\\)"


def clean_prose_text(text: str) -> Optional[str]:
    """Normalise whitespace in recognized prose; ``None`` if nothing is left."""
    lines = [line.rstrip() for line in text.strip().split("\n")]
    cleaned = _BLANK_RUN.sub("\n\n", "\n".join(lines))
    return cleaned or None
