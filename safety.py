"""Lexical safety filter applied to user source before it reaches gcc."""

import logging

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Policy tables
# ---------------------------------------------------------------------------

# The only directives a snippet may use. The full list of GNU as pseudo-ops
# lives at https://sourceware.org/binutils/docs/as/Pseudo-Ops.html
# .fill, .rept, .skip and friends are left out: they can make the assembler
# emit arbitrarily large output.
# Order matters: removal is plain substring replacement, applied in turn.
SAFE_DIRECTIVES = (
    ".ascii", ".asciz", ".align", ".balign",
    ".byte", ".int", ".double", ".quad", ".octa", ".word",
)

# Comments that toggle the assembler's preprocessing state (#APP / #NO_APP).
FORBIDDEN_MARKERS = ("#NO_APP", "#APP")

DIRECTIVE_CHAR = "."

# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------


def strip_safe_directives(text):
    """Return text with every whitelisted directive token removed."""
    for directive in SAFE_DIRECTIVES:
        text = text.replace(directive, "")
    return text


def is_safe(text):
    """Return True if text uses no directive outside SAFE_DIRECTIVES.

    Any period left after the whitelisted directives are stripped counts as
    a directive, so a '.' inside a string constant is rejected as well. A
    real check would need a parser for the assembler's syntax.
    """
    remaining = strip_safe_directives(text)

    for marker in FORBIDDEN_MARKERS:
        if marker in remaining:
            logger.info("Rejected source containing %s marker", marker)
            return False

    if DIRECTIVE_CHAR in remaining:
        logger.info("Rejected source containing a non-whitelisted directive")
        return False

    return True
