"""
Canonical form of program output used for comparison.

Both the captured output and the expected output go through `normalize`
before they are compared, so grading ignores surrounding whitespace,
blank lines, letter case and platform line endings.
"""

import re

LINE_SEPARATOR = "\n"

_LINE_BREAK = re.compile(r"\r\n|\n\r|\n|\r")
# Text is uppercased before this runs, so match the escape in either case
_TAB_ESCAPE = re.compile(r"\\t", re.IGNORECASE)


def normalize(text: str) -> str:
    """
    Normalize program output.

    Steps, in order: strip, uppercase, unify line endings, expand literal
    ``\\t`` escapes to four spaces, then strip every line and drop the
    empty ones.

    Args:
        text: Raw output.

    Returns:
        Normalized text. ``normalize(normalize(x)) == normalize(x)``.
    """
    text = text.strip().upper()
    text = _LINE_BREAK.sub(LINE_SEPARATOR, text)
    text = _TAB_ESCAPE.sub("    ", text)
    lines = (line.strip() for line in text.split(LINE_SEPARATOR))
    return LINE_SEPARATOR.join(line for line in lines if line)


def escape_line_endings(text: str) -> str:
    """Make CR/LF characters visible, for log output."""
    return text.replace("\r", "\\r").replace("\n", "\\n")
