"""
Diff Line Mapper — GitHub PR Review

PURPOSE:
    Walk a unified-diff patch (as GitHub returns it in the "patch" field of
    /pulls/{n}/files) and pair every ADDED line with the line number it will
    have in the file after the change is applied.

    Only the "+" side matters here. Issues are reported against the new file
    because that is where a reviewer leaves inline comments.

CALLED BY:
    code_analyzer.analyze_files() — once per changed file.

LINE COUNTING RULES:
    - "@@ -a,b +c,d @@" resets the counter to c - 1, so the first counted
      line after the header becomes line c. The header itself is not counted.
    - "+..." (but not "+++") is an added line: count it and yield it.
    - "-..." is a removed line: it does not exist on the new side.
    - Anything else is treated as a context line: count it, don't yield it.

    A header that does not parse leaves the counter where it was and the
    rest of the patch is still scanned.
"""

import re
from typing import Iterator, NamedTuple, Optional

from pr_review.logging_config import get_logger

logger = get_logger(__name__)


BINARY_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "pdf", "zip", "exe", "bin")

_BINARY_FILE_RE = re.compile(
    r"\.(" + "|".join(BINARY_EXTENSIONS) + r")$", re.IGNORECASE
)

# Only the new-side start is needed. Counts are optional in unified diffs
# ("@@ -3 +3 @@" is a single-line hunk).
_HUNK_HEADER_RE = re.compile(r"@@ -\d+,?\d* \+(\d+)")


class AddedLine(NamedTuple):
    content: str
    filename: str
    line: int


def is_binary_file(filename: str) -> bool:
    """Return True for file types whose patches are never scanned."""
    return bool(_BINARY_FILE_RE.search(filename))


def parse_hunk_new_start(header: str) -> Optional[int]:
    """Return the new-file start line of a hunk header, or None if it doesn't parse."""
    match = _HUNK_HEADER_RE.search(header)
    if match is None:
        return None
    return int(match.group(1))


def iter_added_lines(patch: Optional[str], filename: str) -> Iterator[AddedLine]:
    """
    Yield an AddedLine for every "+" line in the patch.

    Args:
        patch: Raw unified-diff text for one file. None or "" yields nothing.
        filename: The file the patch belongs to, carried into each AddedLine.

    Yields:
        AddedLine(content, filename, line) with the leading "+" stripped and
        line being the 1-based position in the post-change file.
    """
    if not patch or is_binary_file(filename):
        return

    current_line = 0

    for raw in patch.split("\n"):
        if raw.startswith("@@"):
            new_start = parse_hunk_new_start(raw)
            if new_start is None:
                logger.debug(
                    "Unparseable hunk header in %s, keeping line %d: %r",
                    filename, current_line, raw,
                )
            else:
                current_line = new_start - 1
            continue

        if raw.startswith("+") and not raw.startswith("+++"):
            current_line += 1
            yield AddedLine(raw[1:], filename, current_line)
        elif not raw.startswith("-"):
            current_line += 1
