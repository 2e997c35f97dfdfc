"""Unified diff helpers for changed-line attribution.

GitHub's `pulls/{pr}/files` API returns one unified diff per file in the
`patch` field. Coverage and warning annotations only care about lines that
the pull request introduced, so this module reduces a patch to the set of
new-file line numbers carried by `+` lines.
"""

from __future__ import annotations

import re

HUNK_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? \+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@.*$",
    re.ASCII,
)


def _strip_cr(line: str) -> str:
    if line.endswith("\r"):
        return line[:-1]
    return line


def parse_added_lines(patch: str | None) -> set[int]:
    """Return the 1-based new-file line numbers added or replaced by `patch`.

    Context lines advance the new-file counter without being recorded;
    deletions don't advance it. Anything before the first valid hunk header
    (including `--- a/x` / `+++ b/x`) is ignored, as are malformed `@@` lines.
    """
    added: set[int] = set()
    if not patch or not patch.strip():
        return added

    new_line = -1
    for raw in patch.split("\n"):
        line = _strip_cr(raw)

        if line.startswith("@@"):
            m = HUNK_RE.match(line)
            if m:
                new_line = int(m.group("new_start"))
            continue

        if new_line < 0:
            continue

        if not line:
            continue

        prefix = line[0]
        if prefix == "+":
            # "+0,0" only appears on whole-file deletions; line 0 doesn't exist.
            if new_line > 0:
                added.add(new_line)
            new_line += 1
            continue

        if prefix == " ":
            new_line += 1
            continue

        # "-" deletions, "\ No newline at end of file" and anything else.

    return added
