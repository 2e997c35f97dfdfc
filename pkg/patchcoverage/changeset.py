"""Build per-file changed-line maps from change records or fallback text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from .diff_parser import parse_added_lines
from .records import KNOWN_STATUSES, ChangeRecord, coerce_record

ChangeMap = dict[str, set[int]]
LogSink = Callable[[str], None]

_LINE_TOKEN_RE = re.compile(r"^[+-]?\d+$", re.ASCII)


def _discard(message: str) -> None:
    return None


def parse_line_token(token: str) -> int | None:
    """Parse one fallback line-number token; `None` unless it is a positive integer."""
    text = token.strip()
    if not _LINE_TOKEN_RE.match(text):
        return None
    value = int(text)
    if value <= 0:
        return None
    return value


@dataclass
class ChangeSetBuilder:
    """Applies the per-file policy and assembles the path -> lines map.

    `log` receives informational messages, `warn` receives per-record
    failures (defaults to `log`). Both default to discarding output.
    """

    log: LogSink | None = None
    warn: LogSink | None = None
    verbose_renames: bool = True
    prefix: str = ""

    def __post_init__(self) -> None:
        if self.log is None:
            self.log = _discard
        if self.warn is None:
            self.warn = self.log

    def _notice(self, message: str) -> None:
        self.log(f"{self.prefix}{message}")

    def _warning(self, message: str) -> None:
        self.warn(f"{self.prefix}{message}")

    def lines_for(self, record: ChangeRecord) -> set[int]:
        """Changed new-file lines for one record; empty when the record is skipped."""
        if record.is_removed:
            return set()

        if not record.new_path:
            raise ValueError("filename is required unless the file was removed")

        if record.status and record.status not in KNOWN_STATUSES:
            self._notice(f"Unknown status '{record.status}' for {record.new_path}; treating as modified")

        if not record.has_patch:
            previous = f", previous={record.previous_path}" if record.previous_path else ""
            self._notice(
                "Skipping file without patch (possibly binary/large): "
                f"{record.new_path} (status={record.status}{previous})"
            )
            return set()

        if self.verbose_renames and record.is_rename:
            self._notice(
                f"Processing {record.status} file: {record.new_path} (previous={record.previous_path})"
            )

        return parse_added_lines(record.patch)

    def build(self, records: Iterable[ChangeRecord | Mapping[str, Any]] | None) -> ChangeMap:
        """Map each file's new path to its changed lines.

        Removed files, files without a patch and patches without `+` lines
        produce no entry. Renames and copies are keyed by the new path.
        """
        changed: ChangeMap = {}
        for index, item in enumerate(records or ()):
            try:
                record = coerce_record(item)
                lines = self.lines_for(record)
            except Exception as exc:
                # Isolated per file: the record is omitted and the loop continues.
                self._warning(f"Skipping unreadable change record #{index}: {exc}")
                continue

            if lines:
                changed[record.new_path] = lines

        self._notice(f"Loaded changed lines for {len(changed)} file(s)")
        return changed

    def build_from_text(self, raw: str | None, source: str = "fallback text") -> ChangeMap:
        """Parse `path:1,2,3;other/path:4` into a change map.

        Entries without `:` are skipped; bad or non-positive line tokens are
        dropped one by one. Entries need a path and at least one valid line.
        """
        if raw is None or not raw.strip():
            return {}

        changed: ChangeMap = {}
        for entry in raw.split(";"):
            path, sep, numbers = entry.partition(":")
            if not sep:
                continue
            path = path.strip()
            lines = set()
            for token in numbers.split(","):
                line = parse_line_token(token)
                if line is not None:
                    lines.add(line)
            if path and lines:
                changed[path] = lines

        self._notice(f"Parsed {len(changed)} file(s) from {source}")
        return changed


def build_change_map(
    records: Iterable[ChangeRecord | Mapping[str, Any]] | None,
    log: LogSink | None = None,
) -> ChangeMap:
    """Build a change map from records with the default policy."""
    return ChangeSetBuilder(log=log).build(records)


def parse_changed_lines_text(raw: str | None, log: LogSink | None = None) -> ChangeMap:
    """Build a change map from fallback text with the default policy."""
    return ChangeSetBuilder(log=log).build_from_text(raw)
