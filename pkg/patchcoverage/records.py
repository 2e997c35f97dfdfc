"""Per-file change records as delivered by a pull request files listing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

ADDED = "added"
MODIFIED = "modified"
REMOVED = "removed"
RENAMED = "renamed"
COPIED = "copied"
CHANGED = "changed"
UNCHANGED = "unchanged"

KNOWN_STATUSES = {ADDED, MODIFIED, REMOVED, RENAMED, COPIED, CHANGED, UNCHANGED}
RENAME_STATUSES = {RENAMED, COPIED}


def normalize_path(path: object) -> str:
    """Normalize path separators to `/`; `None` becomes the empty string."""
    if path is None:
        return ""
    return str(path).replace("\\", "/")


def normalize_status(status: object) -> str:
    """Lower-case status; `None` becomes the empty string."""
    if status is None:
        return ""
    return str(status).strip().lower()


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value


@dataclass(frozen=True)
class ChangeRecord:
    """One file of a change set."""

    new_path: str
    previous_path: str = ""
    status: str = MODIFIED
    patch: str | None = None

    def __post_init__(self) -> None:
        # Frozen dataclass: normalize through object.__setattr__.
        object.__setattr__(self, "new_path", normalize_path(self.new_path))
        object.__setattr__(self, "previous_path", normalize_path(self.previous_path))
        object.__setattr__(self, "status", normalize_status(self.status))

    @property
    def is_removed(self) -> bool:
        return self.status == REMOVED

    @property
    def is_rename(self) -> bool:
        return self.status in RENAME_STATUSES and bool(self.previous_path)

    @property
    def has_patch(self) -> bool:
        return bool(self.patch and self.patch.strip())

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ChangeRecord":
        """Build a record from a GitHub file entry or a camel/snake-case mapping."""
        if not isinstance(raw, Mapping):
            raise ValueError("change record must be an object")

        new_path = _optional_str(
            _first_present(raw, "filename", "newPath", "new_path"),
            "filename",
        )
        previous_path = _optional_str(
            _first_present(raw, "previous_filename", "previousPath", "previous_path"),
            "previous_filename",
        )
        status = _optional_str(raw.get("status"), "status")
        patch = _optional_str(raw.get("patch"), "patch")

        record = cls(
            new_path=new_path or "",
            previous_path=previous_path or "",
            status=status if status is not None else MODIFIED,
            patch=patch,
        )
        if not record.new_path and not record.is_removed:
            raise ValueError("filename is required unless the file was removed")
        return record


def records_from_payload(payload: Any) -> list[dict]:
    """Flatten a files listing into a list of file entries.

    Accepts a single page (list of objects) or the `gh api --paginate --slurp`
    shape (list of pages). Anything that isn't an object is dropped.
    """
    if isinstance(payload, Mapping):
        payload = payload.get("files", [])
    if not isinstance(payload, list):
        return []

    files: list[dict] = []
    for item in payload:
        if isinstance(item, list):
            files.extend(entry for entry in item if isinstance(entry, dict))
        elif isinstance(item, dict):
            files.append(item)
    return files


def coerce_record(item: ChangeRecord | Mapping[str, Any]) -> ChangeRecord:
    """Return `item` as a record, converting mappings via `ChangeRecord.from_dict`."""
    if isinstance(item, ChangeRecord):
        return item
    return ChangeRecord.from_dict(item)
