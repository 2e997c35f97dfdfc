from __future__ import annotations

from pkg.patchcoverage.changeset import (
    ChangeSetBuilder,
    build_change_map,
    parse_changed_lines_text,
    parse_line_token,
)
from pkg.patchcoverage.records import ChangeRecord

ADD_LINE_2 = "@@ -1,3 +1,3 @@\n line1\n+added\n line2\n"
DELETE_ONLY = "@@ -1,2 +1,1 @@\n keep\n-gone\n"


def _collecting_builder(**kwargs) -> tuple[ChangeSetBuilder, list[str]]:
    messages: list[str] = []
    return ChangeSetBuilder(log=messages.append, **kwargs), messages


def test_build_maps_new_path_to_added_lines() -> None:
    records = [
        {"filename": "src/a.py", "status": "modified", "patch": ADD_LINE_2},
        {"filename": "src/b.py", "status": "added", "patch": "@@ -0,0 +1,2 @@\n+x\n+y\n"},
    ]
    assert build_change_map(records) == {"src/a.py": {2}, "src/b.py": {1, 2}}


def test_build_skips_removed_files() -> None:
    records = [
        {"filename": "gone.py", "status": "Removed", "patch": "@@ -1,1 +0,0 @@\n-x\n"},
        {"filename": "kept.py", "status": "modified", "patch": ADD_LINE_2},
    ]
    assert build_change_map(records) == {"kept.py": {2}}


def test_build_skips_missing_patch_and_logs() -> None:
    builder, messages = _collecting_builder()
    records = [
        ChangeRecord(new_path="image.png", status="added", patch=None),
        ChangeRecord(new_path="huge.py", previous_path="old.py", status="renamed", patch="  "),
    ]

    assert builder.build(records) == {}
    assert "Skipping file without patch (possibly binary/large): image.png (status=added)" in messages
    assert (
        "Skipping file without patch (possibly binary/large): huge.py (status=renamed, previous=old.py)"
        in messages
    )


def test_build_omits_files_without_added_lines() -> None:
    assert build_change_map([{"filename": "a.py", "patch": DELETE_ONLY}]) == {}


def test_build_keys_renames_by_new_path() -> None:
    builder, messages = _collecting_builder()
    result = builder.build(
        [
            {
                "filename": "pkg\\new.py",
                "previous_filename": "pkg\\old.py",
                "status": "renamed",
                "patch": ADD_LINE_2,
            }
        ]
    )
    assert result == {"pkg/new.py": {2}}
    assert "Processing renamed file: pkg/new.py (previous=pkg/old.py)" in messages


def test_build_quiet_renames_still_included() -> None:
    builder, messages = _collecting_builder(verbose_renames=False)
    result = builder.build(
        [{"filename": "b.py", "previous_filename": "a.py", "status": "copied", "patch": ADD_LINE_2}]
    )
    assert result == {"b.py": {2}}
    assert not any("Processing" in m for m in messages)


def test_build_isolates_malformed_records() -> None:
    warnings: list[str] = []
    builder = ChangeSetBuilder(warn=warnings.append)
    records = [
        {"status": "modified", "patch": ADD_LINE_2},
        "not a record",
        {"filename": "ok.py", "patch": ADD_LINE_2},
    ]

    assert builder.build(records) == {"ok.py": {2}}
    assert len(warnings) == 2
    assert warnings[0].startswith("Skipping unreadable change record #0:")
    assert warnings[1].startswith("Skipping unreadable change record #1:")


def test_build_reports_loaded_count_with_prefix() -> None:
    builder, messages = _collecting_builder(prefix="Patch coverage: ")
    builder.build([{"filename": "a.py", "patch": ADD_LINE_2}])
    assert messages[-1] == "Patch coverage: Loaded changed lines for 1 file(s)"


def test_build_notes_unknown_status_and_keeps_file() -> None:
    builder, messages = _collecting_builder()
    assert builder.build([{"filename": "a.py", "status": "mystery", "patch": ADD_LINE_2}]) == {"a.py": {2}}
    assert "Unknown status 'mystery' for a.py; treating as modified" in messages


def test_build_later_duplicate_replaces_earlier() -> None:
    records = [
        {"filename": "a.py", "patch": ADD_LINE_2},
        {"filename": "a.py", "patch": "@@ -1 +7 @@\n+z\n"},
    ]
    assert build_change_map(records) == {"a.py": {7}}


def test_build_empty_input() -> None:
    assert build_change_map([]) == {}
    assert build_change_map(None) == {}


def test_build_from_text_round_trip() -> None:
    assert parse_changed_lines_text("a.txt:1,2,3") == {"a.txt": {1, 2, 3}}


def test_build_from_text_drops_invalid_tokens() -> None:
    raw = "a/b/C.java:1,2, 3 ; d/e/F.java:10,xyz,20"
    assert parse_changed_lines_text(raw) == {
        "a/b/C.java": {1, 2, 3},
        "d/e/F.java": {10, 20},
    }


def test_build_from_text_skips_malformed_entries() -> None:
    raw = "no-colon;:1,2;empty.py:;bad.py:x,0,-4;ok.py:5;"
    assert parse_changed_lines_text(raw) == {"ok.py": {5}}


def test_build_from_text_splits_on_first_colon() -> None:
    assert parse_changed_lines_text("a.py:1:2,3") == {"a.py": {3}}


def test_build_from_text_blank_input() -> None:
    assert parse_changed_lines_text(None) == {}
    assert parse_changed_lines_text("") == {}
    assert parse_changed_lines_text("  \n") == {}


def test_build_from_text_logs_source() -> None:
    builder, messages = _collecting_builder()
    builder.build_from_text("a.py:1;b.py:2", source="PATCH_CHANGED_LINES")
    assert messages == ["Parsed 2 file(s) from PATCH_CHANGED_LINES"]


def test_parse_line_token() -> None:
    assert parse_line_token(" 12 ") == 12
    assert parse_line_token("+3") == 3
    assert parse_line_token("0") is None
    assert parse_line_token("-1") is None
    assert parse_line_token("1.5") is None
    assert parse_line_token("1_000") is None
    assert parse_line_token("") is None


def test_build_rejects_record_without_new_path() -> None:
    warnings: list[str] = []
    builder = ChangeSetBuilder(warn=warnings.append)
    records = [
        ChangeRecord(new_path="", patch="@@ -1 +1 @@\n+x\n"),
        ChangeRecord(new_path="", status="removed", previous_path="gone.py"),
        ChangeRecord(new_path="ok.py", patch="@@ -1 +1 @@\n+x\n"),
    ]

    assert builder.build(records) == {"ok.py": {1}}
    assert warnings == [
        "Skipping unreadable change record #0: filename is required unless the file was removed"
    ]


def test_parse_line_token_rejects_non_ascii_digits() -> None:
    assert parse_line_token("١٢") is None
    assert parse_changed_lines_text("a.py:٣,4") == {"a.py": {4}}
