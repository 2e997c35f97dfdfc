#!/usr/bin/env python3
"""Compute changed new-file lines per file for a pull request.

Input is either a saved `pulls/{pr}/files` listing, e.g.

  gh api --paginate --slurp "repos/$REPO/pulls/$PR/files?per_page=100" > files.json
  changed-lines.py --files-json files.json --output-json changed.json

or, when no listing is available, the fallback environment variable
(PATCH_CHANGED_LINES by default) in the form `path:1,2,3;other/path:4`.

Output is a JSON object mapping each path to its ascending line numbers.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pkg.patchcoverage import (  # noqa: E402
    CONFIG_FILE,
    ChangeMap,
    ConfigError,
    fallback_from_environ,
    load_changed_lines,
    load_config,
    records_from_payload,
)


def fail(message: str, code: int = 2) -> None:
    """Fail."""
    print(f"changed-lines: {message}", file=sys.stderr)
    sys.exit(code)


def warn(message: str) -> None:
    """Warn."""
    print(f"::warning::{message}", file=sys.stderr)


def notice(message: str) -> None:
    """Notice."""
    print(f"::notice::{message}", file=sys.stderr)


def quiet(message: str) -> None:
    return None


def read_files_json(path: Path) -> list[dict]:
    """Read a PR files listing (single page or slurped pages)."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        fail(f"unable to read {path}: {exc}")
    except json.JSONDecodeError as exc:
        fail(f"invalid JSON in {path}: {exc}")
    return records_from_payload(data)


def to_json(changed: ChangeMap) -> dict[str, list[int]]:
    return {path: sorted(changed[path]) for path in sorted(changed)}


def main(argv: list[str]) -> int:
    """Entry point."""
    parser = argparse.ArgumentParser(prog="changed-lines.py")
    parser.add_argument("--files-json", required=False, default="")
    parser.add_argument("--config", required=False, default="")
    parser.add_argument("--output-json", required=False, default="")
    parser.add_argument("--quiet", action="store_true")
    args = parser.parse_args(argv)

    try:
        if args.config:
            cfg = load_config(Path(args.config))
        else:
            # Installed copies may not ship the repo-root file.
            cfg = load_config(CONFIG_FILE if CONFIG_FILE.exists() else None)
    except ConfigError as exc:
        print(f"changed-lines error: {exc}", file=sys.stderr)
        return 2

    records = read_files_json(Path(args.files_json)) if args.files_json else None
    changed = load_changed_lines(
        records,
        fallback_from_environ(cfg),
        log=quiet if args.quiet else notice,
        warn=warn,
        config=cfg,
    )

    payload = json.dumps(to_json(changed), indent=2)
    if not args.output_json:
        print(payload)
        return 0

    output_path = Path(args.output_json)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(payload + "\n")
    print(f"files={len(changed)}")
    print(f"lines={sum(len(lines) for lines in changed.values())}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
