"""Choose between structured change records and the fallback text format."""

from __future__ import annotations

import os
from typing import Any, Iterable, Mapping

from .changeset import ChangeMap, ChangeSetBuilder, LogSink
from .config import PatchCoverageConfig
from .records import ChangeRecord


def fallback_from_environ(
    config: PatchCoverageConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Read the fallback changed-lines text from the configured variable."""
    cfg = config or PatchCoverageConfig()
    env = os.environ if environ is None else environ
    return env.get(cfg.fallback_env)


def load_changed_lines(
    records: Iterable[ChangeRecord | Mapping[str, Any]] | None = None,
    fallback_text: str | None = None,
    *,
    log: LogSink | None = None,
    warn: LogSink | None = None,
    config: PatchCoverageConfig | None = None,
) -> ChangeMap:
    """Load changed lines per file.

    `records` is `None` when no structured source is configured (no PR files
    listing available). In that case the fallback text is used when it is
    non-blank; otherwise the result is empty.
    """
    cfg = config or PatchCoverageConfig()
    builder = ChangeSetBuilder(
        log=log,
        warn=warn,
        verbose_renames=cfg.verbose_renames,
        prefix=cfg.log_prefix,
    )

    if records is not None:
        return builder.build(records)

    if fallback_text is not None and fallback_text.strip():
        builder.log(f"{cfg.log_prefix}Using {cfg.fallback_env} fallback (no change records)")
        return builder.build_from_text(fallback_text, source=cfg.fallback_env)

    builder.log(f"{cfg.log_prefix}No change records and no {cfg.fallback_env}; skipping")
    return {}
