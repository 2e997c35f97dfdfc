"""Changed-line attribution for pull request coverage and annotations."""

from .changeset import ChangeMap, ChangeSetBuilder, build_change_map, parse_changed_lines_text
from .config import CONFIG_FILE, ConfigError, PatchCoverageConfig, load_config
from .diff_parser import parse_added_lines
from .provider import fallback_from_environ, load_changed_lines
from .records import ChangeRecord, records_from_payload

__all__ = [
    "CONFIG_FILE",
    "ChangeMap",
    "ChangeRecord",
    "ChangeSetBuilder",
    "ConfigError",
    "PatchCoverageConfig",
    "build_change_map",
    "fallback_from_environ",
    "load_changed_lines",
    "load_config",
    "parse_added_lines",
    "parse_changed_lines_text",
    "records_from_payload",
]
