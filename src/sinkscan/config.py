"""Configuration loading helpers for the scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
import re
from typing import Any, Dict, Iterable, Sequence

from .catalog import DEFAULT_REQUIRED_HEADERS
from .scope import DEFAULT_LOOKBACK

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".sinkscanrc.json"
STRATEGIES = ("auto", "remove", "refactor", "validate")
DEFAULT_TRUSTED_LIBRARIES = ("dompurify", "sanitize-html", "xss")
DEFAULT_MAX_PATTERN_LENGTH = 100
# Checks whose findings in *.test.* / *.spec.* files are noise by default.
IGNORE_IN_TESTS_BY_DEFAULT = {"security-headers", "open-redirect"}

DEFAULT_CONFIG: Dict[str, Any] = {
    "severity": "low",
    "ignore": ["node_modules"],
    "disabled_checks": [],
    "checks": {},
}


class IgnoreMatcher:
    """Regex matcher that degrades to case-insensitive substring matching."""

    def __init__(self, patterns: Sequence[str] = ()) -> None:
        self.patterns = tuple(p for p in patterns if p)
        self._compiled: list[tuple[str, re.Pattern | None]] = []
        for pattern in self.patterns:
            try:
                self._compiled.append((pattern, re.compile(pattern)))
            except re.error as exc:
                logger.warning("Invalid ignore pattern %r (%s); using substring match", pattern, exc)
                self._compiled.append((pattern, None))

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def matches(self, *texts: str | None) -> bool:
        for pattern, compiled in self._compiled:
            for text in texts:
                if not text:
                    continue
                if compiled is not None:
                    if compiled.search(text):
                        return True
                elif pattern.lower() in text.lower():
                    return True
        return False


@dataclass(slots=True)
class CheckOptions:
    """Options for a single check, after validation."""

    allow_literal_arguments: bool = False
    allow_literal_array_arguments: bool = False
    additional_sink_methods: list[str] = field(default_factory=list)
    additional_eval_functions: list[str] = field(default_factory=list)
    strategy: str = "auto"
    trusted_libraries: list[str] = field(default_factory=lambda: list(DEFAULT_TRUSTED_LIBRARIES))
    max_pattern_length: int = DEFAULT_MAX_PATTERN_LENGTH
    required_headers: list[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_HEADERS))
    ignore_patterns: list[str] = field(default_factory=list)
    ignore_in_tests: bool = False
    allow_reading: bool = True
    lookback: int = DEFAULT_LOOKBACK
    ignore: IgnoreMatcher = field(default_factory=IgnoreMatcher, repr=False)

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            logger.warning("Unknown strategy %r; falling back to 'auto'", self.strategy)
            self.strategy = "auto"
        if _not_positive_int(self.lookback):
            logger.warning("Invalid lookback %r; using %d", self.lookback, DEFAULT_LOOKBACK)
            self.lookback = DEFAULT_LOOKBACK
        if _not_positive_int(self.max_pattern_length):
            logger.warning(
                "Invalid max_pattern_length %r; using %d",
                self.max_pattern_length,
                DEFAULT_MAX_PATTERN_LENGTH,
            )
            self.max_pattern_length = DEFAULT_MAX_PATTERN_LENGTH
        self.ignore = IgnoreMatcher(self.ignore_patterns)

    @classmethod
    def from_dict(cls, check_id: str, data: Dict[str, Any] | None = None) -> "CheckOptions":
        data = dict(data or {})
        known = {name for name in cls.__dataclass_fields__ if name != "ignore"}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown options for %s: %s", check_id, ", ".join(unknown))
        values = {key: value for key, value in data.items() if key in known}
        values.setdefault("ignore_in_tests", check_id in IGNORE_IN_TESTS_BY_DEFAULT)
        for key in (
            "additional_sink_methods",
            "additional_eval_functions",
            "trusted_libraries",
            "required_headers",
            "ignore_patterns",
        ):
            if key in values:
                values[key] = _string_list(values[key], f"{check_id}.{key}")
        return cls(**values)


def _not_positive_int(value: Any) -> bool:
    # bool is an int subclass; "lookback": true is not a window size.
    return isinstance(value, bool) or not isinstance(value, int) or value <= 0


def _string_list(value: Any, label: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    logger.warning("Expected a list of strings for %s, got %r", label, value)
    return []


@dataclass(slots=True)
class ScannerConfig:
    """Represents the flattened scanner configuration."""

    project_root: Path
    severity: str = "low"
    ignore: list[str] = field(default_factory=lambda: ["node_modules"])
    disabled_checks: list[str] = field(default_factory=list)
    checks: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def options_for(self, check_id: str) -> CheckOptions:
        return CheckOptions.from_dict(check_id, self.checks.get(check_id))

    def is_enabled(self, check_id: str) -> bool:
        return check_id not in self.disabled_checks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_root": str(self.project_root),
            "severity": self.severity,
            "ignore": list(self.ignore),
            "disabled_checks": list(self.disabled_checks),
            "checks": {key: dict(value) for key, value in self.checks.items()},
        }


def _merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    merged = {**base}
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_json_file(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config in {path}: expected a JSON object")
    return data


def _config_sources(project_root: Path, user_config: Path | None) -> Iterable[Path]:
    default_file = project_root / CONFIG_FILENAME
    if default_file.exists():
        yield default_file
    if user_config is not None:
        user_file = user_config
        if not user_file.is_absolute():
            user_file = project_root / user_file
        if user_file.exists():
            yield user_file
        else:
            logger.warning("Config file %s does not exist", user_file)


def load_config(
    project_root: Path,
    config_path: Path | None = None,
    overrides: Dict[str, Any] | None = None,
) -> ScannerConfig:
    """Load configuration from defaults, files, and CLI overrides."""

    root = project_root.expanduser().resolve()
    config_data: Dict[str, Any] = {**DEFAULT_CONFIG}
    for path in _config_sources(root, config_path):
        logger.debug("Loading config from %s", path)
        config_data = _merge(config_data, _read_json_file(path))
    if overrides:
        config_data = _merge(config_data, overrides)
    checks = config_data.get("checks") or {}
    if not isinstance(checks, dict):
        logger.warning("Ignoring non-object 'checks' config: %r", checks)
        checks = {}
    return ScannerConfig(
        project_root=root,
        severity=str(config_data.get("severity", DEFAULT_CONFIG["severity"])).lower(),
        ignore=_string_list(config_data.get("ignore", []), "ignore"),
        disabled_checks=_string_list(config_data.get("disabled_checks", []), "disabled_checks"),
        checks={str(key): dict(value) for key, value in checks.items() if isinstance(value, dict)},
    )
