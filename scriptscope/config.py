"""Scan configuration loaded from YAML and the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

from .store import SuppressionKey
from .utils.code import JS_EXTENSIONS
from .utils.fileio import read_yaml_file

_LOG = logging.getLogger(__name__)

DEFAULT_SCAN_TIMEOUT = 30.0
SCAN_TIMEOUT_ENV = "SCRIPTSCOPE_SCAN_TIMEOUT"
DEFAULT_CONFIG_FILENAME = ".scriptscope.yaml"


def _parse_timeout(raw: Any) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"scan_timeout must be a number, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"scan_timeout must not be negative, got {value}")
    return value or None


def _parse_ignore(entries: Any) -> Tuple[SuppressionKey, ...]:
    if entries is None:
        return ()
    if not isinstance(entries, list):
        raise ValueError("ignore must be a list of {unit, offset, line} entries")
    keys = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"ignore entry is not a mapping: {entry!r}")
        try:
            keys.append(
                SuppressionKey(
                    char_offset=int(entry["offset"]),
                    line=int(entry["line"]),
                    unit_id=str(entry["unit"]),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid ignore entry {entry!r}: {exc}") from exc
    return tuple(keys)


@dataclass(frozen=True)
class ScanConfig:
    """Settings for a scan session.

    ``scan_timeout`` bounds how long the caller waits for one unit; ``None``
    waits forever.
    """

    scan_timeout: Optional[float] = DEFAULT_SCAN_TIMEOUT
    extensions: Tuple[str, ...] = JS_EXTENSIONS
    ignore: Tuple[SuppressionKey, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ScanConfig":
        config = cls()
        if "scan_timeout" in data:
            config = replace(config, scan_timeout=_parse_timeout(data["scan_timeout"]))
        if "extensions" in data:
            extensions = data["extensions"]
            if not isinstance(extensions, list) or not all(isinstance(ext, str) for ext in extensions):
                raise ValueError("extensions must be a list of file suffixes")
            config = replace(config, extensions=tuple(extensions))
        if "ignore" in data:
            config = replace(config, ignore=_parse_ignore(data["ignore"]))
        return config

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "ScanConfig":
        """Apply ``SCRIPTSCOPE_SCAN_TIMEOUT`` when it holds a usable value."""

        env = os.environ if environ is None else environ
        raw = env.get(SCAN_TIMEOUT_ENV)
        if raw is None or not raw.strip():
            return self
        try:
            return replace(self, scan_timeout=_parse_timeout(raw))
        except ValueError:
            _LOG.warning("Ignoring invalid %s=%r", SCAN_TIMEOUT_ENV, raw)
            return self


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> ScanConfig:
    """Load ``path`` (defaults apply when it is missing) and the environment."""

    data = None
    if path is not None:
        try:
            data = read_yaml_file(path)
        except yaml.YAMLError as exc:
            raise ValueError(f"Config at {path} is not valid YAML: {exc}") from exc
    if data is None:
        config = ScanConfig()
    elif not isinstance(data, dict):
        raise ValueError(f"Config at {path} is not a mapping")
    else:
        config = ScanConfig.from_mapping(data)
    return config.with_env(environ)
