"""Command-line entry point for the ScriptScope scanner."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List

from .config import DEFAULT_CONFIG_FILENAME, ScanConfig, load_config
from .report import build_report, write_report
from .result import format_summary_table
from .session import ScanSession
from .utils import load_units

DEFAULT_SOURCE_DIRS = (".",)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Static scanner for secrets, dangerous sinks and information leaks in JavaScript",
    )
    parser.add_argument(
        "--source",
        "-s",
        dest="source_paths",
        action="append",
        default=[],
        help="File or directory of JavaScript to scan (repeatable).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"YAML settings file (defaults to {DEFAULT_CONFIG_FILENAME} when present).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the JSON report (e.g., artifacts/scriptscope.json).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def resolve_config(config_path: str | None) -> ScanConfig:
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise SystemExit(f"Config file not found: {config_path}")
        return load_config(path)
    return load_config(Path(DEFAULT_CONFIG_FILENAME))


def run_scan(source_paths: List[str], config: ScanConfig) -> ScanSession:
    session = ScanSession(config)
    session.scan_all(load_units(source_paths, config.extensions))
    return session


def write_output(session: ScanSession, output_path: str | None) -> None:
    print(format_summary_table(session.aggregate_by_severity(), session.store.all_active_findings()))

    failed = [unit_id for unit_id in session.units if session.failure(unit_id)]
    if failed:
        print("")
        for unit_id in failed:
            print(f"Scan failed: {unit_id}: {session.failure(unit_id)}")

    payload = build_report(session)
    if output_path:
        write_report(payload, Path(output_path))
        print(f"\nReport written to {output_path}")
    else:
        print("\nJSON Report")
        print(json.dumps(payload, indent=2))


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = resolve_config(args.config)
    except ValueError as exc:
        raise SystemExit(f"Invalid config: {exc}") from exc
    sources = args.source_paths or list(DEFAULT_SOURCE_DIRS)
    with run_scan(sources, config) as session:
        write_output(session, args.output_path)
        return session.aggregate_by_severity().exit_code()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
