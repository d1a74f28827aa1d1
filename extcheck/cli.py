"""Command-line entry point for the extension checker."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from .config import load_config
from .errors import ConfigurationError
from .logging import configure_logging
from .orchestrator import check_package
from .result import ScanResult, format_summary_table

CONFIGURATION_ERROR_EXIT = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extcheck",
        description="Validate a phpBB extension package against the extension guidelines",
    )
    parser.add_argument(
        "directory",
        help="Directory containing the extension (must hold exactly one ext.php).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print debug traces while running.",
    )
    parser.add_argument(
        "--namespace",
        default=None,
        help="Extension namespace (vendor/name); defaults to the name in composer.json.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to a YAML configuration file (defaults to <directory>/.extcheck.yml).",
    )
    parser.add_argument(
        "--format",
        choices=["json"],
        default="json",
        help="Report format for file output (defaults to json).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the structured report (e.g., artifacts/extcheck.json).",
    )
    return parser


def write_report(result: ScanResult, output_path: str | None, report_format: str) -> None:
    """Print the summary table, then the JSON report to ``output_path`` or stdout."""

    print(format_summary_table(result))
    if report_format != "json":
        return

    payload = json.dumps(result.to_dict(), indent=2)
    if not output_path:
        print("\nJSON Report")
        print(payload)
        return

    report_file = Path(output_path)
    report_file.parent.mkdir(parents=True, exist_ok=True)
    report_file.write_text(payload, encoding="utf-8")
    print(
        f"\n{len(result.messages)} messages from {result.progress.current} checks "
        f"written to {output_path}"
    )


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.debug)
    root = Path(args.directory)
    try:
        config_path = Path(args.config_path) if args.config_path else None
        config = load_config(config_path, root=root if root.is_dir() else None)
        result = check_package(root, debug=args.debug, namespace=args.namespace, config=config)
    except ConfigurationError as exc:
        sys.stderr.write(f"Configuration error: {exc}\n")
        return CONFIGURATION_ERROR_EXIT
    write_report(result, args.output_path, args.format)
    return result.exit_code()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
