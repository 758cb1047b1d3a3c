from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from reclink.adapters.sqlalchemy import load_schema
from reclink.app import initialise_database, run_import
from reclink.config import ConfigurationError, configure_logging, get_import_config
from reclink.domain.errors import ParseError
from reclink.domain.ports.parsing import InputFormat

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from reclink.domain.outcomes import ImportReport

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import CSV/JSON records into a store")
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser("import", help="Import a CSV or JSON file")
    importer.add_argument("file", type=Path, help="CSV or JSON file to import")
    importer.add_argument(
        "--schema",
        type=Path,
        required=True,
        help="JSON file describing the store's collections",
    )
    importer.add_argument(
        "--collection",
        type=str,
        required=True,
        help="Collection the rows are imported into",
    )
    importer.add_argument(
        "--format",
        type=str,
        choices=[fmt.value for fmt in InputFormat],
        help="Input format (defaults to the file extension)",
    )
    importer.add_argument(
        "--actor-id",
        type=int,
        required=True,
        help="Identifier of the user recorded in createdBy/updatedBy",
    )
    importer.add_argument(
        "--report",
        type=Path,
        help="Write failed rows and their errors to this JSON file",
    )

    init_db = subparsers.add_parser("init-db", help="Create the tables of a schema")
    init_db.add_argument(
        "--schema",
        type=Path,
        required=True,
        help="JSON file describing the store's collections",
    )

    return parser.parse_args(list(argv))


def _resolve_format(args: argparse.Namespace) -> InputFormat:
    if args.format:
        return InputFormat(args.format)
    suffix = args.file.suffix.lower().lstrip(".")
    try:
        return InputFormat(suffix)
    except ValueError as exc:
        raise ValueError(f"Cannot infer input format from {args.file.name}; pass --format") from exc


def _read_input(path: Path, input_format: InputFormat) -> str:
    try:
        return path.read_text(encoding="utf-8-sig" if input_format is InputFormat.CSV else "utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc


def _write_report(report: ImportReport, path: Path) -> None:
    path.write_text(json.dumps(report.to_dict(), indent=2, default=str), encoding="utf-8")
    log.info("Wrote failure report to %s", path)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        import_config = get_import_config()
        configure_logging(level=import_config.log_level)
        parsed_args = _parse_args(args_list)
        schema = load_schema(parsed_args.schema)
        if parsed_args.command == "import":
            input_format = _resolve_format(parsed_args)
            raw = _read_input(parsed_args.file, input_format)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "init-db":
            initialise_database(schema)
        elif parsed_args.command == "import":
            report = run_import(
                raw,
                collection=parsed_args.collection,
                input_format=input_format,
                actor_id=parsed_args.actor_id,
                schema=schema,
                config=import_config,
            )
            for failure in report.failures:
                log.error("Failed row %s: %s", failure.data, failure.error)
            if parsed_args.report is not None:
                _write_report(report, parsed_args.report)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ParseError:
        log.exception("Input could not be parsed")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def entrypoint() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    entrypoint()
