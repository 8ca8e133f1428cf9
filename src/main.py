# src/main.py — v1
"""CLI entry point: sort, merge, combine and filter tab-delimited files.

Usage:
    recordkit sort <file> --by FIELD[:desc] [...]
    recordkit merge <file> <file> [...] [--by FIELD]
    recordkit combine <file> --by FIELD [--precedence later|earlier|none]
    recordkit filter <file> --where FIELD OP VALUE [--any]

Output is tab-delimited, to stdout unless -o is given.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from recordkit.config.settings import PRECEDENCE_NAMES, Settings, load_settings
from recordkit.core.models import CombineOutcome, CombineReport
from recordkit.logging.logger import setup_logging
from recordkit.records.dictionary import Dictionary
from recordkit.records.filters import CompoundFilter, FieldFilter
from recordkit.records.record_set import RecordSet
from recordkit.records.sequence import SequenceSpec
from recordkit.sources.tabdelim import TabDelimSink, TabDelimSource
from recordkit.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except Exception as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    _setup_logging(args.verbose, settings)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="recordkit",
        description=f"recordkit v{__version__}: sort, merge, combine and filter tabular records",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output file (default: stdout)",
    )
    common.add_argument(
        "-d", "--dictionary", type=Path, default=None,
        help="Tab-delimited dictionary of field definitions and aliases",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- sort ---
    p_sort = subparsers.add_parser("sort", parents=[common], help="Sort a file")
    p_sort.add_argument("file", type=Path, help="Tab-delimited input file")
    p_sort.add_argument(
        "--by", action="append", required=True, metavar="FIELD[:desc]",
        help="Sort field; repeat for secondary keys",
    )
    p_sort.set_defaults(func=_cmd_sort)

    # --- merge ---
    p_merge = subparsers.add_parser(
        "merge", parents=[common], help="Merge files with overlapping columns",
    )
    p_merge.add_argument("files", type=Path, nargs="+", help="Tab-delimited input files")
    p_merge.add_argument(
        "--by", action="append", default=None, metavar="FIELD[:desc]",
        help="Optional sort field for the merged output",
    )
    p_merge.set_defaults(func=_cmd_merge)

    # --- combine ---
    p_combine = subparsers.add_parser(
        "combine", parents=[common], help="Fold records with equal keys",
    )
    p_combine.add_argument("file", type=Path, help="Tab-delimited input file")
    p_combine.add_argument(
        "--by", action="append", required=True, metavar="FIELD[:desc]",
        help="Key field; repeat for compound keys",
    )
    p_combine.add_argument(
        "--precedence", choices=sorted(PRECEDENCE_NAMES), default=None,
        help="Which record wins a conflict (default from settings)",
    )
    p_combine.add_argument(
        "--max-allowed", type=int, choices=[o.value for o in CombineOutcome], default=None,
        help="Worst tolerated outcome: 0 no loss, 1 override, 2 append, 3 mismatch",
    )
    p_combine.add_argument(
        "--min-no-loss", type=int, default=None,
        help="Minimum lossless columns when the worst outcome is at the limit",
    )
    p_combine.set_defaults(func=_cmd_combine)

    # --- filter ---
    p_filter = subparsers.add_parser("filter", parents=[common], help="Select records")
    p_filter.add_argument("file", type=Path, help="Tab-delimited input file")
    p_filter.add_argument(
        "--where", nargs=3, action="append", required=True,
        metavar=("FIELD", "OP", "VALUE"),
        help="Condition, e.g. --where Status eq Open",
    )
    p_filter.add_argument(
        "--any", action="store_true",
        help="Select records matching any condition (default: all)",
    )
    p_filter.set_defaults(func=_cmd_filter)

    return parser


def _load(path: Path, args: argparse.Namespace, settings: Settings) -> RecordSet:
    """Load a file into a new RecordSet, applying the optional dictionary."""
    dictionary = Dictionary(data_parent=settings.default_data_parent)
    if args.dictionary is not None:
        dictionary.load(TabDelimSource(args.dictionary, encoding=settings.tab_delim_encoding))
    record_set = RecordSet(dictionary, settings=settings)
    record_set.load(TabDelimSource(path, encoding=settings.tab_delim_encoding))
    logger.info("Read %d records from %s", len(record_set), path)
    return record_set


def _write(record_set: RecordSet, args: argparse.Namespace, settings: Settings) -> int:
    sink = TabDelimSink(args.output, encoding=settings.tab_delim_encoding, stream=sys.stdout)
    written = record_set.write_to(sink)
    logger.info("Wrote %d records to %s", written, args.output or "stdout")
    return 0


def _cmd_sort(args: argparse.Namespace, settings: Settings) -> int:
    record_set = _load(args.file, args, settings)
    record_set.set_sequence(SequenceSpec.from_names(record_set.rec_def, args.by))
    return _write(record_set, args, settings)


def _cmd_merge(args: argparse.Namespace, settings: Settings) -> int:
    first, *rest = args.files
    record_set = _load(first, args, settings)
    for path in rest:
        added = record_set.merge(TabDelimSource(path, encoding=settings.tab_delim_encoding))
        logger.info("Merged %d records from %s", added, path)
    if args.by:
        record_set.set_sequence(SequenceSpec.from_names(record_set.rec_def, args.by))
    return _write(record_set, args, settings)


def _cmd_combine(args: argparse.Namespace, settings: Settings) -> int:
    precedence = (
        PRECEDENCE_NAMES[args.precedence] if args.precedence else settings.precedence
    )
    max_allowed = CombineOutcome(
        args.max_allowed if args.max_allowed is not None else settings.combine_max_allowed
    )
    min_no_loss = (
        args.min_no_loss if args.min_no_loss is not None else settings.combine_min_no_loss
    )

    record_set = _load(args.file, args, settings)
    before = len(record_set)
    record_set.set_sequence(SequenceSpec.from_names(record_set.rec_def, args.by))
    combined = record_set.combine(precedence, max_allowed, min_no_loss)

    report = CombineReport(
        source_id=str(args.file),
        records_before=before,
        records_after=len(record_set),
        combined=combined,
        precedence=precedence,
        max_allowed=max_allowed,
        min_no_loss=min_no_loss,
    )
    print(
        f"Combined {report.combined} of {report.records_before} records "
        f"({report.records_after} remain)",
        file=sys.stderr,
    )
    logger.debug("Combine report: %s", report.model_dump_json())
    return _write(record_set, args, settings)


def _cmd_filter(args: argparse.Namespace, settings: Settings) -> int:
    record_set = _load(args.file, args, settings)
    conditions = CompoundFilter(
        [FieldFilter(field, op, value) for field, op, value in args.where],
        and_logic=not args.any,
    )
    record_set.set_input_filter(conditions)
    return _write(record_set, args, settings)


def _setup_logging(verbose: bool, settings: Settings) -> None:
    """Configure logging for CLI usage; -v forces DEBUG text output."""
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format="text" if verbose else settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
