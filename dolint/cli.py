\
import argparse
import json
from pathlib import Path
from typing import List, Optional

from .core.config import ConfigError, load_config
from .core.engine import PathChecker, configure_logging
from .core.loader import discover_rules
from .core.reporting import FORMATS, Reporter
from .rules.base import PARSE_ERROR_ID


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dolint",
        description="Style-conformance checker for Stata do-files.",
    )
    sub = p.add_subparsers(dest="mode", required=True)

    # check mode
    c = sub.add_parser("check", help="Check files, directories or glob patterns.")
    c.add_argument("paths", nargs="+", help="Files, directories (searched recursively) or glob patterns.")
    c.add_argument("--config", type=Path, default=None, help="JSON config file (default: ./.dolint.json if present).")
    c.add_argument("--rules", default=None, help="Comma-delimited rule ids to enable (e.g., 'naming,line-length') or 'all'.")
    c.add_argument("--disable", default=None, help="Comma-delimited rule ids to disable.")
    c.add_argument("--max-line-length", type=int, default=None, help="Maximum line length (default 80).")
    c.add_argument("--min-command-chars", type=int, default=None, help="Minimum command abbreviation length (default 3).")
    c.add_argument("--format", choices=FORMATS, default="text", help="Output format written to stdout.")
    c.add_argument("--out", type=Path, default=None, help="Also write violations.json, index.json and report.md here.")
    c.add_argument("--include", default=None, help="Glob(s) of files to check inside directories, comma-separated.")
    c.add_argument("--exclude", default=None, help="Dir names to exclude, comma-separated.")
    c.add_argument("--max-file-size", type=int, default=None, help="Max file size in bytes to read (default 5MB).")
    c.add_argument("--workers", type=int, default=8, help="Number of worker threads.")
    c.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    c.add_argument("--verbose", action="store_true", help="Enable verbose logging output.")

    # rules mode
    sub.add_parser("rules", help="List the available rules.")

    return p


def run_check(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    logger = configure_logging(verbose=args.verbose)
    rules = discover_rules()
    overrides = {
        "enabled_rules": args.rules,
        "disabled_rules": args.disable,
        "max_line_length": args.max_line_length,
        "min_command_chars": args.min_command_chars,
        "include": args.include,
        "exclude": args.exclude,
        "max_file_size": args.max_file_size,
    }
    try:
        config = load_config(args.config, rules.keys(), overrides)
    except ConfigError as exc:
        parser.error(str(exc))
        return 2

    if args.verbose:
        logger.info("Configuration: %s", json.dumps(config.to_dict(), sort_keys=True))

    checker = PathChecker(
        targets=args.paths,
        config=config,
        rules=rules,
        workers=args.workers,
        logger=logger,
        verbose=args.verbose,
        show_progress=not args.no_progress,
    )
    result = checker.check()

    reporter = Reporter(result)
    print(reporter.render(args.format))
    if args.out is not None:
        reporter.write_all(args.out)
    return result.exit_code


def run_rules() -> int:
    for rule in discover_rules().values():
        print(f"{rule.id:<22} {rule.severity:<8} {rule.description}")
    print(f"{PARSE_ERROR_ID:<22} {'error':<8} Unterminated block comment (always on).")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.mode == "check":
        return run_check(args, parser)
    elif args.mode == "rules":
        return run_rules()
    else:
        parser.print_help()
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
