"""
Command-line interface for the complexity checker.

Provides commands for checking sources, querying exported complexity
facts and creating a configuration file.
"""

import argparse
import sys
import os
from typing import Optional, List

from cyclomatic import __version__
from cyclomatic.config import (
    PROG_NAME, CheckConfig, add_limit_option, create_default_config, load_check_config,
)
from cyclomatic.core.engine import CheckEngine
from cyclomatic.core.errors import CyclomaticError
from cyclomatic.core.facts import JsonFactStore
from cyclomatic.formatters import get_formatter
from cyclomatic.logging_config import setup_logging

EXIT_OK = 0
EXIT_OVER_LIMIT = 1
EXIT_ANALYSIS_ERROR = 2

DEFAULT_FACTS_PATH = ".cyclomatic-facts.json"


def create_parser(prog: str = PROG_NAME) -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Check the cyclomatic complexity of Python and Go functions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cyclomatic check ./src                      # Check a directory
  cyclomatic check app.py --limit 5           # Stricter limit for one file
  cyclomatic check . --format json            # Output as JSON
  cyclomatic check . --format sarif -o out    # SARIF output to file
  cyclomatic check . --facts facts.json       # Persist scores as facts
  cyclomatic facts --facts facts.json         # Query persisted scores
  cyclomatic init                             # Create config file
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Check command
    check_parser = subparsers.add_parser("check", help="Check functions against the complexity limit")
    check_parser.add_argument(
        "target",
        nargs="?",
        default=".",
        help="Target file or directory to check (default: current directory)",
    )
    check_parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )
    limit_dest = add_limit_option(check_parser, prog)
    check_parser.set_defaults(limit_dest=limit_dest)
    check_parser.add_argument(
        "-f", "--format",
        choices=["text", "json", "sarif"],
        default=None,
        help="Output format (default: text)",
    )
    check_parser.add_argument(
        "-o", "--output",
        help="Output file (default: stdout)",
    )
    check_parser.add_argument(
        "--facts",
        help="JSON file that complexity facts are loaded from and saved to",
    )
    check_parser.add_argument(
        "--include",
        action="append",
        help="Include patterns (can be specified multiple times)",
    )
    check_parser.add_argument(
        "--exclude",
        action="append",
        help="Exclude patterns (can be specified multiple times)",
    )
    check_parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=None,
        help="Number of parallel workers (default: 4)",
    )
    check_parser.add_argument(
        "-a", "--all",
        action="store_true",
        help="List the complexity of every function, not only those over the limit",
    )
    check_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )
    check_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )
    check_parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    check_parser.add_argument(
        "--log-file",
        help="Also write log records to this file",
    )

    # Facts command
    facts_parser = subparsers.add_parser("facts", help="Show exported complexity facts")
    facts_parser.add_argument(
        "names",
        nargs="*",
        help="Only show facts whose identity ends with one of these names",
    )
    facts_parser.add_argument(
        "--facts",
        default=DEFAULT_FACTS_PATH,
        help=f"Fact file to read (default: {DEFAULT_FACTS_PATH})",
    )

    # Init command
    init_parser = subparsers.add_parser("init", help="Create a configuration file")
    init_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite existing config file",
    )

    return parser


def build_config(args: argparse.Namespace) -> CheckConfig:
    """Load the configuration file and apply command-line overrides."""
    if args.config:
        config = load_check_config(args.config)
    else:
        config = load_check_config(start_dir=args.target)

    data = config.to_dict()

    limit = getattr(args, args.limit_dest, None)
    if limit is not None:
        data["limit"] = limit
    if args.jobs is not None:
        data["max_workers"] = args.jobs
    if args.facts:
        data["facts_path"] = args.facts
    if args.include:
        data["include_patterns"] = args.include
    if args.exclude:
        data["exclude_patterns"] = data["exclude_patterns"] + args.exclude

    output = data["output"]
    if args.format:
        output["format"] = args.format
    if args.output:
        output["output_file"] = args.output
    if args.verbose:
        output["verbose"] = True
    if args.no_color:
        output["color"] = False
    if args.all:
        output["show_all"] = True

    return CheckConfig.from_dict(data)


def cmd_check(args: argparse.Namespace) -> int:
    """Execute the check command."""
    config = build_config(args)

    engine = CheckEngine(config)
    result = engine.check(args.target)

    output_config = config.output
    formatter = get_formatter(output_config.format)

    if hasattr(formatter, "verbose"):
        formatter.verbose = output_config.verbose
    if hasattr(formatter, "use_color"):
        formatter.use_color = formatter.use_color and output_config.color and not output_config.output_file
    if hasattr(formatter, "show_all"):
        formatter.show_all = output_config.show_all or output_config.format == "json"

    output = formatter.format_result(result)

    if output_config.output_file:
        with open(output_config.output_file, "w", encoding="utf-8") as f:
            f.write(output + "\n")
    elif output:
        print(output)

    if result.errors:
        return EXIT_ANALYSIS_ERROR
    if result.diagnostics:
        return EXIT_OVER_LIMIT
    return EXIT_OK


def cmd_facts(args: argparse.Namespace) -> int:
    """Execute the facts command."""
    if not os.path.exists(args.facts):
        print(f"No fact file at {args.facts}. Run 'cyclomatic check --facts {args.facts}' first.")
        return EXIT_ANALYSIS_ERROR

    store = JsonFactStore(args.facts)

    shown = 0
    for key, score in store.items():
        if args.names and not any(key.endswith(f".{name}") or key.endswith(f":{name}") for name in args.names):
            continue
        print(f"{score:4}  {key}")
        shown += 1

    if args.names and shown == 0:
        print("No matching facts.")
        return EXIT_OVER_LIMIT

    return EXIT_OK


def cmd_init(args: argparse.Namespace) -> int:
    """Execute the init command."""
    config_file = ".cyclomatic.yaml"

    if os.path.exists(config_file) and not args.force:
        print(f"Configuration file {config_file} already exists.")
        print("Use --force to overwrite.")
        return 1

    content = create_default_config()

    with open(config_file, "w", encoding="utf-8") as f:
        f.write(content)

    print(f"Created configuration file: {config_file}")
    return 0


def main(argv: Optional[List[str]] = None, prog: str = PROG_NAME) -> int:
    """Main entry point for the CLI."""
    parser = create_parser(prog)
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    setup_logging(
        verbose=getattr(args, "verbose", False),
        quiet=getattr(args, "quiet", False),
        log_file=getattr(args, "log_file", None),
    )

    try:
        if args.command == "check":
            return cmd_check(args)
        elif args.command == "facts":
            return cmd_facts(args)
        elif args.command == "init":
            return cmd_init(args)
        else:
            parser.print_help()
            return 0

    except KeyboardInterrupt:
        print("\nCheck interrupted.")
        return 130
    except (CyclomaticError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if os.environ.get("DEBUG"):
            raise
        return EXIT_ANALYSIS_ERROR


if __name__ == "__main__":
    sys.exit(main())
