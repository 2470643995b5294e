"""
zkpool CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m zkpool_cli root <leaf>... [--leaves-file PATH] [--json]
    python -m zkpool_cli prove (--leaf VALUE | --index N) <leaf>... [--circuit] [--out PATH]
    python -m zkpool_cli verify <proof_path> [--root VALUE] [--json]
    python -m zkpool_cli zeros [--height N] [--json]
    python -m zkpool_cli config --init | --show

Environment Variables:
    ZKPOOL_TREE_HEIGHT      Tree height (default: 20)
    ZKPOOL_ZERO_LEAF        Empty-leaf value (hex or decimal)
    ZKPOOL_ZERO_TABLE       Zero table: computed or poseidon2
    ZKPOOL_LOG_LEVEL        Log level (default: INFO)
    ZKPOOL_LOG_FILE         Optional log file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from core.config.runtime import RuntimeConfig, TreeConfig, ZERO_TABLE_CHOICES
from core.schemas.errors import TreeException
from zkpool_cli import __version__
from zkpool_cli.commands import prove, tree, verify


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


CONFIG_TEMPLATE = """\
# zkpool configuration
tree:
  height: 20
  # Empty-leaf value used to derive the zero table (hex or decimal)
  # zero_leaf: "0x..."
  # "computed" derives zeros with the default hash, "poseidon2" uses the
  # fixed table of the deployed circuit
  zero_table: computed
log_level: INFO
# log_file: zkpool.log
"""


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def _add_leaf_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "leaves",
        nargs="*",
        help="Leaf values in insertion order (hex with 0x prefix or decimal)",
    )
    parser.add_argument(
        "--leaves-file",
        type=str,
        default=None,
        help="File with one leaf per line, appended after positional leaves",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="zkpool",
        description="zkpool CLI - Build commitment trees, generate and verify membership proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Tree height (overrides config)",
    )
    parser.add_argument(
        "--zero-table",
        type=str,
        choices=list(ZERO_TABLE_CHOICES),
        default=None,
        help="Zero table source (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- root command ---
    root_parser = subparsers.add_parser(
        "root",
        help="Print the root of a tree holding the given leaves",
    )
    _add_leaf_arguments(root_parser)
    root_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    root_parser.set_defaults(func=tree.root_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate a membership proof",
        description="Insert the leaves in order and prove one of them.",
    )
    _add_leaf_arguments(prove_parser)
    target = prove_parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--leaf",
        type=str,
        help="Leaf value to prove (first occurrence is used)",
    )
    target.add_argument(
        "--index",
        type=int,
        help="Leaf index to prove",
    )
    prove_parser.add_argument(
        "--circuit",
        action="store_true",
        default=False,
        help="Emit circuit witness inputs (merkle_proof, is_even) instead of the full proof",
    )
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the proof JSON to this path",
    )
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a membership proof",
    )
    verify_parser.add_argument(
        "proof_path",
        type=str,
        help="Path to proof JSON ('-' for stdin)",
    )
    verify_parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Expected root; verification fails if the proof is against another root",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- zeros command ---
    zeros_parser = subparsers.add_parser(
        "zeros",
        help="Print the zero table",
    )
    zeros_parser.add_argument(
        "--height",
        type=int,
        default=None,
        dest="zeros_height",
        help="Tree height for this table (overrides config and the global --height)",
    )
    zeros_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    zeros_parser.set_defaults(func=tree.zeros_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="zkpool.yaml",
        help="Path for config file (default: zkpool.yaml)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(CONFIG_TEMPLATE)
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (ZKPOOL_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: zkpool config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def load_runtime_config(args: argparse.Namespace) -> RuntimeConfig:
    """Config file (if any), then environment, then command-line overrides."""
    if args.config is not None:
        config = RuntimeConfig.from_yaml(args.config).with_env_overrides()
    else:
        config = RuntimeConfig.from_env()

    if args.height is not None or args.zero_table is not None:
        config.tree = TreeConfig(
            height=args.height if args.height is not None else config.tree.height,
            zero_leaf=config.tree.zero_leaf,
            zero_table=args.zero_table or config.tree.zero_table,
        )
    return config


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_runtime_config(args)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(level=args.log_level or config.log_level, log_file=config.log_file)

    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (OSError, TreeException) as e:
        if args.log_level == "DEBUG":
            traceback.print_exc()
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
