"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.
Each FILE argument is one leaf block; the number of files must be a
power of two.

Usage:
    python -m merkle_cli root FILE... [--json]
    python -m merkle_cli tree FILE... [--json]
    python -m merkle_cli verify ROOT FILE... [--json]
    python -m merkle_cli config [--init|--show]

Environment Variables:
    MERKLE_HASH_ALGORITHM       hashlib algorithm (default: sha256)
    MERKLE_MAX_WORKERS          Thread pool size for builds (default: 1)
    MERKLE_LOG_LEVEL            Log level (default: INFO)
    MERKLE_LOG_FILE             Optional log file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from merkle_cli import __version__
from merkle_core.config import (
    RuntimeConfig,
    get_default_config,
    get_default_config_template,
)
from merkle_core.crypto import from_hex
from merkle_core.merkle import MerkleTree
from merkle_core.schemas import MerkleException

logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


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
        force=True,
    )


def _add_build_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        metavar="FILE",
        help="Leaf files, in order (count must be a power of two)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on error",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="merkle",
        description="Build balanced Merkle trees over files and verify roots.",
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
        "--algorithm", "-a",
        type=str,
        default=None,
        help="Hash algorithm (overrides config, e.g. sha256, sha3_256, blake2b)",
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Thread pool size for hashing (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- root command ---
    root_parser = subparsers.add_parser(
        "root",
        help="Print the Merkle root of a set of files",
    )
    _add_build_options(root_parser)
    root_parser.set_defaults(func=root_cmd)

    # --- tree command ---
    tree_parser = subparsers.add_parser(
        "tree",
        help="Print every level of the Merkle tree, root first",
    )
    _add_build_options(tree_parser)
    tree_parser.set_defaults(func=tree_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Check a claimed root against a set of files",
        description="Exit 0 if the root matches, 2 if it does not.",
    )
    verify_parser.add_argument(
        "root",
        type=str,
        help="Claimed root as 0x-prefixed hex",
    )
    _add_build_options(verify_parser)
    verify_parser.set_defaults(func=verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Show or initialize configuration",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        help="Print a template YAML configuration",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show the effective configuration",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def load_config(args: argparse.Namespace) -> RuntimeConfig:
    """Config file (if given), then env vars, then command-line overrides."""
    if args.config is not None:
        config = RuntimeConfig.from_yaml(args.config).with_env_overrides()
    else:
        config = get_default_config()

    # Rebuild rather than mutate: the default config is shared
    data = config.to_dict()
    if args.algorithm:
        data["hashing"] = {"algorithm": args.algorithm}
    if args.workers is not None:
        data["build"] = {"max_workers": args.workers}
    if args.log_level:
        data["log_level"] = args.log_level
    return RuntimeConfig.from_dict(data)


def _report_error(args: argparse.Namespace, error: Exception, prefix: str = "Error") -> None:
    if getattr(args, "json", False) and isinstance(error, MerkleException):
        print(error.to_error_model().model_dump_json(indent=2))
    elif getattr(args, "debug", False):
        traceback.print_exc()
    else:
        print(f"{prefix}: {error}", file=sys.stderr)


def _read_blocks(files: Sequence[Path]) -> list[bytes]:
    blocks = []
    for path in files:
        blocks.append(path.read_bytes())
        logger.debug("Read leaf %s (%d bytes)", path, len(blocks[-1]))
    return blocks


def _build(args: argparse.Namespace) -> MerkleTree:
    config: RuntimeConfig = args.runtime_config
    return MerkleTree.build(
        _read_blocks(args.files),
        hasher=config.make_hasher(),
        max_workers=config.build.max_workers,
    )


def root_cmd(args: argparse.Namespace) -> int:
    """Handle root command."""
    tree = _build(args)
    if args.json:
        summary = tree.to_dict()
        summary.pop("levels")
        print(json.dumps(summary, indent=2))
    else:
        print(tree.root_hex())
    return EXIT_SUCCESS


def tree_cmd(args: argparse.Namespace) -> int:
    """Handle tree command."""
    tree = _build(args)
    data = tree.to_dict()
    if args.json:
        print(json.dumps(data, indent=2))
        return EXIT_SUCCESS

    print(f"algorithm: {data['algorithm']}  leaves: {data['leaf_count']}  depth: {data['depth']}")
    for index, level in enumerate(data["levels"]):
        print(f"level {index}:")
        for digest in level:
            print(f"  {digest}")
    return EXIT_SUCCESS


def verify_cmd(args: argparse.Namespace) -> int:
    """Handle verify command."""
    config: RuntimeConfig = args.runtime_config
    claimed = from_hex(args.root)
    ok = MerkleTree.verify(
        claimed,
        _read_blocks(args.files),
        hasher=config.make_hasher(),
        max_workers=config.build.max_workers,
    )

    if args.json:
        print(json.dumps({"ok": ok, "root": args.root}, indent=2))
    else:
        print("OK: root matches" if ok else "FAILED: root does not match")
    return EXIT_SUCCESS if ok else EXIT_VERIFICATION_FAILED


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        print(get_default_config_template(), end="")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: merkle config [--init|--show]")
    print("  --init  Print a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


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
        config = load_config(args)
    except (OSError, MerkleException) as e:
        _report_error(args, e, prefix="Error loading configuration")
        return EXIT_RUNTIME_ERROR

    setup_logging(level=config.log_level, log_file=config.log_file)
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (OSError, ValueError, MerkleException) as e:
        _report_error(args, e)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
