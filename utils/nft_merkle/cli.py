"""Plumbing shared by the ``nft-whitelist``, ``nft-proof`` and ``nft-provenance`` commands."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Sequence

from .errors import NftMerkleError


EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_VERIFICATION_FAILED = 2

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path(os.getenv("NFT_MERKLE_OUT_DIR", ".")),
        help="Directory the generated files are written to (default: current directory)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("NFT_MERKLE_LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging verbosity for diagnostics on stderr (default: INFO)",
    )


def run_command(
    parse_args: Callable[[Optional[Sequence[str]]], argparse.Namespace],
    command: Callable[[argparse.Namespace], int],
    argv: Optional[Sequence[str]] = None,
) -> int:
    """Parse ``argv``, run ``command`` and map failures to an exit status."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    try:
        return command(args)
    except NftMerkleError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        return EXIT_FAILURE


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC with millisecond precision and a trailing Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def write_text(path: Path, text: str) -> Path:
    path = path.resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path
