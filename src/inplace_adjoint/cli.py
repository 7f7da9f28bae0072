"""inplace-adjoint command line.

Usage:
    inplace-adjoint block.py --vars a,b,c,val,i
    inplace-adjoint block.py --vars a,b,c,val,i --const i --name f1
    cat block.py | inplace-adjoint - --vars a,c,val,i --name f1

The block file holds either a ``def f1():`` unit or bare statements (then
``--name`` is required). Generated definitions go to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from inplace_adjoint import __version__
from inplace_adjoint.config import Settings
from inplace_adjoint.errors import InplaceAdjointError
from inplace_adjoint.generator import AdjointGenerator

logger = logging.getLogger(__name__)


def _names(value: str) -> list[str]:
    names = [name.strip() for name in value.split(",") if name.strip()]
    for name in names:
        if not name.isidentifier():
            raise argparse.ArgumentTypeError(f"{name!r} is not a valid identifier")
    return names


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inplace-adjoint",
        description="Generate in-place, non-mutating and adjoint definitions for a mutating block.",
    )
    parser.add_argument("block", help="file holding the block, or - for stdin")
    parser.add_argument(
        "--vars",
        type=_names,
        required=True,
        help="comma-separated variables visible where the block starts, in order",
    )
    parser.add_argument("--const", type=_names, default=[], help="comma-separated constant variables")
    parser.add_argument("--name", help="function name for bare statements")
    parser.add_argument("--log-level", help="override INPLACE_ADJOINT_LOG_LEVEL")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(level: str) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root = logging.getLogger("inplace_adjoint")
    root.handlers = [handler]
    root.setLevel(level)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {"log_level": args.log_level} if args.log_level else {}
    try:
        cfg = Settings(**overrides)
    except ValueError as exc:
        print(f"inplace-adjoint: invalid settings: {exc}", file=sys.stderr)
        return 2
    setup_logging(cfg.log_level)

    try:
        text = sys.stdin.read() if args.block == "-" else Path(args.block).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"inplace-adjoint: {exc}", file=sys.stderr)
        return 2

    generator = AdjointGenerator(constants=args.const, settings=cfg)
    try:
        generator.add_source(text, args.vars, function_name=args.name)
        generator.report(sys.stdout)
    except (InplaceAdjointError, ValueError) as exc:
        logger.debug("Generation failed", exc_info=True)
        print(f"inplace-adjoint: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
