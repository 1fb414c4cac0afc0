from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from .config_loader import load_specification
from .errors import InterpreterError, ResourceError
from .machine import ACCEPT_TOKEN, EXTEND, FIXED, REJECT_TOKEN, TuringMachine

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_STEP_LIMIT = 3


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tm-interpreter",
        description="Deterministic single-tape Turing machine interpreter",
    )
    parser.add_argument("description", type=Path, help="Path to the machine description file")
    parser.add_argument("word", help="Input word written on the tape")
    parser.add_argument("output", type=Path, help="Path of the file receiving the configurations")
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Stop after this many steps instead of running until the machine halts",
    )
    parser.add_argument(
        "--extend-tape",
        dest="tape_policy",
        action="store_const",
        const=EXTEND,
        default=FIXED,
        help="Grow the tape with blanks instead of failing when the head leaves it",
    )
    parser.add_argument("--accept-token", default=ACCEPT_TOKEN, help="Final line written on acceptance")
    parser.add_argument("--reject-token", default=REJECT_TOKEN, help="Final line written on rejection")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every step")
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        spec = load_specification(args.description)
        machine = TuringMachine(
            spec,
            tape_policy=args.tape_policy,
            accept_token=args.accept_token,
            reject_token=args.reject_token,
        )
        try:
            handle = args.output.open("w", encoding="utf-8")
        except OSError as exc:
            raise ResourceError(
                f"unable to create output {str(args.output)!r}: {exc}", path=args.output
            ) from exc
        with handle:
            try:
                result = machine.run(args.word, handle, max_steps=args.max_steps, capture=False)
            except OSError as exc:
                raise ResourceError(
                    f"unable to write output {str(args.output)!r}: {exc}", path=args.output
                ) from exc
    except InterpreterError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return EXIT_ERROR

    if not result.halted:
        logger.warning("Machine did not halt within %d step(s)", args.max_steps)
        return EXIT_STEP_LIMIT
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
