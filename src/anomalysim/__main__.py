"""Command-line interface."""
import argparse
import sys
from typing import List, Optional

from anomalysim.config import SEED_PAIRS, TS, RunSettings
from anomalysim.logging_config import level_from_name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anomalysim",
        description="Real-time electron/quark N-body simulation with a free-flying camera.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the initial particle layout.")
    parser.add_argument("--pairs", type=int, default=SEED_PAIRS, help="Electron/quark pairs to spawn.")
    parser.add_argument("--dt", type=float, default=TS, help="Fixed simulation time step per frame.")
    parser.add_argument("--headless", action="store_true", help="Run without a window.")
    parser.add_argument("--frames", type=int, default=600, help="Frames to run in headless mode.")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return parser


def parse_settings(argv: Optional[List[str]] = None) -> RunSettings:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return RunSettings(
            seed=args.seed,
            pairs=args.pairs,
            dt=args.dt,
            headless=args.headless,
            frames=args.frames,
            log_level=level_from_name(args.log_level),
            log_file=args.log_file,
        )
    except ValueError as e:
        parser.error(str(e))


def main(argv: Optional[List[str]] = None) -> int:
    from anomalysim.main import main as run

    return run(parse_settings(argv))


if __name__ == "__main__":
    sys.exit(main())
