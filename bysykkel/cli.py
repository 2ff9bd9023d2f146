"""
cli.py  –  Download Norwegian bike-share trips and weather, join them.

USAGE examples
--------------
# everything, default years 2018-2022, all three cities
bysykkel --dir ./data

# only Oslo 2021-2022, raw downloads only
bysykkel fetch --dir ./data --city Oslo --start-year 2021 --end-year 2022

# re-join previously downloaded raw tables, averaging duplicate weather hours
bysykkel merge --dir ./data --duplicates mean
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Sequence

from bysykkel.config import PipelineConfig
from bysykkel.core.exceptions import PipelineError
from bysykkel.pipeline import STAGES, run
from bysykkel.sources.constants import CITIES, DUPLICATE_POLICIES, YEARS


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="bysykkel", description="Download Norwegian bike-share trips and weather, join them.")
    ap.add_argument("stage", nargs="?", default="all", choices=STAGES,
                    help="all | fetch | merge (default: all)")
    ap.add_argument("-d", "--dir", default=None,
                    help="output directory (default: $BYSYKKEL_DATA_DIR or ./data)")
    ap.add_argument("--start-year", type=int, default=YEARS[0],
                    help=f"first year to download (default: {YEARS[0]})")
    ap.add_argument("--end-year", type=int, default=YEARS[-1],
                    help=f"last year to download, inclusive (default: {YEARS[-1]})")
    ap.add_argument("-c", "--city", action="append", choices=CITIES, default=None,
                    help="restrict to a city; repeatable (default: all)")
    ap.add_argument("-w", "--workers", type=int, default=None,
                    help="parallel downloads (default: $BYSYKKEL_WORKERS or 4)")
    ap.add_argument("--duplicates", choices=DUPLICATE_POLICIES, default="keep",
                    help="repeated weather hours: keep every row, first, or mean")
    ap.add_argument("--no-cache", action="store_true",
                    help="bypass the local HTTP cache")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    if args.end_year < args.start_year:
        raise ValueError("--end-year must not be before --start-year")

    kwargs = dict(
        years=tuple(range(args.start_year, args.end_year + 1)),
        cities=tuple(args.city) if args.city else CITIES,
        duplicates=args.duplicates,
    )
    if args.dir is not None:
        kwargs["data_dir"] = args.dir
    if args.workers is not None:
        kwargs["workers"] = args.workers
    if args.no_cache:
        kwargs["cache_expire_after"] = 0
    return PipelineConfig(**kwargs)


def main(argv: Sequence[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        cfg = config_from_args(args)
    except ValueError as exc:
        ap.error(str(exc))

    try:
        written: List = run(cfg, args.stage)
    except PipelineError as exc:
        print(f"⚠ {args.stage} stage failed [{exc.code.value}]: {exc.message}", file=sys.stderr)
        return 1

    for path in written:
        print("✓", path)
    return 0
