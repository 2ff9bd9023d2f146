"""
Fetch → merge → persist.

Every table of a stage is computed before the first file is written, so a
failing run leaves the previous outputs untouched.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd
import requests
from filelock import FileLock, Timeout

from bysykkel.config import PipelineConfig
from bysykkel.core.exceptions import PipelineError, ErrorCode
from bysykkel.merge import TripWeatherMerger
from bysykkel.scraper.trip.scraper import TripScraper
from bysykkel.scraper.weather.fetcher import WeatherFetcher
from bysykkel.sources.constants import LOCK_NAME, LOCK_TIMEOUT
from bysykkel.sources.helpers import make_session

STAGES = ("all", "fetch", "merge")


def fetch(cfg: PipelineConfig, session: requests.Session | None = None) -> Tuple[pd.DataFrame, pd.DataFrame]:
    own_session = session is None
    if own_session:
        session = make_session(cfg.cache_name, cfg.cache_expire_after, cfg.retries)
    try:
        trips = TripScraper(
            session,
            cities=cfg.cities,
            years=cfg.years,
            workers=cfg.workers,
            timeout=cfg.timeout,
        ).run_once()
        weather = WeatherFetcher(
            session,
            cities=cfg.cities,
            workers=cfg.workers,
            timeout=cfg.timeout,
        ).fetch()
    finally:
        if own_session:
            session.close()
    return trips, weather


def merge(trips: pd.DataFrame, weather: pd.DataFrame, duplicates: str = "keep") -> Tuple[pd.DataFrame, pd.DataFrame]:
    joined = TripWeatherMerger(trips, weather, duplicates).merge()
    return joined, TripWeatherMerger.reduce(joined)


def load_raw(cfg: PipelineConfig) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Reload the persisted raw concatenations written by the fetch stage."""
    for path in (cfg.trip_data_path, cfg.weather_data_path):
        if not path.exists():
            raise PipelineError(ErrorCode.NOT_FOUND, f"{path} missing; run the fetch stage first")
    trips = pd.read_csv(cfg.trip_data_path, low_memory=False)
    weather = pd.read_csv(cfg.weather_data_path, dtype={"date": str}, low_memory=False)
    logging.info("Reloaded %s trips and %s weather rows", len(trips), len(weather))
    return trips, weather


# ------------------------------------------------------------------ persistence
def _part_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".part")


def save(frames: Dict[Path, pd.DataFrame], dest: Path) -> List[Path]:
    """
    Write every frame to a ``.part`` file first and swap them into place only
    once all of them were written, so a failed write leaves the previous
    outputs untouched.
    """
    dest.mkdir(parents=True, exist_ok=True)
    lock = FileLock(str(dest / LOCK_NAME))
    try:
        with lock.acquire(timeout=LOCK_TIMEOUT):
            parts = {path: _part_path(path) for path in frames}
            try:
                for path, df in frames.items():
                    df.to_csv(parts[path], index=False)
                for path, part in parts.items():
                    os.replace(part, path)
                    logging.info("wrote %s (%s rows)", path, len(frames[path]))
            finally:
                for part in parts.values():
                    part.unlink(missing_ok=True)
    except Timeout as exc:
        raise PipelineError(ErrorCode.INTERNAL, f"Could not obtain output lock for {dest}") from exc
    return list(frames)


# ------------------------------------------------------------------ entry
def run(cfg: PipelineConfig, stage: str = "all", session: requests.Session | None = None) -> List[Path]:
    if stage not in STAGES:
        raise ValueError(f"stage must be one of {STAGES}, got {stage!r}")

    frames: Dict[Path, pd.DataFrame] = {}
    if stage == "merge":
        trips, weather = load_raw(cfg)
    else:
        trips, weather = fetch(cfg, session)
        frames[cfg.trip_data_path] = trips
        frames[cfg.weather_data_path] = weather

    if stage != "fetch":
        joined, reduced = merge(trips, weather, cfg.duplicates)
        frames[cfg.trips_path] = joined
        frames[cfg.trips_reduced_path] = reduced

    return save(frames, cfg.data_dir)
