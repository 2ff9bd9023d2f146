from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from bysykkel.sources.constants import (
    CACHE_EXPIRE_AFTER,
    CACHE_NAME,
    CITIES,
    DUPLICATE_POLICIES,
    RETRIES,
    TIMEOUT,
    TRIPS_CSV,
    TRIPS_REDUCED_CSV,
    TRIP_DATA_CSV,
    WEATHER_DATA_CSV,
    WORKERS,
    YEARS,
)


@dataclass
class PipelineConfig:
    """Run settings; environment variables provide the defaults where noted."""

    data_dir: Path = field(default_factory=lambda: Path(os.getenv("BYSYKKEL_DATA_DIR", "data")))
    years: Tuple[int, ...] = YEARS
    cities: Tuple[str, ...] = CITIES
    workers: int = field(default_factory=lambda: int(os.getenv("BYSYKKEL_WORKERS", WORKERS)))
    timeout: float = TIMEOUT
    retries: int = RETRIES
    cache_name: str = field(default_factory=lambda: os.getenv("BYSYKKEL_CACHE", CACHE_NAME))
    cache_expire_after: int = CACHE_EXPIRE_AFTER
    duplicates: str = "keep"

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        self.years = tuple(self.years)
        self.cities = tuple(self.cities)

        unknown = sorted(set(self.cities) - set(CITIES))
        if unknown:
            raise ValueError(f"unknown cities {unknown}; choose from {list(CITIES)}")
        if not self.years:
            raise ValueError("year range is empty")
        if self.duplicates not in DUPLICATE_POLICIES:
            raise ValueError(f"duplicates must be one of {DUPLICATE_POLICIES}")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")

    @property
    def trip_data_path(self) -> Path:
        return self.data_dir / TRIP_DATA_CSV

    @property
    def weather_data_path(self) -> Path:
        return self.data_dir / WEATHER_DATA_CSV

    @property
    def trips_path(self) -> Path:
        return self.data_dir / TRIPS_CSV

    @property
    def trips_reduced_path(self) -> Path:
        return self.data_dir / TRIPS_REDUCED_CSV
