from __future__ import annotations

import logging
from typing import List, Sequence

import pandas as pd
import requests

from bysykkel.core.exceptions import DataNotFoundError
from bysykkel.models import Slice, WEATHER_COLUMNS
from bysykkel.scraper.weather.cleaner import WeatherCleaner
from bysykkel.sources.constants import (
    CITIES,
    TIMEOUT,
    WEATHER_STATION_IDS,
    WEATHER_URL_TEMPLATE,
    WORKERS,
)
from bysykkel.sources.helpers import download_bytes, run_slices, url_exists


class WeatherFetcher:
    def __init__(
        self,
        session: requests.Session,
        cities: Sequence[str] = CITIES,
        workers: int = WORKERS,
        timeout: float = TIMEOUT,
    ):
        self.session = session
        self.cities = cities
        self.workers = workers
        self.timeout = timeout

    def slices(self) -> List[Slice]:
        return [
            Slice(city, WEATHER_URL_TEMPLATE.format(station=WEATHER_STATION_IDS[city]))
            for city in self.cities
        ]

    def fetch(self) -> pd.DataFrame:
        frames = run_slices(self.slices(), self.fetch_slice, self.workers, desc="weather")
        if not frames:
            return self._empty_frame()

        weather = pd.concat(frames, ignore_index=True)
        logging.info("Collected %s weather rows for %s station(s)", len(weather), len(frames))
        return weather

    def fetch_slice(self, sl: Slice) -> pd.DataFrame | None:
        if not url_exists(sl.url, self.session, self.timeout):
            logging.debug("no station dump: %s", sl.url)
            return None
        try:
            content = download_bytes(sl.url, self.session, self.timeout)
        except DataNotFoundError:
            logging.debug("gone after probe: %s", sl.url)
            return None

        logging.info("downloaded: %s", sl.url)
        return WeatherCleaner(content, sl.url, sl.city).clean()

    @staticmethod
    def _empty_frame() -> pd.DataFrame:
        return pd.DataFrame(columns=[*WEATHER_COLUMNS, "city"])
