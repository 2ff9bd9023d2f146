from __future__ import annotations

import logging
from typing import List, Sequence

import pandas as pd
import requests

from bysykkel.core.exceptions import DataNotFoundError
from bysykkel.models import Slice, TRIP_COLUMNS
from bysykkel.scraper.trip.cleaner import TripCleaner
from bysykkel.sources.constants import (
    CITIES,
    MONTHS,
    TIMEOUT,
    TRIP_URL_TEMPLATES,
    WORKERS,
    YEARS,
)
from bysykkel.sources.helpers import download_bytes, run_slices, url_exists


class TripScraper:
    """
    Download every published monthly trip export for the configured cities
    and years and stack them into one table.

    - One slice per (city, year, month); unpublished months are skipped.
    - Slices are fetched on a small thread pool and concatenated in slice order.
    """

    def __init__(
        self,
        session: requests.Session,
        cities: Sequence[str] = CITIES,
        years: Sequence[int] = YEARS,
        months: Sequence[str] = MONTHS,
        workers: int = WORKERS,
        timeout: float = TIMEOUT,
    ):
        self.session = session
        self.cities = cities
        self.years = years
        self.months = months
        self.workers = workers
        self.timeout = timeout

    def slices(self) -> List[Slice]:
        return [
            Slice(city, TRIP_URL_TEMPLATES[city].format(year=year, month=month), year, month)
            for city in self.cities
            for year in self.years
            for month in self.months
        ]

    def run_once(self) -> pd.DataFrame:
        slices = self.slices()
        logging.info("Probing %s trip exports", len(slices))
        frames = run_slices(slices, self.fetch_slice, self.workers, desc="trips")
        if not frames:
            logging.info("No trip data found")
            return pd.DataFrame(columns=[*TRIP_COLUMNS, "city"])

        trips = pd.concat(frames, ignore_index=True)
        logging.info("Collected %s trips from %s file(s)", len(trips), len(frames))
        return trips

    def fetch_slice(self, sl: Slice) -> pd.DataFrame | None:
        if not url_exists(sl.url, self.session, self.timeout):
            logging.debug("not published: %s", sl.url)
            return None
        try:
            content = download_bytes(sl.url, self.session, self.timeout)
        except DataNotFoundError:
            logging.debug("gone after probe: %s", sl.url)
            return None

        logging.info("downloaded: %s", sl.url)
        return TripCleaner(content, sl.url, sl.city).clean()
