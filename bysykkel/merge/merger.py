from __future__ import annotations

import logging
from typing import Iterable

import pandas as pd

from bysykkel.core.exceptions import MergeError
from bysykkel.models.trip import TRIP_TEXT_COLS
from bysykkel.models.weather import WEATHER_KEY_COLS, WEATHER_REDUNDANT_COLS
from bysykkel.sources.constants import DUPLICATE_POLICIES

TRIP_MERGE_COLS = ("started_at", "city")
REDUCED_DROP_COLS = TRIP_TEXT_COLS + WEATHER_REDUNDANT_COLS

_KEYS = list(WEATHER_KEY_COLS)


class TripWeatherMerger:
    """
    Attach the weather reading of the trip's start hour to every trip.

    Left join on (city, date, hour): a trip without a reading keeps empty
    weather columns, and with ``duplicates="keep"`` a key that occurs twice
    on the weather side yields two rows for that trip.
    """

    def __init__(self, trips: pd.DataFrame, weather: pd.DataFrame, duplicates: str = "keep"):
        if duplicates not in DUPLICATE_POLICIES:
            raise ValueError(f"duplicates must be one of {DUPLICATE_POLICIES}, got {duplicates!r}")
        self.trips = trips
        self.weather = weather
        self.duplicates = duplicates

    def merge(self) -> pd.DataFrame:
        _require(self.trips, TRIP_MERGE_COLS, "trip table")
        _require(self.weather, WEATHER_KEY_COLS, "weather table")

        trips = self._trip_keys(self.trips)
        weather = self._collapse(self._weather_keys(self.weather))

        joined = trips.merge(weather, on=_KEYS, how="left", sort=False)
        joined = joined.drop(columns=["date", "hour"]).reset_index(drop=True)
        logging.info(
            "Joined %s trips with %s weather rows → %s rows",
            len(trips), len(weather), len(joined),
        )
        return joined

    @staticmethod
    def reduce(joined: pd.DataFrame) -> pd.DataFrame:
        """Drop free-text station columns and redundant weather columns."""
        return joined.drop(columns=[c for c in REDUCED_DROP_COLS if c in joined.columns])

    # ──────────────────────────────────────────────────────────────────────
    @staticmethod
    def _trip_keys(trips: pd.DataFrame) -> pd.DataFrame:
        df = trips.copy()
        started = pd.to_datetime(df["started_at"], utc=True, format="ISO8601", errors="coerce")
        # object keys on both sides, NaN where the timestamp did not parse
        df["date"] = started.dt.strftime("%Y-%m-%d").astype(object)
        df["hour"] = started.dt.strftime("%H").astype(object)
        df["city"] = df["city"].astype(str)
        return df

    @staticmethod
    def _weather_keys(weather: pd.DataFrame) -> pd.DataFrame:
        df = weather.copy()
        df["date"] = pd.to_datetime(df["date"], format="%Y-%m-%d", errors="coerce").dt.strftime("%Y-%m-%d").astype(object)
        df["hour"] = pd.to_numeric(df["hour"], errors="coerce").map(
            lambda h: f"{int(h):02d}", na_action="ignore"
        ).astype(object)
        df["city"] = df["city"].astype(str)
        return df.dropna(subset=_KEYS)

    def _collapse(self, weather: pd.DataFrame) -> pd.DataFrame:
        if self.duplicates == "keep":
            return weather
        if self.duplicates == "first":
            return weather.drop_duplicates(subset=_KEYS, keep="first")

        values = [c for c in weather.columns if c not in _KEYS]
        if not values:
            return weather.drop_duplicates(subset=_KEYS, keep="first")
        agg = {}
        for col in values:
            if col == "condition_code":
                agg[col] = (col, lambda x: x.mode().iloc[0] if not x.mode().empty else None)
            elif pd.api.types.is_numeric_dtype(weather[col]):
                agg[col] = (col, "mean")
            else:
                agg[col] = (col, "first")
        return weather.groupby(_KEYS, as_index=False, sort=False).agg(**agg)


def _require(df: pd.DataFrame, cols: Iterable[str], name: str) -> None:
    missing = sorted(set(cols) - set(df.columns))
    if missing:
        raise MergeError(f"{name} is missing required columns {missing}")
