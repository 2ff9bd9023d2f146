"""Helpers to turn a persisted joined table into a frame ready for modelling."""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from bysykkel.distance import calc_air_distances

WEATHER_FRAME_COLS = ["city", "duration", "temp", "dew_point", "precipitation"]


def load_trips(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path, low_memory=False)
    for col in ("started_at", "ended_at"):
        if col in df.columns:
            df[col] = pd.to_datetime(df[col], utc=True, format="ISO8601", errors="coerce")
    return df


def add_trip_features(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    started = pd.to_datetime(out["started_at"], utc=True, format="ISO8601", errors="coerce")

    out["start_hour"] = started.dt.hour.astype("Int64")
    out["weekend"] = started.dt.weekday.map(
        lambda d: "Weekend" if d >= 5 else "Weekday", na_action="ignore"
    )
    out["round_trip"] = out["start_station_id"] == out["end_station_id"]
    out["distance_m"] = calc_air_distances(
        out["start_station_longitude"],
        out["start_station_latitude"],
        out["end_station_longitude"],
        out["end_station_latitude"],
    )
    return out


def weather_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Duration next to the weather readings, rows with any gap removed."""
    return df[WEATHER_FRAME_COLS].dropna().reset_index(drop=True)
