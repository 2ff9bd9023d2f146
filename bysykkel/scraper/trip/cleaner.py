from __future__ import annotations

import io
import re
import warnings

import pandas as pd

from bysykkel.core.exceptions import SchemaMismatchError
from bysykkel.models.trip import TRIP_REQUIRED_COLS

__all__ = ["TripCleaner"]


class TripCleaner:
    """Parse one monthly trip export and tag it with its city."""

    def __init__(self, content: bytes, source: str, city: str):
        self.content = content
        self.source = source
        self.city = city

    def clean(self) -> pd.DataFrame | None:
        trips = self._read()
        if trips is None or trips.empty:
            return None

        trips = self._canonicalise_headers(trips)

        missing = set(TRIP_REQUIRED_COLS) - set(trips.columns)
        if missing:
            raise SchemaMismatchError(self.source, f"missing columns {sorted(missing)}")

        trips = self._parse_datetimes(trips)
        trips = self._impute_duration(trips)
        trips = self._drop_unusable(trips)

        trips["city"] = self.city
        return trips.reset_index(drop=True)

    def _read(self) -> pd.DataFrame | None:
        try:
            df = pd.read_csv(io.BytesIO(self.content), low_memory=False)
        except pd.errors.EmptyDataError:
            return None
        except (pd.errors.ParserError, UnicodeDecodeError) as exc:
            raise SchemaMismatchError(self.source, str(exc)) from exc
        df.columns = df.columns.str.strip()
        return df

    @staticmethod
    def _canonicalise_headers(df: pd.DataFrame) -> pd.DataFrame:
        return df.rename(
            columns=lambda c: re.sub(
                r"_+", "_",
                c.lower().strip().replace("-", "_").replace(" ", "_")
            ),
        )

    @staticmethod
    def _parse_datetimes(df: pd.DataFrame) -> pd.DataFrame:
        df["started_at"] = pd.to_datetime(df["started_at"], utc=True, format="ISO8601", errors="coerce")
        df["ended_at"] = pd.to_datetime(df["ended_at"], utc=True, format="ISO8601", errors="coerce")
        return df

    @staticmethod
    def _impute_duration(df: pd.DataFrame) -> pd.DataFrame:
        derived = (df["ended_at"] - df["started_at"]).dt.total_seconds()
        if "duration" not in df.columns:
            df["duration"] = derived
        else:
            df["duration"] = pd.to_numeric(df["duration"], errors="coerce").fillna(derived)
        return df

    def _drop_unusable(self, df: pd.DataFrame) -> pd.DataFrame:
        ok = (
            df["started_at"].notna()
            & df["ended_at"].notna()
            & (df["started_at"] <= df["ended_at"])
            & df["duration"].notna()
        )
        dropped = int((~ok).sum())
        if dropped:
            warnings.warn(
                f"{self.source}: dropped {dropped} trip(s) with missing or reversed timestamps",
                stacklevel=2,
            )
        df = df.loc[ok].copy()
        df["duration"] = df["duration"].round().astype("int64")
        return df
