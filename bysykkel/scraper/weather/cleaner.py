from __future__ import annotations

import io
import zlib

import pandas as pd

from bysykkel.core.exceptions import SchemaMismatchError
from bysykkel.models.weather import WEATHER_COLUMNS, WEATHER_VALUE_COLS

_GZIP_MAGIC = b"\x1f\x8b"


class WeatherCleaner:
    """Headerless meteostat hourly dump → named, typed columns."""

    def __init__(self, content: bytes, source: str, city: str):
        self.content = content
        self.source = source
        self.city = city

    def clean(self) -> pd.DataFrame | None:
        df = self._read()
        if df is None or df.empty:
            return None

        if df.shape[1] != len(WEATHER_COLUMNS):
            raise SchemaMismatchError(
                self.source,
                f"expected {len(WEATHER_COLUMNS)} columns, got {df.shape[1]}",
            )
        df.columns = list(WEATHER_COLUMNS)

        hours = pd.to_numeric(df["hour"], errors="coerce")
        if hours.isna().any() or not hours.between(0, 23).all():
            raise SchemaMismatchError(self.source, "hour column outside 0-23")
        df["hour"] = hours.astype("int64")

        for col in WEATHER_VALUE_COLS:
            df[col] = pd.to_numeric(df[col], errors="coerce")

        df["city"] = self.city
        return df

    def _read(self) -> pd.DataFrame | None:
        # requests may already have undone a Content-Encoding: gzip
        compression = "gzip" if self.content[:2] == _GZIP_MAGIC else None
        try:
            return pd.read_csv(
                io.BytesIO(self.content),
                header=None,
                compression=compression,
                dtype={0: str},
                low_memory=False,
            )
        except pd.errors.EmptyDataError:
            return None
        except (pd.errors.ParserError, UnicodeDecodeError, OSError, EOFError, zlib.error) as exc:
            raise SchemaMismatchError(self.source, str(exc)) from exc
