from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Slice:
    """One remote file: a (city, year, month) trip CSV or a city's weather dump."""
    city: str
    url: str
    year: int | None = None
    month: str | None = None
