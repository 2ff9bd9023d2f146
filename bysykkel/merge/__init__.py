from .merger import TripWeatherMerger, REDUCED_DROP_COLS
