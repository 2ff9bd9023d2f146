# meteostat bulk "hourly" files have no header; positions are fixed.
WEATHER_COLUMNS = (
    "date",
    "hour",
    "temp",
    "dew_point",
    "relative_humidity",
    "precipitation",
    "snow_depth",
    "wind_direction",
    "wind_speed",
    "wind_peak_gust",
    "pressure",
    "sunshine",
    "condition_code",
)

WEATHER_KEY_COLS = ("city", "date", "hour")

WEATHER_VALUE_COLS = WEATHER_COLUMNS[2:]

# dropped from the reduced joined table
WEATHER_REDUNDANT_COLS = (
    "relative_humidity",
    "wind_direction",
    "wind_speed",
    "pressure",
)
