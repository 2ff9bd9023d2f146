TRIP_URL_TEMPLATES = {
    "Trondheim": "https://data.urbansharing.com/trondheimbysykkel.no/trips/v1/{year}/{month}.csv",
    "Oslo":      "https://data.urbansharing.com/oslobysykkel.no/trips/v1/{year}/{month}.csv",
    "Bergen":    "https://data.urbansharing.com/bergenbysykkel.no/trips/v1/{year}/{month}.csv",
}
CITIES = tuple(TRIP_URL_TEMPLATES)
YEARS  = tuple(range(2018, 2023))
MONTHS = tuple(f"{m:02d}" for m in range(1, 13))

# meteostat reference station per city
WEATHER_STATION_IDS = {
    "Trondheim": "01257",
    "Oslo":      "01492",
    "Bergen":    "01317",
}
WEATHER_URL_TEMPLATE = "https://bulk.meteostat.net/v2/hourly/{station}.csv.gz"

HEADERS = {
    "User-Agent": "bysykkel-weather/0.1 (+https://data.urbansharing.com)",
    "Accept": "text/csv,application/gzip;q=0.9,*/*;q=0.1",
}
TIMEOUT         = 30
RETRIES         = 3
BACKOFF_FACTOR  = 0.5
STATUS_TO_RETRY = (500, 502, 503, 504)
WORKERS         = 4

# http cache
CACHE_NAME         = "bysykkel_cache"
CACHE_EXPIRE_AFTER = 3600

# output files
TRIP_DATA_CSV     = "trip_data.csv"
WEATHER_DATA_CSV  = "weather_data.csv"
TRIPS_CSV         = "trips.csv"
TRIPS_REDUCED_CSV = "trips_s.csv"
LOCK_NAME         = ".bysykkel.lock"
LOCK_TIMEOUT      = 60

DUPLICATE_POLICIES = ("keep", "first", "mean")
