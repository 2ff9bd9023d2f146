# Column layout of the urbansharing "trips/v1" monthly exports.
TRIP_COLUMNS = (
    "started_at",
    "ended_at",
    "duration",
    "start_station_id",
    "start_station_name",
    "start_station_description",
    "start_station_latitude",
    "start_station_longitude",
    "end_station_id",
    "end_station_name",
    "end_station_description",
    "end_station_latitude",
    "end_station_longitude",
)

TRIP_REQUIRED_COLS = ("started_at", "ended_at", "start_station_id", "end_station_id")

# free-text columns, only kept in the full joined table
TRIP_TEXT_COLS = (
    "start_station_name",
    "start_station_description",
    "end_station_name",
    "end_station_description",
)
