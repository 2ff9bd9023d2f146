from .slice import Slice
from .trip import TRIP_COLUMNS, TRIP_REQUIRED_COLS
from .weather import WEATHER_COLUMNS, WEATHER_KEY_COLS
