import numpy as np
from pyproj import Geod

_geod = Geod(ellps="WGS84")


def calc_air_distances(lon1, lat1, lon2, lat2) -> np.ndarray:
    """Geodesic WGS84 distance in meters per row; rows with a missing coordinate come back as NaN."""
    lon1, lat1, lon2, lat2 = (np.asarray(a, dtype=float) for a in (lon1, lat1, lon2, lat2))
    out = np.full(lon1.shape, np.nan)
    ok = ~(np.isnan(lon1) | np.isnan(lat1) | np.isnan(lon2) | np.isnan(lat2))
    if ok.any():
        _, _, dist = _geod.inv(lon1[ok], lat1[ok], lon2[ok], lat2[ok])
        out[ok] = dist
    return out
