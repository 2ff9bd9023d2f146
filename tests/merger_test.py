import pandas as pd
import pytest

from bysykkel.core.exceptions import MergeError
from bysykkel.merge import REDUCED_DROP_COLS, TripWeatherMerger


def one_trip(**overrides):
    row = {"started_at": "2022-05-01T14:23:00", "city": "Oslo", "duration": 600}
    row.update(overrides)
    return pd.DataFrame([row])


def weather(*rows):
    return pd.DataFrame(list(rows), columns=["city", "date", "hour", "temp", "condition_code"])


class TestScenarios:

    def test_matching_hour_attaches_reading(self):
        out = TripWeatherMerger(one_trip(), weather(("Oslo", "2022-05-01", "14", 12.5, 2))).merge()

        assert len(out) == 1
        assert out.loc[0, "temp"] == 12.5

    def test_no_reading_for_hour_keeps_trip(self):
        out = TripWeatherMerger(one_trip(), weather(("Oslo", "2022-05-01", "13", 12.5, 2))).merge()

        assert len(out) == 1
        assert pd.isna(out.loc[0, "temp"])

    def test_duplicate_key_fans_out(self):
        wx = weather(
            ("Oslo", "2022-05-01", "14", 12.5, 2),
            ("Oslo", "2022-05-01", "14", 13.5, 3),
        )
        out = TripWeatherMerger(one_trip(), wx).merge()

        assert len(out) == 2
        trip_cols = ["started_at", "city", "duration"]
        assert out[trip_cols].drop_duplicates().shape[0] == 1
        assert sorted(out["temp"]) == [12.5, 13.5]

    def test_other_city_does_not_match(self):
        out = TripWeatherMerger(one_trip(), weather(("Bergen", "2022-05-01", "14", 9.0, 7))).merge()

        assert pd.isna(out.loc[0, "temp"])


def test_hours_are_zero_padded_on_both_sides():
    trips = one_trip(started_at="2022-05-01 03:05:00+00:00")
    wx = pd.DataFrame({"city": ["Oslo"], "date": ["2022-05-01"], "hour": [3], "temp": [1.5]})

    out = TripWeatherMerger(trips, wx).merge()

    assert out.loc[0, "temp"] == 1.5


def test_helper_columns_dropped_and_single_city():
    out = TripWeatherMerger(one_trip(), weather(("Oslo", "2022-05-01", "14", 12.5, 2))).merge()

    assert "date" not in out.columns and "hour" not in out.columns
    assert list(out.columns).count("city") == 1
    assert not any(c.endswith(("_x", "_y")) for c in out.columns)


def test_every_trip_survives():
    trips = pd.DataFrame({
        "started_at": ["2022-05-01T14:23:00", "2022-05-01T14:50:00", "2022-05-02T08:00:00", "garbage"],
        "ended_at": ["2022-05-01T14:33:00", "2022-05-01T15:10:00", "2022-05-02T08:20:00", "garbage"],
        "start_station_id": [1, 2, 3, 4],
        "end_station_id": [2, 3, 1, 4],
        "city": ["Oslo", "Oslo", "Bergen", "Oslo"],
    })
    wx = weather(
        ("Oslo", "2022-05-01", "14", 12.5, 2),
        ("Oslo", "2022-05-01", "14", 12.7, 2),
    )

    out = TripWeatherMerger(trips, wx).merge()

    assert len(out) >= len(trips)
    triples = set(zip(out["started_at"], out["start_station_id"], out["end_station_id"]))
    for row in trips.itertuples(index=False):
        assert (row.started_at, row.start_station_id, row.end_station_id) in triples


def test_inputs_are_not_mutated():
    trips = one_trip()
    wx = weather(("Oslo", "2022-05-01", "14", 12.5, 2))
    trips_before, wx_before = trips.copy(), wx.copy()

    TripWeatherMerger(trips, wx, duplicates="mean").merge()

    pd.testing.assert_frame_equal(trips, trips_before)
    pd.testing.assert_frame_equal(wx, wx_before)


class TestDuplicatePolicies:

    WX = (
        ("Oslo", "2022-05-01", "14", 12.0, 2),
        ("Oslo", "2022-05-01", "14", 13.0, 3),
        ("Oslo", "2022-05-01", "14", 14.0, 3),
    )

    def test_first(self):
        out = TripWeatherMerger(one_trip(), weather(*self.WX), duplicates="first").merge()

        assert len(out) == 1
        assert out.loc[0, "temp"] == 12.0

    def test_mean(self):
        out = TripWeatherMerger(one_trip(), weather(*self.WX), duplicates="mean").merge()

        assert len(out) == 1
        assert out.loc[0, "temp"] == pytest.approx(13.0)
        assert out.loc[0, "condition_code"] == 3

    def test_mean_with_key_columns_only(self):
        wx = pd.DataFrame({
            "city": ["Oslo", "Oslo"],
            "date": ["2022-05-01", "2022-05-01"],
            "hour": [14, 14],
        })
        out = TripWeatherMerger(one_trip(), wx, duplicates="mean").merge()

        assert len(out) == 1
        assert list(out.columns) == ["started_at", "city", "duration"]

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            TripWeatherMerger(one_trip(), weather(*self.WX), duplicates="median")


class TestReduce:

    def full_table(self):
        trips = one_trip(
            start_station_name="Torggata",
            start_station_description="ved Torggata 1",
            end_station_name="Aker Brygge",
            end_station_description="ved kaia",
        )
        wx = pd.DataFrame([{
            "city": "Oslo", "date": "2022-05-01", "hour": 14, "temp": 12.5,
            "relative_humidity": 55, "wind_direction": 210, "wind_speed": 11.2,
            "pressure": 1012.3, "precipitation": 0.2,
        }])
        return TripWeatherMerger(trips, wx).merge()

    def test_reduced_is_strict_subset_with_same_rows(self):
        full = self.full_table()
        reduced = TripWeatherMerger.reduce(full)

        assert set(reduced.columns) < set(full.columns)
        assert len(reduced) == len(full)
        assert not set(REDUCED_DROP_COLS) & set(reduced.columns)
        assert {"temp", "precipitation", "duration", "city"} <= set(reduced.columns)


class TestValidation:

    def test_weather_without_hour(self):
        wx = pd.DataFrame({"city": ["Oslo"], "date": ["2022-05-01"], "temp": [1.0]})
        with pytest.raises(MergeError, match="hour"):
            TripWeatherMerger(one_trip(), wx).merge()

    def test_trips_without_city(self):
        trips = one_trip().drop(columns="city")
        with pytest.raises(MergeError, match="city"):
            TripWeatherMerger(trips, weather()).merge()
