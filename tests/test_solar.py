from datetime import datetime, timedelta, timezone

import suntime

from themeflux import solar
from themeflux.location import Coordinates
from themeflux.solar import SolarTimes, SunTimes, around, is_day

TEN = timedelta(minutes=10)


def at(hour, minute=0, day=1):
    return datetime(2024, 6, day, hour, minute, tzinfo=timezone.utc)


TIMES = SolarTimes(sunrise=at(8), sunset=at(20))


def test_is_day_just_after_early_switch():
    # 07:52 is after 07:50 (sunrise - 10 min)
    assert is_day(TIMES, at(7, 52), TEN) is True


def test_is_night_just_after_early_sunset_switch():
    # 19:51 is after 19:50 (sunset - 10 min)
    assert is_day(TIMES, at(19, 51), TEN) is False


def test_is_day_boundaries_are_strict():
    assert is_day(TIMES, at(7, 50), TEN) is False
    assert is_day(TIMES, at(19, 50), TEN) is False
    assert is_day(TIMES, at(7, 50) + timedelta(seconds=1), TEN) is True
    assert is_day(TIMES, at(19, 50) - timedelta(seconds=1), TEN) is True


def test_is_day_sweep_flips_exactly_twice():
    results = []
    now = at(0)
    while now < at(23, 59):
        results.append(is_day(TIMES, now, TEN))
        now += timedelta(minutes=1)
    flips = [i for i in range(1, len(results)) if results[i] != results[i - 1]]
    assert len(flips) == 2
    assert results[0] is False and results[-1] is False
    assert results[flips[0]] is True and results[flips[1]] is False


def test_zero_offset_uses_actual_sunrise():
    assert is_day(TIMES, at(7, 59), timedelta(0)) is False
    assert is_day(TIMES, at(8, 1), timedelta(0)) is True


def test_missing_times_count_as_night():
    assert is_day(SolarTimes(None, None), at(12), TEN) is False


def test_around_wraps_sunset_past_midnight():
    # West of Greenwich sunset lands after 00:00 UTC
    times = around(at(9, 30), at(0, 30), at(18))
    assert times.sunrise == at(9, 30)
    assert times.sunset == at(0, 30, day=2)


def test_around_moves_pair_to_nearest_solar_noon():
    times = around(at(8), at(20), at(14, day=3))
    assert times.sunrise == at(8, day=3)
    assert times.sunset == at(20, day=3)

    times = around(at(8, day=3), at(20, day=3), at(10))
    assert times.sunrise == at(8)


def test_sun_times_new_york_summer():
    now = datetime(2024, 6, 21, 17, 0, tzinfo=timezone.utc)  # 13:00 EDT
    times = SunTimes().times(Coordinates(40.0, -74.0), now)
    assert times.sunrise < now < times.sunset
    assert timedelta(hours=14) < times.sunset - times.sunrise < timedelta(hours=16)
    assert is_day(times, now) is True


def test_sun_times_polar_night(monkeypatch):
    class PolarSun:
        def __init__(self, lat, lng):
            pass

        def get_sunrise_time(self, day):
            raise suntime.SunTimeException("The sun never rises on this location (on the specified date)")

        get_sunset_time = get_sunrise_time

    monkeypatch.setattr(solar, "Sun", PolarSun)
    times = SunTimes().times(Coordinates(78.2, 15.6), at(12))
    assert times == SolarTimes(None, None)
