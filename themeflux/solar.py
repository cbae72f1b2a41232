import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from suntime import Sun, SunTimeException

from themeflux.location import Coordinates

DAY = timedelta(days=1)


@dataclass(frozen=True)
class SolarTimes:
    """Sunrise and sunset (aware, UTC). None where the sun never rises or sets."""

    sunrise: Optional[datetime]
    sunset: Optional[datetime]


def around(sunrise: datetime, sunset: datetime, now: datetime) -> SolarTimes:
    """Shift a sunrise/sunset pair by whole days so its solar noon is within 12h of now."""
    if sunset < sunrise:
        sunset += DAY
    noon = sunrise + (sunset - sunrise) / 2
    while noon - now > DAY / 2:
        sunrise, sunset, noon = sunrise - DAY, sunset - DAY, noon - DAY
    while now - noon > DAY / 2:
        sunrise, sunset, noon = sunrise + DAY, sunset + DAY, noon + DAY
    return SolarTimes(sunrise, sunset)


class SunTimes:
    """Sunrise / sunset for a place and instant, computed by suntime."""

    def times(self, coords: Coordinates, now: datetime) -> SolarTimes:
        sun = Sun(coords.lat, coords.lng)
        today = now.astimezone(timezone.utc)
        try:
            sunrise = sun.get_sunrise_time(today)
            sunset = sun.get_sunset_time(today)
        except SunTimeException as e:
            # Polar day or night
            logging.warning(f"No sunrise/sunset at {coords.lat:.2f}, {coords.lng:.2f}: {e}")
            return SolarTimes(None, None)
        # suntime reports both on the same UTC date, which need not be the local one
        return around(sunrise, sunset, now)


def is_day(times: SolarTimes, now: datetime, offset: timedelta = timedelta(minutes=10)) -> bool:
    """Day starts `offset` before sunrise and ends `offset` before sunset."""
    if times.sunrise is None or times.sunset is None:
        return False
    before_sunrise = times.sunrise - offset
    before_sunset = times.sunset - offset
    return before_sunrise < now < before_sunset
