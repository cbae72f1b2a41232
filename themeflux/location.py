"""Where are we? Coordinates from the Google Geolocation API or from the IP address."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import geocoder
import requests

API_URL = "https://www.googleapis.com/geolocation/v1/geolocate"


class LocationError(Exception):
    """Geolocation lookup failed (network, API or malformed response)."""


@dataclass(frozen=True)
class Coordinates:
    lat: float  # Latitude (decimal degrees)
    lng: float  # Longitude (decimal degrees)


def _degrees(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LocationError(f"Geolocation response has no numeric {name}: {value!r}")
    return float(value)


def parse_location(payload: Any) -> Coordinates:
    """Pull ``location.lat`` / ``location.lng`` out of a geolocate response body."""
    location = payload.get("location") if isinstance(payload, dict) else None
    if not isinstance(location, dict):
        raise LocationError("Geolocation response has no 'location' object")
    return Coordinates(
        lat=_degrees(location.get("lat"), "lat"),
        lng=_degrees(location.get("lng"), "lng"),
    )


class GoogleGeolocation:
    requires_key = True

    def __init__(self, url: str = API_URL, timeout: float = 10):
        self.url = url
        self.timeout = timeout

    def locate(self, api_key: Optional[str] = None) -> Coordinates:
        if not api_key:
            raise LocationError("No Google Geolocation API key configured")
        try:
            resp = requests.post(self.url, params={"key": api_key}, json={}, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            raise LocationError(f"Geolocation request failed: {e}") from e
        except ValueError as e:
            raise LocationError(f"Geolocation response is not JSON: {e}") from e
        coords = parse_location(payload)
        logging.debug(f"Geolocation: {coords.lat:.4f}, {coords.lng:.4f}")
        return coords


class IpGeolocation:
    """Look the location up from the public IP address; no key needed."""

    requires_key = False

    def locate(self, api_key: Optional[str] = None) -> Coordinates:
        g = geocoder.ip("me")  # Uses the current IP address to determine the location
        if not g.ok or not g.latlng:
            raise LocationError(f"IP geolocation failed: {g.status}")
        lat, lng = g.latlng
        return Coordinates(lat=float(lat), lng=float(lng))


def make_provider(name: str, timeout: float = 10):
    if name == "google":
        return GoogleGeolocation(timeout=timeout)
    if name == "ip":
        return IpGeolocation()
    raise ValueError(f"Unknown location provider {name!r} (expected 'google' or 'ip')")
