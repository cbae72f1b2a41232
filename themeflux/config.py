"""Settings for theme-flux-solar.

Values come from three places, later ones winning:

- the built-in DEFAULTS below
- the JSON settings file (~/.config/theme-flux-solar/settings.json)
- the THEMEFLUX_API_KEY environment variable (a .env file works too)

Observers registered with observe() run whenever reload() sees a change.
"""

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from themeflux import PACKAGE_NAME
from themeflux.themes import ThemePair

# ----------- Defaults ---------
CONFIG_DIR = Path.home() / ".config" / PACKAGE_NAME
SETTINGS_FILE = CONFIG_DIR / "settings.json"
API_KEY_ENV = "THEMEFLUX_API_KEY"

DEFAULTS: Dict[str, Any] = {
    "api_key": "",
    "day": {"ui": "one-light-ui", "syntax": "one-light-syntax"},
    "night": {"ui": "one-dark-ui", "syntax": "one-dark-syntax"},
    "interval_minutes": 10,  # Poll the location every ten minutes
    "offset_minutes": 10,  # Switch ten minutes ahead of sunrise / sunset
    "location_provider": "google",  # "google" (needs api_key) or "ip"
    "request_timeout": 10,
    "editor_config": "~/.atom/config.json",
    "system_theme": False,  # Also flip the Windows light/dark setting
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Settings:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else SETTINGS_FILE
        self._observers: List[Callable[[], None]] = []
        self._lock = threading.Lock()
        self._mtime: Optional[float] = None
        self._values = self._read()

    def _read(self) -> Dict[str, Any]:
        values = copy.deepcopy(DEFAULTS)
        if self.path.exists():
            try:
                with open(self.path, "r") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    values = _merge(values, data)
                else:
                    logging.warning(f"Settings file {self.path} is not a JSON object; using defaults")
            except (OSError, ValueError) as e:
                logging.warning(f"Could not load settings from {self.path}: {e}")
            self._mtime = self._stat()
        env_key = os.getenv(API_KEY_ENV)
        if env_key:
            values["api_key"] = env_key
        return values

    def _stat(self) -> Optional[float]:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a value; dotted keys ("day.ui") reach into nested objects."""
        value: Any = self._values
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    @property
    def api_key(self) -> str:
        return str(self.get("api_key") or "").strip()

    @property
    def interval_minutes(self) -> float:
        return float(self.get("interval_minutes", DEFAULTS["interval_minutes"]))

    @property
    def offset_minutes(self) -> float:
        return float(self.get("offset_minutes", DEFAULTS["offset_minutes"]))

    def theme_pair(self, name: str) -> ThemePair:
        if name not in ("day", "night"):
            raise ValueError(f"Unknown theme pair {name!r}")
        fallback = DEFAULTS[name]
        return ThemePair(
            name=name,
            ui=self.get(f"{name}.ui") or fallback["ui"],
            syntax=self.get(f"{name}.syntax") or fallback["syntax"],
        )

    def save(self, **changes: Any) -> None:
        """Write changes into the settings file and notify observers."""
        stored: Dict[str, Any] = {}
        if self.path.exists():
            try:
                with open(self.path, "r") as f:
                    stored = json.load(f)
            except (OSError, ValueError) as e:
                logging.warning(f"Overwriting unreadable settings file {self.path}: {e}")
                stored = {}
        stored = _merge(stored, changes)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(stored, f, indent=2)
        self.reload()

    def observe(self, callback: Callable[[], None]) -> None:
        """Register callback and call it once right away."""
        with self._lock:
            self._observers.append(callback)
        callback()

    def reload(self) -> bool:
        """Re-read the settings; returns True (and notifies) when anything changed."""
        values = self._read()
        with self._lock:
            if values == self._values:
                return False
            self._values = values
            observers = list(self._observers)
        logging.info(f"Settings changed ({self.path})")
        for callback in observers:
            callback()
        return True

    def watch(self, stop: threading.Event, interval: float = 2.0) -> None:
        """Reload whenever the settings file's mtime moves, until stop is set."""
        while not stop.wait(timeout=interval):
            mtime = self._stat()
            if mtime != self._mtime:
                self._mtime = mtime
                try:
                    self.reload()
                except Exception:
                    logging.exception("Settings observer failed")
