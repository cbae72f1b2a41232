"""One-shot notification flags kept on disk between runs."""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from themeflux import PACKAGE_NAME

FLAGS_FILE = Path.home() / ".config" / PACKAGE_NAME / "flags.json"

FIRST = "first"  # Success notice for the first geolocation fetch was shown
WELCOME = "welcome"  # "API key required" notice was shown


class FlagStore:
    """Boolean flags namespaced as ``theme-flux-solar.<name>`` in a JSON file."""

    def __init__(self, path: Optional[Path] = None, namespace: str = PACKAGE_NAME):
        self.path = Path(path) if path is not None else FLAGS_FILE
        self.namespace = namespace
        self._lock = threading.Lock()

    def _key(self, name: str) -> str:
        return f"{self.namespace}.{name}"

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logging.warning(f"Could not load flags from {self.path}: {e}")
            return {}

    def _save(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logging.error(f"Could not save flags to {self.path}: {e}")

    def get(self, name: str) -> bool:
        return bool(self._load().get(self._key(name)))

    def set(self, name: str) -> None:
        with self._lock:
            data = self._load()
            data[self._key(name)] = True
            self._save(data)

    def remove(self, name: str) -> None:
        with self._lock:
            data = self._load()
            if data.pop(self._key(name), None) is not None:
                self._save(data)
