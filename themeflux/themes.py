import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

PERSONALIZE_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Themes\Personalize"


@dataclass(frozen=True)
class ThemePair:
    """An interface theme and a syntax theme that are applied together."""

    name: str  # "day" or "night"
    ui: str  # Interface theme id ("one-light-ui")
    syntax: str  # Syntax theme id ("one-light-syntax")

    def as_list(self) -> List[str]:
        return [self.ui, self.syntax]

    @property
    def title(self) -> str:
        ui, syntax = theme_title(self.ui), theme_title(self.syntax)
        return ui if ui == syntax else f"{ui} / {syntax}"


def theme_title(name: str = "") -> str:
    """Human readable title for a theme id: "one-dark-ui" -> "One Dark"."""
    title = re.sub(r"-(ui|syntax)", "", name or "")
    title = re.sub(r"-theme$", "", title)
    title = re.sub(r"([A-Z])|_+", lambda m: " " + (m.group(1) or ""), title).strip()
    return " ".join(part[:1].upper() + part[1:] for part in title.split("-"))


class EditorThemeApplier:
    """Sets ``core.themes`` in the editor's JSON config; the editor reloads it on change."""

    def __init__(self, path):
        self.path = Path(path).expanduser()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def current(self) -> Optional[List[str]]:
        try:
            return self._load().get("*", {}).get("core", {}).get("themes")
        except (OSError, ValueError) as e:
            logging.warning(f"Could not read editor config {self.path}: {e}")
            return None

    def apply(self, pair: ThemePair) -> None:
        try:
            data = self._load()
        except ValueError as e:
            logging.error(f"Editor config {self.path} is not valid JSON, not touching it: {e}")
            return
        except OSError as e:
            logging.error(f"Could not read editor config {self.path}: {e}")
            return
        if self.current() == pair.as_list():
            logging.debug(f"Editor already uses the {pair.name} themes; not rewriting {self.path}")
            return
        scope = data.setdefault("*", {})
        scope.setdefault("core", {})["themes"] = pair.as_list()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logging.error(f"Could not write editor config {self.path}: {e}")
            return
        logging.info(f"Applied {pair.name} themes: {pair.title}")


class SystemThemeApplier:
    """Follows the day/night pair with the Windows apps/system light theme."""

    def __init__(self, apps: bool = True, system: bool = True):
        self.apps = apps  # Change the app theme
        self.system = system  # Change the system theme

    def apply(self, pair: ThemePair) -> None:
        import winreg

        value = 1 if pair.name == "day" else 0  # 1 = light, 0 = dark
        try:
            key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, PERSONALIZE_KEY, 0, winreg.KEY_SET_VALUE)
            try:
                if self.apps:
                    winreg.SetValueEx(key, "AppsUseLightTheme", 0, winreg.REG_DWORD, value)
                if self.system:
                    winreg.SetValueEx(key, "SystemUsesLightTheme", 0, winreg.REG_DWORD, value)
            finally:
                winreg.CloseKey(key)
        except OSError as e:
            logging.error(f"Could not change the Windows theme: {e}")
            return
        self._broadcast()

    def _broadcast(self) -> None:
        import ctypes

        # WM_SETTINGCHANGE to every window so the change shows immediately
        ctypes.windll.user32.SendMessageTimeoutW(0xFFFF, 0x001A, 0, "ImmersiveColorSet", 0x0002, 5000, None)


class CompositeApplier:
    def __init__(self, appliers: Iterable):
        self.appliers = list(appliers)

    def apply(self, pair: ThemePair) -> None:
        for applier in self.appliers:
            applier.apply(pair)
