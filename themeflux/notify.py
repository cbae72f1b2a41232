"""User-facing notifications: Windows toasts through winotify, log lines elsewhere."""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from themeflux import PACKAGE_NAME

APP_ID = "Theme Flux Solar"

API_DESCRIPTION = f"""\
`{PACKAGE_NAME}` needs a Google Maps Geolocation API key to retrieve your location.
The location is necessary to calculate the exact time of sunset and sunrise.

Get a key at:
https://developers.google.com/maps/documentation/geolocation/get-api-key"""

ERROR_DESCRIPTION = f"`{PACKAGE_NAME}` could not retrieve geo location. Maybe the API key is invalid?"

INFO = "info"
SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Button:
    text: str
    target: str  # URI opened when clicked


@dataclass(frozen=True)
class Notification:
    kind: str
    title: str
    description: str = ""
    buttons: List[Button] = field(default_factory=list)
    dismiss_after: Optional[float] = None  # Seconds; None stays until dismissed


def settings_button(text: str, settings_path: Path) -> Button:
    return Button(text=text, target=Path(settings_path).expanduser().resolve().as_uri())


class LogNotifier:
    def notify(self, note: Notification) -> None:
        level = logging.ERROR if note.kind == ERROR else logging.INFO
        logging.log(level, f"{note.title}: {note.description}" if note.description else note.title)
        for button in note.buttons:
            logging.log(level, f"  [{button.text}] {button.target}")


class ToastNotifier:
    """Windows toast notifications; the buttons launch their target URI.

    winotify only knows "short" (about 7 s) and "long" (about 25 s) toasts, so any
    dismiss_after maps to "short" rather than the exact number of seconds.
    """

    def __init__(self, icon: Optional[Path] = None):
        self.icon = str(icon) if icon else ""

    def notify(self, note: Notification) -> None:
        from winotify import Notification as Toast

        toast = Toast(
            app_id=APP_ID,
            title=note.title,
            msg=note.description,
            icon=self.icon,
            duration="short" if note.dismiss_after else "long",
        )
        for button in note.buttons:
            toast.add_actions(label=button.text, launch=button.target)
        toast.show()


def default_notifier():
    if sys.platform == "win32":
        return ToastNotifier()
    return LogNotifier()
