import logging
import webbrowser
from pathlib import Path

import pystray
from PIL import Image, ImageDraw

from themeflux import PACKAGE_NAME


# ------------------- System Tray --------------------------------
def create_icon(size: int = 64) -> Image.Image:
    """Half sun, half moon."""
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    box = (4, 4, size - 4, size - 4)
    draw.pieslice(box, 90, 270, fill=(40, 44, 52, 255))  # Night half
    draw.pieslice(box, 270, 90, fill=(255, 196, 0, 255))  # Day half
    return image


def build_menu(scheduler, on_exit):
    def refresh(icon, item):
        scheduler.force_refresh()

    def force_day(icon, item):
        scheduler.set_override(True)
        icon.update_menu()

    def force_night(icon, item):
        scheduler.set_override(False)
        icon.update_menu()

    def resume(icon, item):
        scheduler.set_override(None)
        icon.update_menu()

    def open_settings(icon, item):
        webbrowser.open(Path(scheduler.settings.path).expanduser().resolve().as_uri())

    def exit_app(icon, item):
        on_exit()
        icon.stop()

    return pystray.Menu(
        pystray.MenuItem(PACKAGE_NAME, None, enabled=False),
        pystray.Menu.SEPARATOR,
        pystray.MenuItem("Refresh now", refresh),
        pystray.MenuItem("Force day theme", force_day, checked=lambda item: scheduler.override is True),
        pystray.MenuItem("Force night theme", force_night, checked=lambda item: scheduler.override is False),
        pystray.MenuItem("Resume automatic switch", resume, checked=lambda item: scheduler.override is None),
        pystray.Menu.SEPARATOR,
        pystray.MenuItem("Open settings", open_settings),
        pystray.MenuItem("Exit", exit_app),
    )


def run_tray(scheduler, on_exit) -> None:
    """Blocks until Exit is chosen from the menu."""
    day, night = scheduler.settings.theme_pair("day"), scheduler.settings.theme_pair("night")
    title = f"{PACKAGE_NAME} (day: {day.title}, night: {night.title})"
    icon = pystray.Icon(PACKAGE_NAME, create_icon(), title, build_menu(scheduler, on_exit))
    logging.info("Tray icon running")
    icon.run()
