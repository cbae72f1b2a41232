import argparse
import logging
import sys
import threading
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from themeflux import PACKAGE_NAME, __version__
from themeflux.config import SETTINGS_FILE, Settings
from themeflux.flags import FLAGS_FILE, FlagStore
from themeflux.location import make_provider
from themeflux.notify import default_notifier
from themeflux.scheduler import DayNightScheduler
from themeflux.solar import SunTimes
from themeflux.themes import CompositeApplier, EditorThemeApplier, SystemThemeApplier


def build_applier(settings: Settings):
    appliers = [EditorThemeApplier(settings.get("editor_config"))]
    if settings.get("system_theme"):
        if sys.platform == "win32":
            appliers.append(SystemThemeApplier())
        else:
            logging.warning("system_theme is only supported on Windows; ignoring")
    return appliers[0] if len(appliers) == 1 else CompositeApplier(appliers)


def configure(scheduler: DayNightScheduler, settings: Settings) -> None:
    """Point the scheduler's collaborators at the current settings."""
    timeout = float(settings.get("request_timeout", 10))
    try:
        scheduler.location = make_provider(settings.get("location_provider", "google"), timeout=timeout)
    except ValueError as e:
        logging.warning(f"{e}; using the google provider")
        scheduler.location = make_provider("google", timeout=timeout)
    scheduler.applier = build_applier(settings)
    scheduler.offset = timedelta(minutes=settings.offset_minutes)


def build_scheduler(settings: Settings, flags: FlagStore) -> DayNightScheduler:
    scheduler = DayNightScheduler(
        settings=settings,
        location=None,
        solar=SunTimes(),
        applier=None,
        notifier=default_notifier(),
        flags=flags,
    )
    configure(scheduler, settings)
    return scheduler


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog=PACKAGE_NAME,
        description="Switch the editor between day and night themes at sunrise and sunset.",
    )
    ap.add_argument("--settings", type=Path, default=SETTINGS_FILE, help=f"Settings JSON (default: {SETTINGS_FILE})")
    ap.add_argument("--flags", type=Path, default=FLAGS_FILE, help=f"Notification flags JSON (default: {FLAGS_FILE})")
    ap.add_argument("--interval", type=float, default=None, help="Minutes between polls (default: settings interval_minutes)")
    ap.add_argument("--once", action="store_true", help="Poll once, apply the matching themes and exit")
    ap.add_argument("--no-tray", action="store_true", help="Run without the system tray icon")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    settings = Settings(args.settings)
    scheduler = build_scheduler(settings, FlagStore(args.flags))

    if args.once:
        scheduler.apply_delay = 0
        scheduler.force_refresh()
        return 0

    stop = threading.Event()

    def on_settings_change():
        configure(scheduler, settings)
        scheduler.force_refresh()

    settings.observe(on_settings_change)  # Also runs the first poll right away
    threading.Thread(target=settings.watch, args=(stop,), name="themeflux-settings", daemon=True).start()
    handle = scheduler.start(args.interval)

    def shutdown():
        scheduler.stop(handle)
        stop.set()

    if args.no_tray:
        try:
            while not stop.wait(timeout=1):
                pass
        except KeyboardInterrupt:
            logging.info("Interrupted; stopping")
            shutdown()
        return 0

    from themeflux.tray import run_tray

    run_tray(scheduler, shutdown)
    return 0


if __name__ == "__main__":
    sys.exit(main())
