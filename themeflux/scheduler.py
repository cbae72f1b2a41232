"""Day/night scheduler: poll the location, work out day or night, switch themes on change.

State is None (unknown), True (day) or False (night). It only changes when a
successful poll computes something different, so polling the same answer
over and over never re-applies a theme pair. force_refresh() forgets the
state, which makes the next successful poll apply a pair no matter what.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from themeflux import flags as flag_names
from themeflux.location import LocationError
from themeflux.notify import (
    API_DESCRIPTION,
    ERROR,
    ERROR_DESCRIPTION,
    INFO,
    SUCCESS,
    Notification,
    settings_button,
)
from themeflux.solar import is_day
from themeflux.themes import ThemePair

SUCCESS_DISMISS_SECONDS = 10


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PollHandle:
    """Returned by start(); pass it to stop()."""

    def __init__(self, interval: float):
        self.interval = interval  # Seconds between polls
        self.stopped = threading.Event()
        self.thread: Optional[threading.Thread] = None


class DayNightScheduler:
    def __init__(
        self,
        settings,
        location,
        solar,
        applier,
        notifier,
        flags,
        offset: Optional[timedelta] = None,
        apply_delay: float = 0.1,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.settings = settings
        self.location = location
        self.solar = solar
        self.applier = applier
        self.notifier = notifier
        self.flags = flags
        self.offset = offset if offset is not None else timedelta(minutes=settings.offset_minutes)
        self.apply_delay = apply_delay
        self.clock = clock
        self.was_day: Optional[bool] = None
        self.override: Optional[bool] = None  # Manual day (True) / night (False), None = automatic
        self._handle: Optional[PollHandle] = None
        self._poll_lock = threading.Lock()

    # ---------------- Lifecycle -------------------------
    def start(self, interval_minutes: Optional[float] = None) -> PollHandle:
        """Poll every interval on a daemon thread. The first poll comes after one interval."""
        minutes = interval_minutes if interval_minutes is not None else self.settings.interval_minutes
        handle = PollHandle(minutes * 60)
        handle.thread = threading.Thread(target=self._loop, args=(handle,), name="themeflux-poll", daemon=True)
        self._handle = handle
        handle.thread.start()
        logging.info(f"Polling every {minutes:g} minutes")
        return handle

    def stop(self, handle: PollHandle) -> None:
        """Stop future polls. A poll already running finishes, but its result is dropped."""
        handle.stopped.set()
        if self._handle is handle:
            self._handle = None

    def _loop(self, handle: PollHandle) -> None:
        while not handle.stopped.wait(timeout=handle.interval):
            try:
                self._poll_locked(handle)
            except Exception:
                logging.exception("Poll failed")

    # ---------------- Polling ---------------------------
    def force_refresh(self) -> None:
        self._poll_locked(self._handle, reset=True)

    def poll(self) -> None:
        self._poll_locked(self._handle)

    def _poll_locked(self, handle: Optional[PollHandle], reset: bool = False) -> None:
        with self._poll_lock:
            if reset:
                self.was_day = None
            self._poll(handle)

    def _poll(self, handle: Optional[PollHandle]) -> None:
        if self.override is not None:
            logging.debug("Manual override active; skipping poll")
            return

        api_key = self.settings.api_key
        if getattr(self.location, "requires_key", True) and not api_key:
            if not self.flags.get(flag_names.WELCOME):
                self.flags.set(flag_names.WELCOME)
                self.notifier.notify(Notification(
                    kind=INFO,
                    title="API key required",
                    description=API_DESCRIPTION,
                    buttons=[settings_button("Set API Key", self.settings.path)],
                ))
            else:
                logging.debug("No API key configured; skipping poll")
            return

        try:
            coords = self.location.locate(api_key)
        except LocationError as e:
            if handle is not None and handle.stopped.is_set():
                return
            logging.warning(f"Could not retrieve geolocation: {e}")
            self.flags.remove(flag_names.FIRST)
            self.notifier.notify(Notification(
                kind=ERROR,
                title="Could not retrieve geolocation",
                description=ERROR_DESCRIPTION,
                buttons=[settings_button("Check API Key", self.settings.path)],
            ))
            return

        if handle is not None and handle.stopped.is_set():
            logging.debug("Scheduler stopped while locating; dropping result")
            return

        now = self.clock()
        times = self.solar.times(coords, now)
        day = is_day(times, now, self.offset)
        logging.debug(f"sunrise={times.sunrise} sunset={times.sunset} now={now} day={day}")
        pair = self.settings.theme_pair("day" if day else "night")
        if day != self.was_day:
            self.schedule_theme_update(pair, handle)
            self.was_day = day

        if not self.flags.get(flag_names.FIRST):
            self.flags.set(flag_names.FIRST)
            self.notifier.notify(Notification(
                kind=SUCCESS,
                title="Retrieved geolocation",
                description=f"Location {coords.lat:.2f}, {coords.lng:.2f}; {pair.name} themes: {pair.title}.",
                dismiss_after=SUCCESS_DISMISS_SECONDS,
            ))

    def schedule_theme_update(self, pair: ThemePair, handle: Optional[PollHandle] = None) -> None:
        """Apply pair after apply_delay seconds, to let pending settings writes settle.

        Nothing is applied if handle gets stopped before the delay runs out.
        """
        logging.info(f"Switching to {pair.name} themes ({pair.title})")
        if self.apply_delay <= 0:
            self.applier.apply(pair)
            return
        timer = threading.Timer(self.apply_delay, self._apply, args=(pair, handle))
        timer.daemon = True
        timer.start()

    def _apply(self, pair: ThemePair, handle: Optional[PollHandle]) -> None:
        if handle is not None and handle.stopped.is_set():
            logging.debug(f"Scheduler stopped; not applying {pair.name} themes")
            return
        self.applier.apply(pair)

    # ---------------- Manual override -------------------
    def set_override(self, day: Optional[bool]) -> None:
        """Pin the day (True) or night (False) pair; None goes back to automatic switching."""
        self.override = day
        if day is None:
            logging.info("Automatic switching resumed")
            self.force_refresh()
            return
        with self._poll_lock:
            self.was_day = day
            self.schedule_theme_update(self.settings.theme_pair("day" if day else "night"))
