"""Location detection for the report form.

Only a placeholder provider exists: it answers with a fixed fix after a short
delay, the same behaviour the mobile form shipped with.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from incident_reporter.form_state import FormStateStore

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = "Location permission denied"


@dataclass(frozen=True)
class LocationFix:
    latitude: str
    longitude: str
    altitude: str
    accuracy: str


PermissionPrompt = Callable[[], bool]
FixCallback = Callable[[LocationFix], None]


class LocationProvider(ABC):
    """Interface for anything that can deliver a location fix asynchronously."""

    @abstractmethod
    def request_location(self, callback: FixCallback) -> None:
        pass


class PlaceholderLocationProvider(LocationProvider):
    """Delivers a fixed location after ``delay_sec`` on a timer thread (immediately if zero)."""

    PLACEHOLDER_FIX = LocationFix(latitude="0.2959", longitude="32.6122", altitude="1200", accuracy="5")

    def __init__(self, delay_sec: float = 1.0, fix: Optional[LocationFix] = None):
        self.delay_sec = delay_sec
        self.fix = fix or self.PLACEHOLDER_FIX

    def request_location(self, callback: FixCallback) -> None:
        if self.delay_sec <= 0:
            callback(self.fix)
            return
        timer = threading.Timer(self.delay_sec, callback, args=(self.fix,))
        timer.daemon = True
        timer.start()


def always_grant() -> bool:
    return True


class LocationDetector:
    """Asks for permission, then fills the form's coordinates from the provider."""

    def __init__(self, provider: Optional[LocationProvider] = None, permission_prompt: PermissionPrompt = always_grant):
        self.provider = provider or PlaceholderLocationProvider()
        self.permission_prompt = permission_prompt

    def start(self, store: FormStateStore) -> bool:
        """
        Start location detection for the given form.

        Returns:
            True if detection started, False if permission was denied
        """
        if not self.permission_prompt():
            logger.info("Location permission denied")
            store.show_error(PERMISSION_DENIED_MESSAGE)
            return False

        store.set_location_loading(True)

        def apply_fix(fix: LocationFix) -> None:
            logger.debug("Location fix received: %s", fix)
            store.set_location(fix.latitude, fix.longitude, fix.altitude, fix.accuracy)

        self.provider.request_location(apply_fix)
        return True
