"""Observable form state for the incident report screen.

The store holds one immutable ``FormState`` record. Every update swaps the
record for a modified copy and notifies subscribers synchronously, in the
order the updates were made.
"""

import logging
import threading
from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from incident_reporter import config
from incident_reporter.options import DROPDOWN_OPTIONS

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Observer = Callable[["FormState"], None]


def format_datetime(moment: datetime) -> str:
    """Format a timestamp the way the report form displays it."""
    return moment.strftime(config.DATETIME_FORMAT)


@dataclass(frozen=True)
class IncidentReport:
    """Snapshot of the fields that are sent to the incident API."""
    datetime: str = ""
    image_path: Optional[str] = None
    latitude: str = ""
    longitude: str = ""
    altitude: str = ""
    accuracy: str = ""
    city: str = ""
    division: str = ""
    ward: str = ""
    cell: str = ""
    street: str = ""
    other_street: str = ""
    incident_type: str = ""
    other_incident_type: str = ""
    incident_details: str = ""


REPORT_FIELDS = tuple(f.name for f in fields(IncidentReport))


@dataclass(frozen=True)
class FormState(IncidentReport):
    """Report fields plus the transient flags of the form session."""
    is_submitting: bool = False
    is_success: bool = False
    error_message: Optional[str] = None
    is_location_loading: bool = False
    # Name of the single open dropdown, if any
    open_dropdown: Optional[str] = None

    @property
    def show_city_dropdown(self) -> bool:
        return self.open_dropdown == "city"

    @property
    def show_division_dropdown(self) -> bool:
        return self.open_dropdown == "division"

    @property
    def show_street_dropdown(self) -> bool:
        return self.open_dropdown == "street"

    @property
    def show_incident_type_dropdown(self) -> bool:
        return self.open_dropdown == "incident_type"

    def to_report(self) -> IncidentReport:
        return IncidentReport(**{name: getattr(self, name) for name in REPORT_FIELDS})


class FormStateStore:
    """Holds the form state of one report screen and notifies observers of changes."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or datetime.now
        self._lock = threading.RLock()
        self._observers: List[Observer] = []
        # Bumped on every reset so results of older attempts can be told apart
        self._generation = 0
        self._state = self._fresh_state()

    def _fresh_state(self) -> FormState:
        return FormState(datetime=format_datetime(self._clock()))

    @property
    def state(self) -> FormState:
        return self._state

    def snapshot(self) -> IncidentReport:
        """Return an immutable copy of the submitted fields."""
        return self._state.to_report()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a callable that unregisters it."""
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def _update(self, **changes) -> FormState:
        # Holding the lock while notifying keeps notifications in production order
        with self._lock:
            self._state = replace(self._state, **changes)
            new_state = self._state
            for observer in list(self._observers):
                observer(new_state)
            return new_state

    # --- Field setters -------------------------------------------------------

    def set_datetime(self, value: str) -> None:
        self._update(datetime=value)

    def set_image(self, image_path: Optional[str]) -> None:
        self._update(image_path=None if image_path is None else str(image_path))

    def set_latitude(self, value: str) -> None:
        self._update(latitude=value)

    def set_longitude(self, value: str) -> None:
        self._update(longitude=value)

    def set_altitude(self, value: str) -> None:
        self._update(altitude=value)

    def set_accuracy(self, value: str) -> None:
        self._update(accuracy=value)

    def set_city(self, value: str) -> None:
        self._update(city=value)

    def set_division(self, value: str) -> None:
        self._update(division=value)

    def set_ward(self, value: str) -> None:
        self._update(ward=value)

    def set_cell(self, value: str) -> None:
        self._update(cell=value)

    def set_street(self, value: str) -> None:
        self._update(street=value)

    def set_other_street(self, value: str) -> None:
        self._update(other_street=value)

    def set_incident_type(self, value: str) -> None:
        self._update(incident_type=value)

    def set_other_incident_type(self, value: str) -> None:
        self._update(other_incident_type=value)

    def set_incident_details(self, value: str) -> None:
        self._update(incident_details=value)

    def set_location(self, latitude: str, longitude: str, altitude: str, accuracy: str) -> None:
        """Apply a location fix and clear the loading flag."""
        self._update(
            latitude=latitude,
            longitude=longitude,
            altitude=altitude,
            accuracy=accuracy,
            is_location_loading=False,
        )

    def set_location_loading(self, loading: bool) -> None:
        self._update(is_location_loading=loading)

    # --- Dropdowns -----------------------------------------------------------

    def toggle_dropdown(self, name: str) -> None:
        """Flip the named dropdown and close every other one."""
        if name not in DROPDOWN_OPTIONS:
            raise ValueError(f"Unknown dropdown: {name!r}")
        with self._lock:
            is_open = self._state.open_dropdown == name
            self._update(open_dropdown=None if is_open else name)

    def hide_all_dropdowns(self) -> None:
        self._update(open_dropdown=None)

    # --- Submission lifecycle ------------------------------------------------

    def set_submitting(self, submitting: bool) -> None:
        if submitting:
            self._update(is_submitting=True, is_success=False, error_message=None)
        else:
            self._update(is_submitting=False)

    def begin_submission(self) -> Optional[IncidentReport]:
        """Mark the form as submitting unless it already is.

        Returns the report snapshot to send, or None when a submission is
        already in flight.
        """
        attempt = self.begin_submission_attempt()
        return None if attempt is None else attempt[1]

    def begin_submission_attempt(self) -> Optional[Tuple[int, IncidentReport]]:
        """Like begin_submission, but also returns the form generation it started in."""
        with self._lock:
            if self._state.is_submitting:
                return None
            self.set_submitting(True)
            return self._generation, self._state.to_report()

    def finish_submission(self, generation: int, success: bool = False, error_message: Optional[str] = None) -> bool:
        """Record an outcome unless the form was reset after the attempt began.

        Returns False when the result was discarded as stale.
        """
        with self._lock:
            if generation != self._generation:
                logger.info("Discarding result of a submission started before the last reset")
                return False
            self.set_result(success=success, error_message=error_message)
            return True

    def set_result(self, success: bool = False, error_message: Optional[str] = None) -> None:
        """Record the outcome of a submission attempt."""
        if success:
            self._update(is_submitting=False, is_success=True, error_message=None)
        else:
            self._update(
                is_submitting=False,
                is_success=False,
                error_message=error_message or "An unknown error occurred",
            )

    def show_error(self, message: str) -> None:
        """Surface an error that is not tied to a submission attempt."""
        self._update(error_message=message)

    def dismiss_error(self) -> None:
        """Clear the error flag only, keeping every entered field."""
        self._update(error_message=None)

    def acknowledge_success(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Restore defaults with a freshly generated datetime."""
        with self._lock:
            self._generation += 1
            self._state = self._fresh_state()
            new_state = self._state
            for observer in list(self._observers):
                observer(new_state)
        logger.debug("Form reset at %s", new_state.datetime)
