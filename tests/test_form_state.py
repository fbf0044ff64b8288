from dataclasses import replace
from datetime import datetime

import pytest

from incident_reporter.form_state import FormState, FormStateStore, IncidentReport, format_datetime

SETTER_CASES = [
    ("set_datetime", "datetime", "2026-01-02 08:15"),
    ("set_image", "image_path", "/sdcard/DCIM/crash.jpg"),
    ("set_latitude", "latitude", "3.0201"),
    ("set_longitude", "longitude", "30.9111"),
    ("set_altitude", "altitude", "1211"),
    ("set_accuracy", "accuracy", "4"),
    ("set_city", "city", "Gulu City"),
    ("set_division", "division", "Ayivu Division"),
    ("set_ward", "ward", "Oli"),
    ("set_cell", "cell", "Cell A"),
    ("set_street", "street", "Others"),
    ("set_other_street", "other_street", "Canal Rd"),
    ("set_incident_type", "incident_type", "Other"),
    ("set_other_incident_type", "other_incident_type", "Fallen tree"),
    ("set_incident_details", "incident_details", "Tree across both lanes"),
]


@pytest.mark.parametrize("setter,attr,value", SETTER_CASES)
def test_setter_changes_only_its_field(filled_store, setter, attr, value):
    before = filled_store.state
    getattr(filled_store, setter)(value)
    assert filled_store.state == replace(before, **{attr: value})


def test_initial_state_uses_clock_for_datetime(clock):
    store = FormStateStore(clock=clock)
    assert store.state.datetime == "2026-03-14 09:30"
    assert store.state.image_path is None
    assert store.state.open_dropdown is None


def test_toggle_dropdown_closes_the_open_one(store):
    store.toggle_dropdown("street")
    assert store.state.show_street_dropdown

    store.toggle_dropdown("city")
    assert store.state.show_city_dropdown
    assert not store.state.show_street_dropdown
    assert not store.state.show_division_dropdown
    assert not store.state.show_incident_type_dropdown


def test_toggle_dropdown_twice_closes_it(store):
    store.toggle_dropdown("division")
    store.toggle_dropdown("division")
    assert store.state.open_dropdown is None


def test_toggle_unknown_dropdown_raises(store):
    with pytest.raises(ValueError):
        store.toggle_dropdown("ward")


def test_hide_all_dropdowns(store):
    store.toggle_dropdown("incident_type")
    store.hide_all_dropdowns()
    assert store.state.open_dropdown is None


def test_reset_restores_defaults_with_fresh_datetime(filled_store):
    assert filled_store.state.datetime == "2026-03-14 09:30"
    filled_store.toggle_dropdown("city")
    filled_store.set_result(error_message="boom")

    filled_store.reset()

    state = filled_store.state
    assert state == FormState(datetime="2026-03-14 09:31")


def test_format_datetime():
    assert format_datetime(datetime(2026, 10, 1, 7, 5, 59)) == "2026-10-01 07:05"


def test_set_location_clears_loading(store):
    store.set_location_loading(True)
    store.set_location("0.2959", "32.6122", "1200", "5")
    state = store.state
    assert (state.latitude, state.longitude, state.altitude, state.accuracy) == ("0.2959", "32.6122", "1200", "5")
    assert not state.is_location_loading


def test_observers_see_every_update_in_order(store):
    seen = []
    unsubscribe = store.subscribe(lambda state: seen.append(state.city))

    store.set_city("Arua City")
    store.set_city("Gulu City")
    unsubscribe()
    store.set_city("Kampala City")

    assert seen == ["Arua City", "Gulu City"]


def test_begin_submission_guards_reentry(filled_store):
    report = filled_store.begin_submission()
    assert isinstance(report, IncidentReport)
    assert report.city == "Arua City"
    assert filled_store.state.is_submitting
    assert filled_store.begin_submission() is None


def test_finish_submission_discards_result_from_before_reset(filled_store):
    generation, _ = filled_store.begin_submission_attempt()
    filled_store.reset()

    assert filled_store.finish_submission(generation, error_message="API Error: 500 - boom") is False
    assert filled_store.state.error_message is None
    assert not filled_store.state.is_submitting

    generation, _ = filled_store.begin_submission_attempt()
    assert filled_store.finish_submission(generation, success=True) is True
    assert filled_store.state.is_success


def test_set_submitting_clears_previous_error(store):
    store.set_result(error_message="API Error: 500 - server error")
    store.set_submitting(True)
    assert store.state.error_message is None
    assert store.state.is_submitting


def test_set_result_success_and_failure_are_exclusive(store):
    store.set_submitting(True)
    store.set_result(success=True)
    assert store.state.is_success and store.state.error_message is None
    assert not store.state.is_submitting

    store.set_submitting(True)
    store.set_result(error_message="timeout")
    assert not store.state.is_success
    assert store.state.error_message == "timeout"
    assert not store.state.is_submitting


def test_dismiss_error_keeps_fields(filled_store):
    filled_store.set_result(error_message="API Error: 400 - bad")
    before = filled_store.state
    filled_store.dismiss_error()
    assert filled_store.state == replace(before, error_message=None)


def test_acknowledge_success_resets(filled_store):
    filled_store.set_result(success=True)
    filled_store.acknowledge_success()
    assert not filled_store.state.is_success
    assert filled_store.state.city == ""


def test_snapshot_is_detached_from_later_updates(filled_store):
    report = filled_store.snapshot()
    filled_store.set_city("Gulu City")
    assert report.city == "Arua City"
