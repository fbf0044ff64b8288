"""
Command line entry point for the incident reporter.

Usage:
  incident-reporter submit --city "Arua City" --division "Central Division" \
      --street "Others" --other-street "Canal Rd" --incident-type "Wrong Parking" \
      --details "Truck blocking the lane" --image photo.jpg
  incident-reporter options
  incident-reporter countdown --ticks 10
  incident-reporter serve --port 8004

Environment variables:
  INCIDENT_API_BASE_URL (fallback if --base-url not provided)
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from incident_reporter import config
from incident_reporter.config import SubmissionConfig
from incident_reporter.countdown_service import CountdownService
from incident_reporter.form_state import FormStateStore
from incident_reporter.location import LocationDetector, PlaceholderLocationProvider
from incident_reporter.options import CITIES, DIVISIONS, INCIDENT_TYPES, STREETS
from incident_reporter.repository import IncidentRepository
from incident_reporter.submission import SubmissionPipeline

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


def fill_form(store: FormStateStore, args: argparse.Namespace) -> None:
    """Copy command line values into the form, leaving defaults for omitted ones."""
    setters = {
        "datetime": store.set_datetime,
        "latitude": store.set_latitude,
        "longitude": store.set_longitude,
        "altitude": store.set_altitude,
        "accuracy": store.set_accuracy,
        "city": store.set_city,
        "division": store.set_division,
        "ward": store.set_ward,
        "cell": store.set_cell,
        "street": store.set_street,
        "other_street": store.set_other_street,
        "incident_type": store.set_incident_type,
        "other_incident_type": store.set_other_incident_type,
        "details": store.set_incident_details,
    }
    for attr, setter in setters.items():
        value = getattr(args, attr, None)
        if value is not None:
            setter(value)
    if args.image:
        store.set_image(args.image)


def cmd_submit(args: argparse.Namespace) -> int:
    if args.image and not Path(args.image).is_file():
        print(f"[submit] Image not found: {args.image}")
        return EXIT_BAD_INPUT

    store = FormStateStore()
    fill_form(store, args)

    if args.detect_location:
        LocationDetector(provider=PlaceholderLocationProvider(delay_sec=0)).start(store)

    repository = IncidentRepository(SubmissionConfig.from_env(base_url=args.base_url))
    pipeline = SubmissionPipeline(store, repository)
    try:
        result = pipeline.submit_blocking()
    finally:
        pipeline.shutdown()
        repository.close()

    if result.ok:
        print(f"[submit] ✓ {result.message}")
        return EXIT_OK
    print(f"[submit] ✗ {result.message}")
    return EXIT_FAILED


def cmd_options(args: argparse.Namespace) -> int:
    for title, values in (
        ("Cities", CITIES),
        ("Divisions", DIVISIONS),
        ("Streets", STREETS),
        ("Incident types", INCIDENT_TYPES),
    ):
        print(f"{title}:")
        for value in values:
            print(f"  - {value}")
    return EXIT_OK


def cmd_countdown(args: argparse.Namespace) -> int:
    service = CountdownService(ticks=args.ticks, interval_sec=args.interval)
    service.start()
    try:
        service.wait()
    except KeyboardInterrupt:
        service.stop()
    print(f"[countdown] Finished after {service.completed_ticks} tick(s)")
    return EXIT_OK


def cmd_serve(args: argparse.Namespace) -> int:
    from incident_reporter import intake_api

    intake_api.run(host=args.host, port=args.port)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="incident-reporter", description="Road incident reporting client")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    submit = sub.add_parser("submit", help="Submit an incident report")
    submit.add_argument("--base-url", default=None, help="Incident API base URL (e.g., http://localhost:8004)")
    submit.add_argument("--datetime", help="Incident date and time (default: now)")
    submit.add_argument("--image", help="Path to a photo of the incident")
    submit.add_argument("--latitude")
    submit.add_argument("--longitude")
    submit.add_argument("--altitude")
    submit.add_argument("--accuracy")
    submit.add_argument("--detect-location", action="store_true", help="Fill coordinates from the location provider")
    submit.add_argument("--city", choices=CITIES)
    submit.add_argument("--division", choices=DIVISIONS)
    submit.add_argument("--ward")
    submit.add_argument("--cell")
    submit.add_argument("--street", choices=STREETS)
    submit.add_argument("--other-street", help="Street name when --street is 'Others'")
    submit.add_argument("--incident-type", choices=INCIDENT_TYPES)
    submit.add_argument("--other-incident-type", help="Incident type when --incident-type is 'Other'")
    submit.add_argument("--details", help="Details of the problem or incident")
    submit.set_defaults(func=cmd_submit)

    options = sub.add_parser("options", help="List the form's option values")
    options.set_defaults(func=cmd_options)

    countdown = sub.add_parser("countdown", help="Run the background countdown service")
    countdown.add_argument("--ticks", type=int, default=10)
    countdown.add_argument("--interval", type=float, default=1.0, help="Seconds between ticks")
    countdown.set_defaults(func=cmd_countdown)

    serve = sub.add_parser("serve", help="Run the local incident intake API")
    serve.add_argument("--host", default=config.INTAKE_BIND_HOST)
    serve.add_argument("--port", type=int, default=config.INTAKE_BIND_PORT)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config.configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
