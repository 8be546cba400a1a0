"""Manual live check against a running Parkit backend.

Run from the repository root with:
  PYTHONPATH=src PARKIT_BACKEND_URL=http://localhost:3000 \
  python scripts/live_check.py --lat 52.37 --lng 4.89

Check slot availability for one location:
  PYTHONPATH=src python scripts/live_check.py --location-id 42 --date 2030-01-15

List the signed-in user's vehicles and bookings (requires a session token):
  PYTHONPATH=src PARKIT_ACCESS_TOKEN=... python scripts/live_check.py --user

Route search needs PARKIT_GOOGLE_MAPS_API_KEY and two Google place ids:
  PYTHONPATH=src python scripts/live_check.py --route ORIGIN_PLACE_ID DESTINATION_PLACE_ID

When --sanitize-output is enabled, license plates are masked.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import traceback
from datetime import date

from pyparkit import Client, Settings
from pyparkit.exceptions import ParkitError
from pyparkit.models import PlaceSummary, TimeSlot
from pyparkit.pricing import format_12_hour

_LOGGER = logging.getLogger(__name__)


def _mask_license_plate(plate: str) -> str:
    return "".join("*" if ch.isalnum() else ch for ch in plate)


def _format_place(place: PlaceSummary) -> str:
    price = f"{place.price_per_hour:.2f}/h" if place.price_per_hour is not None else "-"
    distance = place.distance_label or "-"
    return (
        f"{place.id} | {place.name} | {place.category} | {price} | "
        f"spots={place.available_spots} | {distance}"
    )


def _format_slot(slot: TimeSlot) -> str:
    state = "past" if slot.is_past else f"{slot.available_spots}/{slot.total_spots}"
    return (
        f"{format_12_hour(slot.hour):>5} | {state} | basic={slot.basic_available} "
        f"covered={slot.covered_available} charging={slot.charging_available} "
        f"both={slot.covered_and_charging_available}"
    )


def _print_exception(label: str, exc: Exception, *, trace: bool) -> None:
    print(f"{label}: {exc.__class__.__name__}: {exc}", file=sys.stderr)
    if isinstance(exc, ParkitError) and exc.user_message:
        print(f"User message: {exc.user_message}", file=sys.stderr)
    if trace:
        traceback.print_exc()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a Parkit backend live check.")
    parser.add_argument("--lat", type=float, help="Latitude for a nearby search.")
    parser.add_argument("--lng", type=float, help="Longitude for a nearby search.")
    parser.add_argument(
        "--radius-km",
        dest="radius_km",
        type=float,
        default=10,
        help="Nearby search radius in kilometers.",
    )
    parser.add_argument(
        "--route",
        nargs=2,
        metavar=("ORIGIN", "DESTINATION"),
        help="Google place ids for an along-route search.",
    )
    parser.add_argument("--location-id", dest="location_id", help="Location for slot lookup.")
    parser.add_argument("--date", dest="day", help="Slot date (YYYY-MM-DD), default today.")
    parser.add_argument(
        "--vehicle-type",
        dest="vehicle_type",
        default="CAR",
        help="Vehicle type used for slot lookup.",
    )
    parser.add_argument(
        "--user",
        action="store_true",
        help="List vehicles and bookings for the signed-in user.",
    )
    parser.add_argument(
        "--access-token",
        dest="access_token",
        help="Session token; defaults to PARKIT_ACCESS_TOKEN.",
    )
    parser.add_argument(
        "--sanitize-output",
        dest="sanitize_output",
        action="store_true",
        help="Mask license plates in output.",
    )
    parser.add_argument(
        "--traceback",
        action="store_true",
        help="Print full tracebacks on errors.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING).",
    )
    return parser.parse_args()


async def _run_nearby(client: Client, lat: float, lng: float, radius_km: float) -> None:
    places = await client.map.nearby(lat, lng, radius_km=radius_km)
    print(f"Nearby: {len(places)}")
    for place in places:
        print(f"- {_format_place(place)}")


async def _run_route(client: Client, origin_id: str, destination_id: str) -> None:
    viewport = client.viewport()
    try:
        places = await viewport.on_route_requested(origin_id, destination_id)
    finally:
        await viewport.close()
    if places is None:
        print("Route: no results (see log output)")
        return
    print(f"Along route: {len(places)}")
    for place in places:
        print(f"- {_format_place(place)}")


async def _run_slots(client: Client, location_id: str, day: date, vehicle_type: str) -> None:
    availability = await client.map.slots(location_id, day, vehicle_type)
    pricing = availability.pricing
    print(
        f"Pricing: hourly={pricing.hourly_rate} covered=+{pricing.covered_hourly_rate} "
        f"charging=+{pricing.charging_hourly_rate}"
    )
    print(f"Slots for {day.isoformat()}: {len(availability.slots)}")
    for slot in availability.slots:
        print(f"- {_format_slot(slot)}")


async def _run_user(client: Client, *, sanitize: bool) -> None:
    details = await client.user.get_details()
    print(f"User: {details.id} | {details.name or '-'}")
    print(f"Vehicles: {len(details.vehicles)}")
    for vehicle in details.vehicles:
        plate = _mask_license_plate(vehicle.license_plate) if sanitize else vehicle.license_plate
        print(f"- {vehicle.id} | {vehicle.make} {vehicle.model} | {plate} | {vehicle.type}")
    bookings = await client.user.list_bookings()
    print(f"Bookings: {len(bookings)}")
    for booking in bookings:
        print(
            f"- {booking.id} | {booking.status} | {booking.start_time.isoformat()} -> "
            f"{booking.end_time.isoformat()} | {booking.total_price:.2f}"
        )


async def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=args.log_level.upper())
    try:
        settings = Settings.from_env()
        day = date.fromisoformat(args.day) if args.day else date.today()
    except (ParkitError, ValueError) as exc:
        _print_exception("Configuration error", exc, trace=args.traceback)
        return 2
    access_token = args.access_token or os.getenv("PARKIT_ACCESS_TOKEN")
    if (args.lat is None) != (args.lng is None):
        print("Both --lat and --lng are required for a nearby search.", file=sys.stderr)
        return 2
    _LOGGER.info("Using backend %s", settings.backend_url)

    try:
        async with Client(settings=settings, access_token=access_token) as client:
            if args.lat is not None:
                await _run_nearby(client, args.lat, args.lng, args.radius_km)
            if args.route:
                await _run_route(client, *args.route)
            if args.location_id:
                await _run_slots(client, args.location_id, day, args.vehicle_type)
            if args.user:
                await _run_user(client, sanitize=args.sanitize_output)
    except Exception as exc:
        _print_exception("Error", exc, trace=args.traceback)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
