"""Constants shared by the API clients and controllers."""

DEFAULT_BACKEND_URL = "http://localhost:3000"

NEARBY_ENDPOINT = "/map/nearby"
ALONG_ROUTE_ENDPOINT = "/map/along-route"
SLOTS_ENDPOINT = "/map/availability/slots/{location_id}"

USER_DETAILS_ENDPOINT = "/user/details"
USER_BOOKINGS_ENDPOINT = "/user/bookings"
RATINGS_ENDPOINT = "/owner/ratings"

HOST_REGISTER_ENDPOINT = "/landOwner"
HOST_PROFILE_ENDPOINT = "/landOwner/me"
HOST_BOOKINGS_ENDPOINT = "/landOwner/bookings"
HOST_BOOKING_ENDPOINT = "/landOwner/bookings/{booking_id}"
HOST_PARKING_SPOTS_ENDPOINT = "/landOwner/parkingSpots"
HOST_CAR_PARKINGS_ENDPOINT = "/landOwner/carParking"
HOST_BIKE_PARKINGS_ENDPOINT = "/landOwner/bikeParking"
HOST_CAR_PARKING_ENDPOINT = "/landOwner/carParking/{spot_id}"
HOST_BIKE_PARKING_ENDPOINT = "/landOwner/bikeParking/{spot_id}"
HOST_PRICING_ENDPOINT = "/landOwner/pricing"
HOST_AUTO_ACCEPT_ENDPOINT = "/landOwner/autoAccept"

GOOGLE_MAPS_BASE_URL = "https://maps.googleapis.com"
GEOCODE_ENDPOINT = "/maps/api/geocode/json"
DIRECTIONS_ENDPOINT = "/maps/api/directions/json"

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "pyparkit",
}

DEBOUNCE_DELAY = 0.5
DEFAULT_RADIUS_KM = 10
MIN_RADIUS_KM = 5
RESULT_LIMIT = 50
ROUTE_BUFFER_KM = 2
MARKER_STAGGER_DELAY = 0.05

HOURS_PER_DAY = 24
DEFAULT_VEHICLE_TYPE = "CAR"

GENERIC_BOOKING_ERROR = "Failed to create booking"
MISSING_VEHICLE_MESSAGE = "Please select a vehicle"
MISSING_SLOTS_MESSAGE = "Please select at least one time slot"
AUTH_REQUIRED_MESSAGE = "Authentication required. Please sign in again."
MISSING_SPOTS_MESSAGE = "Please add at least one parking spot (car or bike)"
