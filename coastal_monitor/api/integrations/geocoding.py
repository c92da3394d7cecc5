import logging

from fastapi.concurrency import run_in_threadpool
from geopy.exc import GeopyError
from geopy.geocoders import OpenCage

from coastal_monitor.api.config import PLACEHOLDER_API_KEY

logger = logging.getLogger(__name__)


def fallback_location_name(lat, lon):
    return f"Location: {lat:.4f}, {lon:.4f}"


class ReverseGeocoder:
    def __init__(self, api_key=None, timeout=10, geocoder=None):
        self.api_key = api_key
        self.geocoder = geocoder
        if self.geocoder is None and api_key and api_key != PLACEHOLDER_API_KEY:
            self.geocoder = OpenCage(api_key=api_key, timeout=timeout)

        if self.geocoder is None:
            logger.info("Reverse geocoding disabled - locations get coordinate labels")

    def _lookup(self, lat, lon):
        location = self.geocoder.reverse((lat, lon), exactly_one=True)
        return location.address if location else None

    async def location_name(self, lat, lon) -> str:
        """Formatted address for a point; any failure yields the coordinate label."""
        if self.geocoder is None:
            return fallback_location_name(lat, lon)

        try:
            address = await run_in_threadpool(self._lookup, lat, lon)
        except (GeopyError, ValueError) as e:
            logger.warning(f"Reverse geocoding failed for ({lat}, {lon}): {e}")
            address = None

        return address or fallback_location_name(lat, lon)
