import os
import logging
from dataclasses import dataclass
from functools import lru_cache

import pytz
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

PLACEHOLDER_API_KEY = "YOUR_API_KEY"


@dataclass(frozen=True)
class Settings:
    backend_url: str
    app_id: str
    timezone_name: str
    blob_backend: str
    media_dir: str
    opencage_api_key: str
    cors_origins: tuple
    request_timeout: float

    @property
    def timezone(self):
        return pytz.timezone(self.timezone_name)

    @staticmethod
    def load_from_env() -> "Settings":
        timezone_name = os.getenv('HAZARD_TIMEZONE', 'Asia/Kolkata')
        try:
            pytz.timezone(timezone_name)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone '{timezone_name}', using Asia/Kolkata")
            timezone_name = 'Asia/Kolkata'

        blob_backend = os.getenv('HAZARD_BLOB_BACKEND', 'remote').strip().lower()
        if blob_backend not in ('remote', 'local'):
            logger.warning(f"Unknown blob backend '{blob_backend}', using remote")
            blob_backend = 'remote'

        origins = os.getenv('HAZARD_CORS_ORIGINS', '*')

        settings = Settings(
            backend_url=os.getenv('HAZARD_BACKEND_URL', 'https://app.base44.com').rstrip('/'),
            app_id=os.getenv('HAZARD_APP_ID', ''),
            timezone_name=timezone_name,
            blob_backend=blob_backend,
            media_dir=os.getenv('HAZARD_MEDIA_DIR', os.path.join(os.getcwd(), "uploads", "hazard_media")),
            opencage_api_key=os.getenv('OPENCAGE_API_KEY', PLACEHOLDER_API_KEY),
            cors_origins=tuple(o.strip() for o in origins.split(',') if o.strip()),
            request_timeout=float(os.getenv('HAZARD_REQUEST_TIMEOUT', '30')),
        )

        logger.info(f"Managed backend: {settings.backend_url} (app id: {'set' if settings.app_id else 'Missing'})")
        logger.info(f"OpenCage API key: {'Available' if settings.opencage_api_key != PLACEHOLDER_API_KEY else 'Missing'}")
        return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.load_from_env()
