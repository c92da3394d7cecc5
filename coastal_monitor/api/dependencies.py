from typing import Optional

from fastapi import Depends, HTTPException, Request

from coastal_monitor.api.config import Settings, get_settings
from coastal_monitor.api.integrations.blob_store import LocalBlobStore, RemoteBlobStore
from coastal_monitor.api.integrations.geocoding import ReverseGeocoder
from coastal_monitor.api.integrations.managed_backend import (
    CoreIntegrations, HazardReportEntity, ManagedBackendClient, UserEntity
)
from coastal_monitor.api.models.errors import BackendError
from coastal_monitor.api.models.schemas import User
from coastal_monitor.api.services.view_state import SocialAnalysisCache

TOKEN_COOKIE = "hazard_token"


def get_bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get('Authorization', '')
    if auth.lower().startswith('bearer '):
        return auth[7:].strip() or None
    return request.cookies.get(TOKEN_COOKIE)


def get_backend_client(request: Request, settings: Settings = Depends(get_settings)):
    return ManagedBackendClient(
        settings.backend_url,
        settings.app_id,
        token=get_bearer_token(request),
        timeout=settings.request_timeout
    )


def get_report_entity(client: ManagedBackendClient = Depends(get_backend_client)):
    return HazardReportEntity(client)


def get_user_entity(client: ManagedBackendClient = Depends(get_backend_client)):
    return UserEntity(client)


def get_core_integrations(client: ManagedBackendClient = Depends(get_backend_client)):
    return CoreIntegrations(client)


def get_blob_store(settings: Settings = Depends(get_settings),
                   core: CoreIntegrations = Depends(get_core_integrations)):
    if settings.blob_backend == 'local':
        return LocalBlobStore(settings.media_dir)
    return RemoteBlobStore(core)


def get_geocoder(request: Request, settings: Settings = Depends(get_settings)):
    geocoder = getattr(request.app.state, 'geocoder', None)
    if geocoder is None:
        geocoder = ReverseGeocoder(settings.opencage_api_key)
        request.app.state.geocoder = geocoder
    return geocoder


def get_social_cache(request: Request) -> SocialAnalysisCache:
    cache = getattr(request.app.state, 'social_analysis_cache', None)
    if cache is None:
        cache = SocialAnalysisCache()
        request.app.state.social_analysis_cache = cache
    return cache


def get_timezone(settings: Settings = Depends(get_settings)):
    return settings.timezone


async def current_user(users: UserEntity = Depends(get_user_entity)) -> User:
    try:
        return await users.me()
    except BackendError as e:
        # signed in but refused, or the backend is down
        raise HTTPException(status_code=403 if e.status_code == 403 else 502, detail=str(e))
