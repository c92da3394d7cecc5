import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

import coastal_monitor.api.services.analytics as analytics
import coastal_monitor.api.services.citizen_reporter as citizen_reporter
import coastal_monitor.api.services.dashboard as dashboard
import coastal_monitor.api.services.session as session
from coastal_monitor.api.config import get_settings
from coastal_monitor.api.integrations.blob_store import LocalBlobStore
from coastal_monitor.api.models.errors import AuthenticationRequired

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')
logger = logging.getLogger(__name__)


def create_app(settings=None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Coastal Hazard Monitor API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins) or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AuthenticationRequired)
    async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
        return JSONResponse(status_code=401, content={
            "detail": str(exc),
            "title": session.APP_TITLE,
            "message": session.APP_TAGLINE,
            "login_url": exc.login_url
        })

    # Media written by the development blob store is served back from here
    if settings.blob_backend == 'local':
        store = LocalBlobStore(settings.media_dir)
        app.mount(
            store.url_prefix,
            StaticFiles(directory=store.media_storage_path),
            name="hazard_media"
        )

    app.include_router(session.router)
    app.include_router(dashboard.router)
    app.include_router(analytics.router)
    app.include_router(citizen_reporter.router)

    @app.get("/")
    async def root():
        return {"status": "ok", "message": "Coastal Hazard Monitor API running"}

    logger.info(f"Coastal Hazard Monitor API ready (blob store: {settings.blob_backend}, "
                f"timezone: {settings.timezone_name})")
    return app


app = create_app()
