from fastapi import APIRouter, File, UploadFile, HTTPException, Depends, Form
from typing import List, Optional
from dataclasses import dataclass
import asyncio
import logging
import math

from pydantic import ValidationError as SchemaError

from coastal_monitor.api.dependencies import get_blob_store, get_core_integrations, get_geocoder, get_report_entity
from coastal_monitor.api.models.errors import (
    AuthenticationRequired, GeolocationFailure, HazardMonitorError, ValidationError
)
from coastal_monitor.api.models.schemas import (
    DEFAULT_URGENCY_SCORE, HazardReport, LocationFix, ReportDraft, UrgencyAssessment
)

logger = logging.getLogger(__name__)

router = APIRouter()

EDITING = 'editing'
UPLOADING_MEDIA = 'uploading_media'
SCORING = 'scoring'
CREATING = 'creating'
SUCCESS = 'success'
ERROR = 'error'

DASHBOARD_URL = '/dashboard'
REDIRECT_DELAY_SECONDS = 2

SUBMIT_ERROR_MESSAGE = 'Failed to submit report. Please try again.'
SUBMIT_SUCCESS_MESSAGE = 'Your hazard report has been submitted and will be reviewed by authorities.'
GEOLOCATION_ERROR_MESSAGE = 'Unable to retrieve your location. Please enter coordinates manually.'

URGENCY_SCHEMA = {
    "type": "object",
    "properties": {
        "urgency_score": {"type": "number", "minimum": 1, "maximum": 10},
        "reasoning": {"type": "string"}
    }
}


@dataclass
class MediaAttachment:
    filename: str
    content: bytes
    content_type: Optional[str] = None


def urgency_prompt(description, hazard_type, severity):
    return f"""Analyze this coastal hazard report and calculate an urgency score from 1-10 based on:
        - Description: "{description}"
        - Hazard type: {hazard_type}
        - Reported severity: {severity}

        Consider factors like immediate danger to people, infrastructure impact, environmental damage, and time sensitivity. Return only a number between 1-10."""


class ReportSubmission:
    """
    Drives one report from the filled-in form to a created record:
    editing -> uploading_media -> scoring -> creating -> success.

    Upload and create failures move to `error` and straight back to
    `editing` with a message for the reporter. Scoring never fails the
    submission; it falls back to the default urgency.
    """

    def __init__(self, reports, blob_store, core, sleep=asyncio.sleep):
        self.reports = reports
        self.blob_store = blob_store
        self.core = core
        self._sleep = sleep
        self.state = EDITING
        self.history = [EDITING]
        self.error = None
        self.report = None

    def _transition(self, state):
        logger.debug(f"Report submission: {self.state} -> {state}")
        self.state = state
        self.history.append(state)

    async def calculate_urgency_score(self, description, hazard_type, severity) -> int:
        try:
            response = await self.core.invoke_llm(
                urgency_prompt(description, hazard_type, severity),
                response_json_schema=URGENCY_SCHEMA
            )
            score = UrgencyAssessment.model_validate(response).urgency_score
        except (HazardMonitorError, SchemaError) as e:
            logger.warning(f"Urgency scoring failed, using default {DEFAULT_URGENCY_SCORE}: {e}")
            return DEFAULT_URGENCY_SCORE

        if not score or not math.isfinite(score):
            return DEFAULT_URGENCY_SCORE
        return max(1, min(10, int(round(score))))

    async def upload_media(self, attachments: List[MediaAttachment]) -> List[str]:
        # one at a time: URLs keep attachment order, first failure stops the rest
        media_urls = []
        for attachment in attachments:
            url = await self.blob_store.upload(attachment.filename, attachment.content, attachment.content_type)
            media_urls.append(url)
        return media_urls

    async def submit(self, draft: ReportDraft, attachments: Optional[List[MediaAttachment]] = None) -> HazardReport:
        missing = draft.missing_fields()
        if missing:
            self.error = f"Please fill in: {', '.join(missing)}"
            raise ValidationError(missing)

        self.error = None
        attachments = attachments or []

        try:
            self._transition(UPLOADING_MEDIA)
            media_urls = await self.upload_media(attachments)

            self._transition(SCORING)
            urgency_score = await self.calculate_urgency_score(
                draft.description, draft.hazard_type, draft.severity
            )

            self._transition(CREATING)
            self.report = await self.reports.create(draft.to_record(media_urls, urgency_score))
        except HazardMonitorError as e:
            logger.error(f"Error submitting report: {e}")
            self._transition(ERROR)
            self.error = SUBMIT_ERROR_MESSAGE
            self._transition(EDITING)
            raise

        self._transition(SUCCESS)
        logger.info(f"Report {self.report.id} submitted with urgency {urgency_score} "
                    f"and {len(media_urls)} media file(s)")
        return self.report

    async def finish(self, navigate):
        """Hold the success screen for the display delay, then go to the dashboard."""
        await self._sleep(REDIRECT_DELAY_SECONDS)
        return navigate(DASHBOARD_URL)


async def resolve_location(fix: LocationFix, geocoder) -> dict:
    if fix.error or fix.latitude is None or fix.longitude is None:
        raise GeolocationFailure(GEOLOCATION_ERROR_MESSAGE)

    location_name = await geocoder.location_name(fix.latitude, fix.longitude)
    return {
        'latitude': str(fix.latitude),
        'longitude': str(fix.longitude),
        'location_name': location_name
    }


@router.post("/api/reports")
async def submit_hazard_report(
    title: str = Form(''),
    description: str = Form(''),
    hazard_type: str = Form(''),
    severity: str = Form('moderate'),
    latitude: str = Form(''),
    longitude: str = Form(''),
    location_name: str = Form(''),
    media_files: List[UploadFile] = File(None),
    reports=Depends(get_report_entity),
    blob_store=Depends(get_blob_store),
    core=Depends(get_core_integrations)
):
    try:
        draft = ReportDraft(
            title=title,
            description=description,
            hazard_type=hazard_type,
            severity=severity,
            latitude=latitude,
            longitude=longitude,
            location_name=location_name
        )
    except SchemaError as e:
        raise HTTPException(status_code=422, detail=[
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ])

    attachments = []
    for file in media_files or []:
        content = await file.read()
        attachments.append(MediaAttachment(file.filename or 'upload', content, file.content_type))

    submission = ReportSubmission(reports, blob_store, core)
    try:
        report = await submission.submit(draft, attachments)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={
            "message": submission.error,
            "missing_fields": e.missing_fields
        })
    except AuthenticationRequired:
        raise
    except HazardMonitorError:
        raise HTTPException(status_code=502, detail=submission.error)

    return {
        "status": SUCCESS,
        "report": report.model_dump(mode='json'),
        "states": submission.history,
        "message": SUBMIT_SUCCESS_MESSAGE,
        "redirect_to": DASHBOARD_URL,
        "redirect_delay_seconds": REDIRECT_DELAY_SECONDS
    }


@router.post("/api/location/resolve")
async def resolve_current_location(fix: LocationFix, geocoder=Depends(get_geocoder)):
    """Fill coordinates and a place name from a device position fix."""
    try:
        return await resolve_location(fix, geocoder)
    except GeolocationFailure as e:
        raise HTTPException(status_code=422, detail=str(e))
