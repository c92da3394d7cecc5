from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime
import logging

from coastal_monitor.api.dependencies import (
    get_core_integrations, get_report_entity, get_social_cache, get_timezone, get_user_entity
)
from coastal_monitor.api.models.errors import BackendError
from coastal_monitor.api.services.report_stats import (
    average_urgency, format_average_urgency, hazard_type_distribution, is_high_severity,
    severity_distribution, timeline, total_social_mentions
)
from coastal_monitor.api.services.session import can_view_analytics
from coastal_monitor.api.services.social_analysis import run_social_media_analysis
from coastal_monitor.api.services.view_state import ReportStore

logger = logging.getLogger(__name__)

router = APIRouter()

ANALYTICS_REPORT_LIMIT = 200
ANALYTICS_FORBIDDEN_MESSAGE = "Analytics dashboard is only available for officials and analysts."


async def load_analytics_store(reports, users):
    store = await ReportStore(reports, users, limit=ANALYTICS_REPORT_LIMIT).refresh()
    if store.user is not None and not can_view_analytics(store.user):
        raise HTTPException(status_code=403, detail=ANALYTICS_FORBIDDEN_MESSAGE)
    return store


@router.get("/api/analytics")
async def get_analytics(
    reports=Depends(get_report_entity),
    users=Depends(get_user_entity),
    cache=Depends(get_social_cache),
    tz=Depends(get_timezone)
):
    store = await load_analytics_store(reports, users)
    now = datetime.now(tz)
    avg_urgency = average_urgency(store.reports)
    cached = cache.get(store.user)

    return {
        "overview": {
            "total_reports": len(store.reports),
            "high_severity": sum(1 for r in store.reports if is_high_severity(r)),
            "social_media_mentions": total_social_mentions(store.reports),
            "average_urgency": avg_urgency,
            "average_urgency_display": format_average_urgency(avg_urgency)
        },
        "hazard_types": hazard_type_distribution(store.reports),
        "severity": severity_distribution(store.reports),
        "timeline": timeline(store.reports, now=now, tz=tz),
        "social_analysis": cached.model_dump() if cached else None,
        "last_updated": now.isoformat()
    }


@router.post("/api/analytics/social-analysis")
async def run_analysis(
    reports=Depends(get_report_entity),
    users=Depends(get_user_entity),
    core=Depends(get_core_integrations),
    cache=Depends(get_social_cache)
):
    store = await load_analytics_store(reports, users)

    try:
        analysis = await run_social_media_analysis(core, store.reports)
    except BackendError as e:
        logger.error(f"Error running social media analysis: {e}")
        raise HTTPException(status_code=502, detail="Social media analysis is unavailable. Please try again.")

    cache.put(store.user, analysis)
    return analysis.model_dump()
