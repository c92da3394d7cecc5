from fastapi import APIRouter, Depends
from datetime import datetime
import logging

from coastal_monitor.api.dependencies import get_report_entity, get_timezone, get_user_entity
from coastal_monitor.api.models.schemas import HAZARD_TYPES
from coastal_monitor.api.services.hazard_map import HAZARD_ICONS, build_map
from coastal_monitor.api.services.report_cards import report_card
from coastal_monitor.api.services.report_stats import (
    FILTER_ALL, FILTER_CRITICAL_HIGH, FILTER_RECENT, FILTER_UNVERIFIED,
    dashboard_stats, filter_reports, humanize
)
from coastal_monitor.api.services.view_state import ReportStore

logger = logging.getLogger(__name__)

router = APIRouter()

DASHBOARD_REPORT_LIMIT = 100


def filter_options(stats):
    options = [
        {"value": FILTER_ALL, "label": f"All ({stats['total']})"},
        {"value": FILTER_CRITICAL_HIGH, "label": f"High Severity ({stats['critical']})"},
        {"value": FILTER_UNVERIFIED, "label": f"Pending ({stats['pending']})"},
        {"value": FILTER_RECENT, "label": "Recent"},
    ]
    options.extend(
        {"value": hazard_type, "label": f"{HAZARD_ICONS[hazard_type]} {humanize(hazard_type)}"}
        for hazard_type in HAZARD_TYPES
    )
    return options


@router.get("/api/dashboard")
async def get_dashboard(
    filter: str = FILTER_ALL,
    reports=Depends(get_report_entity),
    users=Depends(get_user_entity),
    tz=Depends(get_timezone)
):
    """Stats, filtered report cards and map layers for the coastal hazard dashboard"""
    store = await ReportStore(reports, users, limit=DASHBOARD_REPORT_LIMIT).refresh()

    now = datetime.now(tz)
    stats = dashboard_stats(store.reports, now=now, tz=tz)
    filtered = filter_reports(store.reports, filter, now=now, tz=tz)

    return {
        "user": store.user.model_dump() if store.user else None,
        "filter": filter,
        "filters": filter_options(stats),
        "stats": stats,
        "map": build_map(filtered),
        "reports": [report_card(r, tz) for r in filtered],
        "last_updated": now.isoformat()
    }
