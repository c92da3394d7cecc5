"""
Filtering and aggregation over the last fetched list of reports.

Everything here is a pure function of the report list and the clock; callers
pass `now` to pin the clock. Calendar days are taken in the configured local
timezone (IST unless configured otherwise).
"""

from datetime import datetime, time, timedelta
from typing import Dict, List, Optional, Sequence

import pytz

from coastal_monitor.api.models.schemas import (
    DEFAULT_URGENCY_SCORE, HIGH_SEVERITY, SEVERITY_LEVELS, HazardReport
)

IST = pytz.timezone('Asia/Kolkata')

FILTER_ALL = 'all'
FILTER_CRITICAL_HIGH = 'critical_high'
FILTER_UNVERIFIED = 'unverified'
FILTER_RECENT = 'recent'

RECENT_WINDOW = timedelta(hours=24)


def to_local(dt: datetime, tz=IST) -> datetime:
    # The backend stores UTC; naive timestamps are read as such.
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(tz)


def _local_now(now: Optional[datetime], tz) -> datetime:
    return datetime.now(tz) if now is None else to_local(now, tz)


def is_high_severity(report: HazardReport) -> bool:
    return report.severity in HIGH_SEVERITY


def humanize(value: str) -> str:
    return value.replace('_', ' ').title()


def filter_reports(reports: Sequence[HazardReport], selector: str = FILTER_ALL,
                   now: Optional[datetime] = None, tz=IST) -> List[HazardReport]:
    if selector == FILTER_ALL:
        return list(reports)
    if selector == FILTER_CRITICAL_HIGH:
        return [r for r in reports if is_high_severity(r)]
    if selector == FILTER_UNVERIFIED:
        return [r for r in reports if r.status == 'pending']
    if selector == FILTER_RECENT:
        cutoff = _local_now(now, tz) - RECENT_WINDOW
        return [r for r in reports
                if r.created_date is not None and to_local(r.created_date, tz) > cutoff]
    return [r for r in reports if r.hazard_type == selector]


def dashboard_stats(reports: Sequence[HazardReport], now: Optional[datetime] = None, tz=IST) -> Dict:
    local_now = _local_now(now, tz)
    midnight = tz.localize(datetime.combine(local_now.date(), time.min))

    return {
        'total': len(reports),
        'critical': sum(1 for r in reports if is_high_severity(r)),
        'pending': sum(1 for r in reports if r.status == 'pending'),
        'today': sum(1 for r in reports
                     if r.created_date is not None and to_local(r.created_date, tz) >= midnight),
    }


def hazard_type_distribution(reports: Sequence[HazardReport]) -> List[Dict]:
    counts = {}
    for report in reports:
        counts[report.hazard_type] = counts.get(report.hazard_type, 0) + 1

    return [
        {'hazard_type': hazard_type, 'name': humanize(hazard_type), 'value': count, 'count': count}
        for hazard_type, count in counts.items()
    ]


def severity_distribution(reports: Sequence[HazardReport]) -> List[Dict]:
    counts = {level: 0 for level in SEVERITY_LEVELS}
    for report in reports:
        if report.severity in counts:
            counts[report.severity] += 1

    return [
        {'severity': level, 'name': level.capitalize(), 'value': count}
        for level, count in counts.items()
    ]


def timeline(reports: Sequence[HazardReport], days: int = 7,
             now: Optional[datetime] = None, tz=IST) -> List[Dict]:
    """Per-day report counts for the last `days` calendar days, oldest first."""
    today = _local_now(now, tz).date()

    by_day = {}
    for report in reports:
        if report.created_date is None:
            continue
        day = to_local(report.created_date, tz).date()
        by_day.setdefault(day, []).append(report)

    entries = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_reports = by_day.get(day, [])
        entries.append({
            'date': day.isoformat(),
            'label': f"{day.strftime('%b')} {day.day}",
            'reports': len(day_reports),
            'high_severity': sum(1 for r in day_reports if is_high_severity(r)),
        })
    return entries


def average_urgency(reports: Sequence[HazardReport]) -> Optional[float]:
    if not reports:
        return None
    total = sum(r.urgency_score or DEFAULT_URGENCY_SCORE for r in reports)
    return total / len(reports)


def format_average_urgency(value: Optional[float]) -> str:
    return '—' if value is None else f"{value:.1f}"


def total_social_mentions(reports: Sequence[HazardReport]) -> int:
    return sum(r.social_media_mentions or 0 for r in reports)
