from typing import Dict

from coastal_monitor.api.models.schemas import HazardReport
from coastal_monitor.api.services.hazard_map import HAZARD_ICONS
from coastal_monitor.api.services.report_stats import IST, to_local

SEVERITY_BADGES = {
    'critical': 'bg-red-100 text-red-800 border-red-200',
    'high': 'bg-orange-100 text-orange-800 border-orange-200',
    'moderate': 'bg-yellow-100 text-yellow-800 border-yellow-200',
}
DEFAULT_SEVERITY_BADGE = 'bg-green-100 text-green-800 border-green-200'

STATUS_BADGES = {
    'verified': 'bg-green-100 text-green-800',
    'dismissed': 'bg-gray-100 text-gray-800',
    'escalated': 'bg-red-100 text-red-800',
}
DEFAULT_STATUS_BADGE = 'bg-blue-100 text-blue-800'

STATUS_ICONS = {
    'pending': 'clock',
    'verified': 'check-circle',
    'dismissed': 'x-circle',
    'escalated': 'arrow-up'
}


def format_created_date(report: HazardReport, tz=IST):
    if report.created_date is None:
        return None
    local = to_local(report.created_date, tz)
    return f"{local.strftime('%b')} {local.day}, {local.year} {local.strftime('%H:%M')}"


def report_card(report: HazardReport, tz=IST) -> Dict:
    """Card view of a single report as listed under the dashboard map."""
    return {
        'id': report.id,
        'title': report.title,
        'description': report.description,
        'icon': HAZARD_ICONS.get(report.hazard_type, HAZARD_ICONS['other']),
        'hazard_label': report.hazard_type.replace('_', ' '),
        'severity': report.severity.upper(),
        'severity_badge': SEVERITY_BADGES.get(report.severity, DEFAULT_SEVERITY_BADGE),
        'status': report.status.upper(),
        'status_badge': STATUS_BADGES.get(report.status, DEFAULT_STATUS_BADGE),
        'status_icon': STATUS_ICONS.get(report.status, 'clock'),
        'location_name': report.location_name,
        'created_by': report.created_by,
        'created_at': format_created_date(report, tz),
        'urgency_score': report.urgency_score or None,
        'social_media_mentions': report.social_media_mentions if report.social_media_mentions > 0 else None,
        'has_media': bool(report.media_urls),
    }
