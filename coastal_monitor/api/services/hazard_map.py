from typing import Dict, List, Optional, Sequence

from coastal_monitor.api.models.schemas import HazardReport

INDIA_CENTER = (20.5937, 78.9629)
DEFAULT_ZOOM = 5

TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'

SEVERITY_COLORS = {
    'low': '#22c55e',
    'moderate': '#f59e0b',
    'high': '#ef4444',
    'critical': '#dc2626'
}

HAZARD_ICONS = {
    'tsunami': '🌊',
    'storm_surge': '🌀',
    'high_waves': '〰️',
    'coastal_flooding': '💧',
    'erosion': '🏔️',
    'abnormal_sea_behavior': '⚠️',
    'other': '❗'
}

HOTSPOT_MIN_MENTIONS = 5
HOTSPOT_MIN_RADIUS_M = 5000
HOTSPOT_MAX_RADIUS_M = 50000


def hotspot_radius(mention_count: int, urgency: Optional[int]) -> float:
    """Circle radius in metres for a report with heavy social-media activity."""
    base_radius = max(mention_count * 1000, HOTSPOT_MIN_RADIUS_M)
    urgency_multiplier = urgency / 5 if urgency else 1
    return min(base_radius * urgency_multiplier, HOTSPOT_MAX_RADIUS_M)


def _marker(report: HazardReport) -> Dict:
    return {
        'report_id': report.id,
        'position': [report.latitude, report.longitude],
        'icon': HAZARD_ICONS.get(report.hazard_type, HAZARD_ICONS['other']),
        'color': SEVERITY_COLORS.get(report.severity),
        'popup': {
            'title': report.title,
            'severity': report.severity.upper(),
            'description': report.description,
            'urgency_score': report.urgency_score,
            'social_media_mentions': report.social_media_mentions or None,
            'status': report.status.replace('_', ' ').upper(),
            'media_url': report.media_urls[0] if report.media_urls else None,
        },
    }


def _hotspot(report: HazardReport) -> Dict:
    color = SEVERITY_COLORS.get(report.severity)
    return {
        'report_id': report.id,
        'center': [report.latitude, report.longitude],
        'radius': hotspot_radius(report.social_media_mentions, report.urgency_score),
        'color': color,
        'fill_color': color,
        'fill_opacity': 0.1,
        'weight': 2,
        'opacity': 0.3,
    }


def build_map(reports: Sequence[HazardReport], center=INDIA_CENTER, zoom=DEFAULT_ZOOM) -> Dict:
    markers: List[Dict] = []
    hotspots: List[Dict] = []

    for report in reports:
        if (report.social_media_mentions or 0) > HOTSPOT_MIN_MENTIONS:
            hotspots.append(_hotspot(report))
        markers.append(_marker(report))

    return {
        'center': list(center),
        'zoom': zoom,
        'tiles': {'url': TILE_URL, 'attribution': TILE_ATTRIBUTION},
        'markers': markers,
        'hotspots': hotspots,
        'legend': [{'severity': level, 'color': color} for level, color in SEVERITY_COLORS.items()],
    }
