from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import ClassVar, Optional, List, Dict, Tuple
from datetime import datetime

HAZARD_TYPES = (
    'tsunami', 'storm_surge', 'high_waves', 'coastal_flooding',
    'erosion', 'abnormal_sea_behavior', 'other'
)

# least to most severe
SEVERITY_LEVELS = ('low', 'moderate', 'high', 'critical')
HIGH_SEVERITY = ('high', 'critical')

REPORT_STATUSES = ('pending', 'verified', 'dismissed', 'escalated')

USER_ROLES = ('citizen', 'official', 'analyst')

DEFAULT_URGENCY_SCORE = 5


class HazardReport(BaseModel):
    """A report as stored by the managed backend. Read-only on this side."""
    model_config = ConfigDict(extra='ignore')

    id: str
    title: str = ''
    description: str = ''
    hazard_type: str = 'other'
    severity: str = 'moderate'
    location_name: Optional[str] = None
    latitude: float
    longitude: float
    status: str = 'pending'
    urgency_score: Optional[int] = None
    social_media_mentions: int = 0
    media_urls: List[str] = Field(default_factory=list)
    created_by: Optional[str] = None
    created_date: Optional[datetime] = None

    @field_validator('urgency_score', mode='before')
    def round_urgency(cls, v):
        if isinstance(v, float):
            return int(round(v))
        return v

    @field_validator('social_media_mentions', mode='before')
    def default_mentions(cls, v):
        return 0 if v is None else v

    @field_validator('media_urls', mode='before')
    def default_media(cls, v):
        return [] if v is None else v


class ReportDraft(BaseModel):
    """Submission form as typed by the reporter.

    Coordinates stay strings until the record is assembled, the same way the
    form holds them; `to_record` does the numeric coercion.
    """
    title: str = ''
    description: str = ''
    hazard_type: str = ''
    severity: str = 'moderate'
    latitude: str = ''
    longitude: str = ''
    location_name: str = ''

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ('title', 'hazard_type', 'latitude', 'longitude', 'description')

    @field_validator('hazard_type')
    def validate_hazard_type(cls, v):
        if v and v not in HAZARD_TYPES:
            raise ValueError(f'Hazard type must be one of {list(HAZARD_TYPES)}')
        return v

    @field_validator('severity')
    def validate_severity(cls, v):
        if v not in SEVERITY_LEVELS:
            raise ValueError(f'Severity must be one of {list(SEVERITY_LEVELS)}')
        return v

    @field_validator('latitude', 'longitude')
    def validate_coordinate(cls, v):
        v = (v or '').strip()
        if v:
            try:
                float(v)
            except ValueError:
                raise ValueError('Coordinate must be a number')
        return v

    def missing_fields(self) -> List[str]:
        return [name for name in self.REQUIRED_FIELDS if not getattr(self, name).strip()]

    def to_record(self, media_urls: List[str], urgency_score: int) -> Dict:
        return {
            'title': self.title,
            'description': self.description,
            'hazard_type': self.hazard_type,
            'severity': self.severity,
            'location_name': self.location_name,
            'latitude': float(self.latitude),
            'longitude': float(self.longitude),
            'media_urls': list(media_urls),
            'urgency_score': urgency_score,
            'social_media_mentions': 0,
        }


class User(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: str = 'citizen'

    @field_validator('role', mode='before')
    def validate_role(cls, v):
        # unknown roles get the least privileged view
        return v if v in USER_ROLES else 'citizen'


class UrgencyAssessment(BaseModel):
    urgency_score: Optional[float] = None
    reasoning: Optional[str] = None


class SentimentBreakdown(BaseModel):
    concerned: float = 0
    neutral: float = 0
    panic: float = 0


class GeographicHotspot(BaseModel):
    location: str = ''
    mention_count: float = 0
    sentiment: str = 'neutral'


class EngagementMetrics(BaseModel):
    total_posts: float = 0
    total_reach: float = 0
    avg_engagement_rate: float = 0


class SocialMediaAnalysis(BaseModel):
    trending_keywords: List[str] = Field(default_factory=list)
    sentiment_breakdown: SentimentBreakdown = Field(default_factory=SentimentBreakdown)
    geographic_hotspots: List[GeographicHotspot] = Field(default_factory=list)
    engagement_metrics: EngagementMetrics = Field(default_factory=EngagementMetrics)
    misinformation_risk: Optional[str] = None

    @field_validator('misinformation_risk')
    def validate_risk(cls, v):
        if v is not None and v not in ('low', 'moderate', 'high'):
            raise ValueError('Misinformation risk must be low, moderate or high')
        return v


class LocationFix(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    error: Optional[str] = None

    @field_validator('latitude')
    def validate_latitude(cls, v):
        if v is not None and not -90 <= v <= 90:
            raise ValueError('Invalid latitude')
        return v

    @field_validator('longitude')
    def validate_longitude(cls, v):
        if v is not None and not -180 <= v <= 180:
            raise ValueError('Invalid longitude')
        return v
