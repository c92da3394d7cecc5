"""
Simulated social-media monitoring.

There is no real feed behind this: the most recent reports are summarised into
a prompt and the LLM is asked to make up plausible sentiment, keyword, hotspot
and engagement figures in a fixed JSON shape. Only the shape is checked.
"""

import logging
from typing import Sequence

from pydantic import ValidationError as SchemaError

from coastal_monitor.api.models.errors import InferenceFailure
from coastal_monitor.api.models.schemas import HazardReport, SocialMediaAnalysis

logger = logging.getLogger(__name__)

RECENT_REPORT_COUNT = 10

SOCIAL_ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "trending_keywords": {
            "type": "array",
            "items": {"type": "string"}
        },
        "sentiment_breakdown": {
            "type": "object",
            "properties": {
                "concerned": {"type": "number"},
                "neutral": {"type": "number"},
                "panic": {"type": "number"}
            }
        },
        "geographic_hotspots": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "location": {"type": "string"},
                    "mention_count": {"type": "number"},
                    "sentiment": {"type": "string"}
                }
            }
        },
        "engagement_metrics": {
            "type": "object",
            "properties": {
                "total_posts": {"type": "number"},
                "total_reach": {"type": "number"},
                "avg_engagement_rate": {"type": "number"}
            }
        },
        "misinformation_risk": {
            "type": "string",
            "enum": ["low", "moderate", "high"]
        }
    }
}


def summarize_reports(reports: Sequence[HazardReport], count=RECENT_REPORT_COUNT) -> str:
    # reports arrive newest first from the store
    return '\n'.join(
        f"{r.hazard_type}: {r.title} at {r.location_name} ({r.severity})"
        for r in list(reports)[:count]
    )


def social_analysis_prompt(reports: Sequence[HazardReport]) -> str:
    return f"""Analyze these recent coastal hazard reports and simulate what social media analysis might show:

Recent reports:
{summarize_reports(reports)}

Simulate realistic social media analysis including:
1. Trending hazard keywords and hashtags
2. Sentiment analysis of public reactions
3. Geographic hotspots of social media activity
4. Estimated reach and engagement metrics
5. Key influencer mentions and emergency response accounts
6. Public concern levels and misinformation risks

Make it realistic for India's coastal regions and current social media patterns."""


async def run_social_media_analysis(core, reports: Sequence[HazardReport]) -> SocialMediaAnalysis:
    response = await core.invoke_llm(
        social_analysis_prompt(reports),
        response_json_schema=SOCIAL_ANALYSIS_SCHEMA
    )

    try:
        analysis = SocialMediaAnalysis.model_validate(response)
    except SchemaError as e:
        raise InferenceFailure(f"Social media analysis did not match the expected shape: {e}") from e

    logger.info(f"Social media analysis: {len(analysis.trending_keywords)} keywords, "
                f"{len(analysis.geographic_hotspots)} hotspots, risk {analysis.misinformation_risk}")
    return analysis
