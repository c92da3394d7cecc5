from __future__ import annotations

from coastal_monitor.api.models.schemas import SocialMediaAnalysis, User
from coastal_monitor.api.services.view_state import SocialAnalysisCache

from conftest import SAMPLE_ANALYSIS


def _analysis(risk="moderate"):
    return SocialMediaAnalysis.model_validate(dict(SAMPLE_ANALYSIS, misinformation_risk=risk))


def test_analysis_is_kept_per_user(citizen, official):
    cache = SocialAnalysisCache()
    cache.put(official, _analysis("high"))

    assert cache.get(official).misinformation_risk == "high"
    assert cache.get(citizen) is None


def test_users_without_identity_are_not_cached():
    cache = SocialAnalysisCache()
    cache.put(None, _analysis())
    cache.put(User(full_name="No Id"), _analysis())

    assert len(cache) == 0
    assert cache.get(User(full_name="Someone Else")) is None


def test_least_recently_used_user_is_dropped_past_the_limit():
    cache = SocialAnalysisCache(max_entries=2)
    first, second, third = (User(id=f"u{i}") for i in range(3))

    cache.put(first, _analysis())
    cache.put(second, _analysis())
    cache.get(first)
    cache.put(third, _analysis())

    assert len(cache) == 2
    assert cache.get(second) is None
    assert cache.get(first) is not None
    assert cache.get(third) is not None
