import pytest

from coastal_monitor.api.integrations.geocoding import ReverseGeocoder
from coastal_monitor.api.models.errors import (
    AuthenticationRequired, CreateFailure, GeolocationFailure, UploadFailure, ValidationError
)
from coastal_monitor.api.models.schemas import LocationFix, ReportDraft
from coastal_monitor.api.services.citizen_reporter import (
    DASHBOARD_URL, REDIRECT_DELAY_SECONDS, SUBMIT_ERROR_MESSAGE, MediaAttachment,
    ReportSubmission, resolve_location
)

from conftest import FakeBlobStore, FakeCore, FakeReportEntity


def _draft(**overrides):
    data = dict(
        title="Sea receding rapidly",
        description="The water pulled back about 50 metres in a few minutes",
        hazard_type="abnormal_sea_behavior",
        severity="high",
        latitude="13.0827",
        longitude="80.2707",
        location_name="Marina Beach, Chennai",
    )
    data.update(overrides)
    return ReportDraft(**data)


def _attachments(*names):
    return [MediaAttachment(name, b"data", "image/jpeg") for name in names]


@pytest.mark.asyncio
async def test_submission_creates_record_with_media_in_order():
    reports, blobs, core = FakeReportEntity(), FakeBlobStore(), FakeCore({"urgency_score": 8, "reasoning": "x"})
    submission = ReportSubmission(reports, blobs, core)

    report = await submission.submit(_draft(), _attachments("a.jpg", "b.mp4", "c.png"))

    record = reports.created[0]
    assert record["media_urls"] == ["https://files.test/a.jpg", "https://files.test/b.mp4",
                                    "https://files.test/c.png"]
    assert record["latitude"] == pytest.approx(13.0827)
    assert isinstance(record["longitude"], float)
    assert record["social_media_mentions"] == 0
    assert record["urgency_score"] == 8
    assert report.status == "pending"
    assert submission.state == "success"
    assert submission.history == ["editing", "uploading_media", "scoring", "creating", "success"]


@pytest.mark.asyncio
async def test_empty_title_is_rejected_without_network_calls():
    reports, blobs, core = FakeReportEntity(), FakeBlobStore(), FakeCore()
    submission = ReportSubmission(reports, blobs, core)

    with pytest.raises(ValidationError) as excinfo:
        await submission.submit(_draft(title="  "), _attachments("a.jpg"))

    assert excinfo.value.missing_fields == ["title"]
    assert blobs.uploaded == []
    assert core.prompts == []
    assert reports.created == []
    assert submission.state == "editing"


@pytest.mark.asyncio
async def test_all_required_fields_are_checked():
    submission = ReportSubmission(FakeReportEntity(), FakeBlobStore(), FakeCore())
    with pytest.raises(ValidationError) as excinfo:
        await submission.submit(ReportDraft())
    assert excinfo.value.missing_fields == ["title", "hazard_type", "latitude", "longitude", "description"]


@pytest.mark.asyncio
async def test_llm_failure_falls_back_to_default_urgency(failing_llm):
    reports = FakeReportEntity()
    submission = ReportSubmission(reports, FakeBlobStore(), failing_llm)

    report = await submission.submit(_draft())

    assert report.urgency_score == 5
    assert reports.created[0]["urgency_score"] == 5
    assert reports.created[0]["urgency_score"] == 5
    assert submission.state == "success"


@pytest.mark.asyncio
async def test_llm_authentication_error_does_not_abort_scoring():
    core = FakeCore(llm_error=AuthenticationRequired())
    submission = ReportSubmission(FakeReportEntity(), FakeBlobStore(), core)
    assert await submission.calculate_urgency_score("d", "tsunami", "high") == 5


@pytest.mark.asyncio
@pytest.mark.parametrize("response,expected", [
    ({}, 5),
    ({"urgency_score": None}, 5),
    ({"urgency_score": "very"}, 5),
    ({"urgency_score": 7.6}, 8),
    ({"urgency_score": 42}, 10),
    ({"urgency_score": float("nan")}, 5),
    ({"urgency_score": float("inf")}, 5),
    ({"urgency_score": float("-inf")}, 5),
])
async def test_urgency_score_is_normalised(response, expected):
    submission = ReportSubmission(FakeReportEntity(), FakeBlobStore(), FakeCore(response))
    assert await submission.calculate_urgency_score("d", "tsunami", "high") == expected


@pytest.mark.asyncio
async def test_upload_failure_aborts_before_create():
    reports, blobs, core = FakeReportEntity(), FakeBlobStore(fail_on="b.jpg"), FakeCore()
    submission = ReportSubmission(reports, blobs, core)

    with pytest.raises(UploadFailure):
        await submission.submit(_draft(), _attachments("a.jpg", "b.jpg", "c.jpg"))

    # a.jpg stays uploaded; c.jpg is never attempted
    assert blobs.uploaded == ["a.jpg"]
    assert core.prompts == []
    assert reports.created == []
    assert submission.error == SUBMIT_ERROR_MESSAGE
    assert submission.history[-2:] == ["error", "editing"]


@pytest.mark.asyncio
async def test_create_failure_returns_to_editing():
    submission = ReportSubmission(FakeReportEntity(fail_create=True), FakeBlobStore(), FakeCore())

    with pytest.raises(CreateFailure):
        await submission.submit(_draft())

    assert submission.state == "editing"
    assert submission.error == SUBMIT_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_finish_waits_then_navigates_to_dashboard():
    delays, visited = [], []

    async def fake_sleep(seconds):
        delays.append(seconds)

    submission = ReportSubmission(FakeReportEntity(), FakeBlobStore(), FakeCore(), sleep=fake_sleep)
    await submission.submit(_draft())
    await submission.finish(visited.append)

    assert delays == [REDIRECT_DELAY_SECONDS]
    assert visited == [DASHBOARD_URL]


@pytest.mark.asyncio
async def test_resolve_location_falls_back_to_coordinate_label():
    result = await resolve_location(LocationFix(latitude=13.08271, longitude=80.27069),
                                    ReverseGeocoder(api_key="YOUR_API_KEY"))
    assert result == {
        "latitude": "13.08271",
        "longitude": "80.27069",
        "location_name": "Location: 13.0827, 80.2707",
    }


@pytest.mark.asyncio
async def test_resolve_location_reports_device_errors():
    with pytest.raises(GeolocationFailure):
        await resolve_location(LocationFix(error="permission denied"), ReverseGeocoder())


@pytest.mark.asyncio
async def test_nan_urgency_still_creates_the_report():
    reports = FakeReportEntity()
    submission = ReportSubmission(reports, FakeBlobStore(), FakeCore({"urgency_score": float("nan")}))
    report = await submission.submit(_draft())

    assert report.urgency_score == 5
    assert submission.state == "success"
