from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from devspeak.models import PracticeSession
from devspeak.progress import EMPTY_MESSAGE, build_dashboard, dashboard_zone


def _session(created_at, module="standup", scores=None):
    return PracticeSession(
        user_id="alice",
        module_type=module,
        scores=scores,
        user_input={"text": "x"},
        ai_feedback="fb",
        created_at=created_at,
    )


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_empty_state():
    assert build_dashboard([]) == {"message": EMPTY_MESSAGE}


def test_strongest_and_weakest_by_average():
    rows = [
        _session(_utc(2024, 1, 1, 8), scores={"a": 90, "b": 40}),
        _session(_utc(2024, 1, 2, 8), scores={"a": 80, "b": 50}),
    ]
    analysis = build_dashboard(rows)["analysis"]
    assert analysis["strongestArea"] == {"name": "a", "score": 85}
    assert analysis["weakestArea"] == {"name": "b", "score": 45}


def test_overall_metric_is_excluded_from_analysis():
    rows = [_session(_utc(2024, 1, 1), scores={"overall": 99, "clarity": 60, "tone": 20})]
    analysis = build_dashboard(rows)["analysis"]
    assert analysis["strongestArea"]["name"] == "clarity"
    assert analysis["weakestArea"]["name"] == "tone"


def test_ties_go_to_first_seen_metric():
    rows = [_session(_utc(2024, 1, 1), scores={"x": 70, "y": 70})]
    analysis = build_dashboard(rows)["analysis"]
    assert analysis["strongestArea"]["name"] == "x"
    assert analysis["weakestArea"]["name"] == "x"


def test_no_scores_reports_placeholders():
    rows = [_session(_utc(2024, 1, 1), scores=None)]
    data = build_dashboard(rows)
    assert data["analysis"] == {
        "strongestArea": {"name": "N/A", "score": 0},
        "weakestArea": {"name": "N/A", "score": 100},
    }
    assert data["scoreTrends"] == [{"date": "Jan 1"}]


def test_same_day_sessions_share_one_bucket():
    rows = [
        _session(_utc(2024, 1, 1, 8, 0)),
        _session(_utc(2024, 1, 1, 23, 0)),
        _session(_utc(2024, 1, 3, 12, 0), module="writing"),
    ]
    data = build_dashboard(rows)
    assert data["heatmapData"] == [
        {"day": "2024-01-01", "value": 2},
        {"day": "2024-01-03", "value": 1},
    ]
    assert data["moduleCounts"] == {"standup": 2, "writing": 1}
    assert data["totalSessions"] == 3
    assert data["firstPracticeDate"] == "2024-01-01T08:00:00+00:00"


def test_naive_timestamps_are_read_as_utc():
    rows = [_session(datetime(2024, 5, 6, 7, 8, 9))]
    assert build_dashboard(rows)["firstPracticeDate"] == "2024-05-06T07:08:09+00:00"


def test_score_trends_average_per_day_with_observed_metrics_only():
    rows = [
        _session(_utc(2024, 1, 1, 9), scores={"clarity": 80, "tone": 61}),
        _session(_utc(2024, 1, 1, 18), scores={"clarity": 71}),
        _session(_utc(2024, 1, 2, 9), scores={"depth": 40, "feedback": "text is skipped"}),
    ]
    trends = build_dashboard(rows)["scoreTrends"]
    assert trends == [
        {"date": "Jan 1", "clarity": 76, "tone": 61},
        {"date": "Jan 2", "depth": 40},
    ]


def test_score_trends_follow_dashboard_timezone():
    # 23:30 UTC on Jan 1 is already Jan 2 in Tokyo
    rows = [
        _session(_utc(2024, 1, 1, 10), scores={"clarity": 50}),
        _session(_utc(2024, 1, 1, 23, 30), scores={"clarity": 90}),
    ]
    trends = build_dashboard(rows, ZoneInfo("Asia/Tokyo"))["scoreTrends"]
    assert trends == [{"date": "Jan 1", "clarity": 50}, {"date": "Jan 2", "clarity": 90}]


def test_recent_activity_is_newest_first_and_limited():
    start = _utc(2024, 3, 1, 0, 5)
    rows = [_session(start + timedelta(hours=i), module=f"m{i}") for i in range(7)]
    recent = build_dashboard(rows)["recentActivity"]
    assert [item["module"] for item in recent] == ["m6", "m5", "m4", "m3", "m2"]
    assert recent[0]["date"] == "3/1/2024, 6:05:00 AM"
    assert recent[-1]["date"] == "3/1/2024, 2:05:00 AM"


def test_display_timestamp_noon_and_midnight():
    rows = [_session(_utc(2024, 1, 1, 0, 0)), _session(_utc(2024, 1, 1, 12, 30, 15))]
    recent = build_dashboard(rows)["recentActivity"]
    assert recent[0]["date"] == "1/1/2024, 12:30:15 PM"
    assert recent[1]["date"] == "1/1/2024, 12:00:00 AM"


def test_build_dashboard_is_deterministic():
    rows = [
        _session(_utc(2024, 1, 1, 8), scores={"a": 90, "b": 40}),
        _session(_utc(2024, 1, 2, 8), module="writing", scores={"a": 80, "b": 50}),
    ]
    assert build_dashboard(rows) == build_dashboard(rows)


def test_dashboard_zone():
    assert dashboard_zone("UTC") is timezone.utc
    assert dashboard_zone("") is timezone.utc
    assert dashboard_zone("Europe/Istanbul") == ZoneInfo("Europe/Istanbul")


def test_non_finite_and_oversized_scores_are_skipped():
    rows = [
        _session(_utc(2024, 1, 1, 8), scores={"clarity": float("nan"), "tone": 60}),
        _session(_utc(2024, 1, 1, 9), scores={"clarity": float("inf"), "depth": 10**400}),
        _session(_utc(2024, 1, 2, 8), scores={"clarity": 80, "tone": float("-inf")}),
    ]
    data = build_dashboard(rows)
    assert data["scoreTrends"] == [
        {"date": "Jan 1", "tone": 60},
        {"date": "Jan 2", "clarity": 80},
    ]
    assert data["analysis"] == {
        "strongestArea": {"name": "clarity", "score": 80},
        "weakestArea": {"name": "tone", "score": 60},
    }


def test_scores_that_overflow_when_summed_are_skipped():
    rows = [
        _session(_utc(2024, 1, 1, 8), scores={"clarity": 1e308, "tone": 40}),
        _session(_utc(2024, 1, 1, 9), scores={"clarity": 1e308, "tone": 50}),
    ]
    data = build_dashboard(rows)
    assert data["scoreTrends"] == [{"date": "Jan 1", "tone": 45}]
    assert data["analysis"]["strongestArea"] == {"name": "tone", "score": 45}
