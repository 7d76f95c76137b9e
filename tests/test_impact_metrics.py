"""Tests for day-bucketed metrics and the activity feed."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from activity_log import log_activity
from errors import ValidationError
from impact_metrics import (
    get_metric_value,
    increment_metric,
    query_metrics,
    recent_activities,
    record_metric,
)
from models import ImpactMetric, UserActivity, utc_today


def test_first_increment_creates_bucket(app):
    increment_metric("meals_saved", 5)

    rows = ImpactMetric.query.all()
    assert len(rows) == 1
    assert rows[0].metric_type == "meals_saved"
    assert rows[0].date == utc_today()
    assert rows[0].value == 5


def test_increments_accumulate(app):
    increment_metric("meals_saved", 3)
    increment_metric("meals_saved", 4)

    assert get_metric_value("meals_saved") == 7
    assert ImpactMetric.query.filter_by(metric_type="meals_saved").count() == 1


def test_buckets_are_per_type_and_day(app):
    today = utc_today()
    yesterday = today - timedelta(days=1)

    increment_metric("meals_saved", 2, day=today)
    increment_metric("meals_saved", 9, day=yesterday)
    increment_metric("users_helped", 1, day=today)

    assert get_metric_value("meals_saved", today) == 2
    assert get_metric_value("meals_saved", yesterday) == 9
    assert get_metric_value("users_helped", today) == 1
    assert get_metric_value("waste_reduced", today) == 0


def test_record_metric_swallows_errors(app):
    with patch("impact_metrics.increment_metric", side_effect=OperationalError("UPDATE", {}, Exception("locked"))):
        assert record_metric("meals_saved", 1) is False

    assert record_metric("meals_saved", 1) is True
    assert get_metric_value("meals_saved") == 1


class TestQueryMetrics:
    @pytest.fixture
    def history(self, app):
        today = utc_today()
        increment_metric("meals_saved", 10, day=today)
        increment_metric("meals_saved", 5, day=today - timedelta(days=3))
        increment_metric("meals_saved", 7, day=today - timedelta(days=20))
        increment_metric("meals_saved", 100, day=today - timedelta(days=45))
        increment_metric("users_helped", 2, day=today - timedelta(days=6))
        return today

    def test_today_returns_raw_rows(self, history):
        metrics = query_metrics("today", today=history)
        assert len(metrics) == 1
        assert metrics[0]["metric_type"] == "meals_saved"
        assert metrics[0]["value"] == 10
        assert metrics[0]["date"] == history.isoformat()

    def test_week_sums_per_type(self, history):
        metrics = query_metrics("week", today=history)
        totals = {m["metric_type"]: m["value"] for m in metrics}
        assert totals == {"meals_saved": 15, "users_helped": 2}
        assert all(m["since"] == (history - timedelta(days=7)).isoformat() for m in metrics)

    def test_month_sums_per_type(self, history):
        totals = {m["metric_type"]: m["value"] for m in query_metrics("month", today=history)}
        assert totals == {"meals_saved": 22, "users_helped": 2}

    def test_type_filter(self, history):
        metrics = query_metrics("month", metric_type="users_helped", today=history)
        assert [m["metric_type"] for m in metrics] == ["users_helped"]

    def test_invalid_period(self, app):
        with pytest.raises(ValidationError, match="Invalid period"):
            query_metrics("year")


class TestActivities:
    def test_recent_activities_newest_first_with_name(self, donor):
        for i in range(12):
            log_activity(donor.id, "donation_created", f"Created donation listing for item {i}")

        activities = recent_activities(limit=10)
        assert len(activities) == 10
        assert activities[0]["description"] == "Created donation listing for item 11"
        assert activities[0]["profiles"] == {"full_name": "Dana Donor"}

    def test_unknown_activity_type(self, donor):
        with pytest.raises(ValueError):
            log_activity(donor.id, "donation_teleported", "nope")
        assert UserActivity.query.count() == 0
