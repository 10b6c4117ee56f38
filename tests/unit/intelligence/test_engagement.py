"""
Unit tests for engagement scoring and interaction recording.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from fossilmind.intelligence.engagement import (
    EngagementAction,
    engagement_score,
    next_dismiss_date,
    record_engagement,
)


class TestEngagementScore:

    def test_untouched_fossil_scores_zero(self, test_data_factory, now):
        fossil = test_data_factory.create_fossil("f1", "claim")
        assert engagement_score(fossil, now) == 0.0

    def test_positive_signals_add_up(self, test_data_factory, now):
        fossil = test_data_factory.create_fossil("f1", "claim", reinforce_count=2, reuse_count=1, quality=4)
        assert engagement_score(fossil, now) == pytest.approx(0.6 + 0.2 + 0.2)

    def test_repeated_dismissals_and_skips_penalize(self, test_data_factory, now):
        dismissed = test_data_factory.create_fossil("a", "claim", dismiss_count=3)
        skipped = test_data_factory.create_fossil("b", "claim", skip_count=4)
        tolerated = test_data_factory.create_fossil("c", "claim", dismiss_count=2, skip_count=3)

        assert engagement_score(dismissed, now) == pytest.approx(-0.3)
        assert engagement_score(skipped, now) == pytest.approx(-0.2)
        assert engagement_score(tolerated, now) == 0.0

    def test_similar_hour_bonus(self, test_data_factory, now):
        near = test_data_factory.create_fossil("a", "claim", last_revisited_at=now - timedelta(days=1, hours=1))
        far = test_data_factory.create_fossil("b", "claim", last_revisited_at=now - timedelta(days=1, hours=6))

        assert engagement_score(near, now) == pytest.approx(0.1)
        assert engagement_score(far, now) == 0.0

    def test_hour_bonus_wraps_around_midnight(self, test_data_factory):
        late = datetime(2024, 6, 15, 23, 0, tzinfo=timezone.utc)
        fossil = test_data_factory.create_fossil(
            "a", "claim", now=late, last_revisited_at=datetime(2024, 6, 14, 1, 0, tzinfo=timezone.utc))

        assert engagement_score(fossil, late) == pytest.approx(0.1)


class TestDismissSchedule:

    @pytest.mark.parametrize("count,days", [(0, 1), (1, 2), (3, 5), (7, 34), (100, 34)])
    def test_intervals(self, now, count, days):
        assert next_dismiss_date(count, now) == now.date() + timedelta(days=days)

    def test_custom_intervals(self, now):
        assert next_dismiss_date(5, now, intervals=[7]) == date(2024, 6, 22)


class TestRecordEngagement:

    def test_reinforce(self, test_data_factory, now):
        fossil = test_data_factory.create_fossil("f1", "claim", reinforce_count=1)
        updates = record_engagement(fossil, EngagementAction.REINFORCE, now)

        assert updates == {"last_revisited_at": now, "reinforce_count": 2}
        assert fossil.reinforce_count == 1

    def test_reentry_counts_as_reuse(self, test_data_factory, now):
        fossil = test_data_factory.create_fossil("f1", "claim")
        assert record_engagement(fossil, "reentry", now)["reuse_count"] == 1

    def test_dismiss_snoozes_until_midnight(self, test_data_factory, now):
        fossil = test_data_factory.create_fossil("f1", "claim", dismiss_count=1)
        updates = record_engagement(fossil, "dismiss", now)

        assert updates["dismiss_count"] == 2
        assert updates["dismissed_until"] == datetime(2024, 6, 17, tzinfo=timezone.utc)

    def test_skip(self, test_data_factory, now):
        fossil = test_data_factory.create_fossil("f1", "claim", skip_count=2)
        assert record_engagement(fossil, EngagementAction.SKIP, now)["skip_count"] == 3

    def test_unknown_action_raises(self, test_data_factory, now):
        fossil = test_data_factory.create_fossil("f1", "claim")
        with pytest.raises(ValueError):
            record_engagement(fossil, "archive", now)
