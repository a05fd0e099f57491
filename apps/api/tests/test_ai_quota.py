"""
Quota Guard tests.

The ledger (ai_usage_log) is the only source of truth: the count of today's
rows (UTC) decides whether a call is allowed and whether it carries a
warning.
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.exceptions import DailyLimitError
from models import AIUsageLog
from services.ai_quota import check_daily_quota, get_usage_status, start_of_utc_day
from services.ai_usage import estimate_cost_eur, record_usage

NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)


def _seed_usage(db_session, user, count, at=NOW):
    for _ in range(count):
        db_session.add(AIUsageLog(
            user_id=user.id,
            function_name="generate-program",
            model="test-model",
            input_tokens=1000,
            output_tokens=500,
            estimated_cost_eur=0.0105,
            created_at=at,
        ))
    db_session.commit()


class TestCheckDailyQuota:
    def test_fresh_user_no_warning(self, db_session, test_user):
        status = check_daily_quota(db_session, test_user.id, NOW)
        assert status.used == 0
        assert status.limit == 10
        assert status.warning is None

    def test_below_threshold_no_warning(self, db_session, test_user):
        _seed_usage(db_session, test_user, 7)
        assert check_daily_quota(db_session, test_user.id, NOW).warning is None

    def test_warning_at_eight(self, db_session, test_user):
        _seed_usage(db_session, test_user, 8)
        assert check_daily_quota(db_session, test_user.id, NOW).warning == "9/10 daily AI calls used"

    def test_warning_at_nine(self, db_session, test_user):
        _seed_usage(db_session, test_user, 9)
        assert check_daily_quota(db_session, test_user.id, NOW).warning == "10/10 daily AI calls used"

    def test_limit_reached(self, db_session, test_user):
        _seed_usage(db_session, test_user, 10)

        with pytest.raises(DailyLimitError) as exc_info:
            check_daily_quota(db_session, test_user.id, NOW)

        exc = exc_info.value
        assert exc.status_code == 429
        assert exc.to_body() == {
            "error": "daily_limit",
            "message": "You have reached your daily AI limit (10/10). Try again tomorrow.",
        }

    def test_yesterday_does_not_count(self, db_session, test_user):
        _seed_usage(db_session, test_user, 10, at=start_of_utc_day(NOW) - timedelta(seconds=1))
        status = check_daily_quota(db_session, test_user.id, NOW)
        assert status.used == 0

    def test_other_users_do_not_count(self, db_session, test_user, other_user):
        _seed_usage(db_session, other_user, 10)
        assert check_daily_quota(db_session, test_user.id, NOW).used == 0


class TestUsageLedger:
    def test_cost_estimate(self):
        assert estimate_cost_eur(1_000_000, 0) == pytest.approx(3.0)
        assert estimate_cost_eur(0, 1_000_000) == pytest.approx(15.0)
        assert estimate_cost_eur(2000, 1000) == pytest.approx(0.021)

    def test_record_usage_counts_toward_quota(self, db_session, test_user):
        record_usage(db_session, test_user.id, "analyze-workout", "test-model", 2000, 1000)
        db_session.commit()

        row = db_session.query(AIUsageLog).one()
        assert row.function_name == "analyze-workout"
        assert row.estimated_cost_eur == pytest.approx(0.021)
        assert check_daily_quota(db_session, test_user.id).used == 1

    def test_usage_status(self, db_session, test_user):
        _seed_usage(db_session, test_user, 3)
        status = get_usage_status(db_session, test_user.id, NOW)
        assert status["used"] == 3
        assert status["remaining"] == 7
        assert status["resets_at"] == datetime(2026, 3, 11, tzinfo=timezone.utc)
