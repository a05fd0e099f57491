"""
Quota Guard for AI calls.

Each user gets AI_DAILY_CALL_LIMIT accepted AI calls per UTC calendar day,
counted from the usage ledger (ai_usage_log). The check is advisory: it
reads the ledger and reserves nothing, so two concurrent requests at
limit-1 may both succeed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import DailyLimitError
from models import AIUsageLog

logger = logging.getLogger(__name__)


@dataclass
class QuotaStatus:
    used: int
    limit: int
    warning: Optional[str] = None


def start_of_utc_day(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def count_calls_today(db: Session, user_id: UUID, now: Optional[datetime] = None) -> int:
    day_start = start_of_utc_day(now)
    return (
        db.query(func.count(AIUsageLog.id))
        .filter(
            AIUsageLog.user_id == user_id,
            AIUsageLog.created_at >= day_start,
        )
        .scalar()
        or 0
    )


def check_daily_quota(db: Session, user_id: UUID, now: Optional[datetime] = None) -> QuotaStatus:
    """
    Gate an AI call on today's usage.

    Raises DailyLimitError once the limit is reached. Otherwise returns the
    current count, with a warning string when the count has reached the
    warning threshold. The warning counts the call about to be made:
    8 used -> "9/10 daily AI calls used".
    """
    limit = settings.AI_DAILY_CALL_LIMIT
    used = count_calls_today(db, user_id, now)

    if used >= limit:
        logger.info(
            f"Daily AI limit reached for user {user_id}",
            extra={"extra_fields": {"user_id": str(user_id), "used": used, "limit": limit}},
        )
        raise DailyLimitError(limit)

    warning = None
    if used >= settings.AI_WARNING_THRESHOLD:
        warning = f"{used + 1}/{limit} daily AI calls used"

    return QuotaStatus(used=used, limit=limit, warning=warning)


def get_usage_status(db: Session, user_id: UUID, now: Optional[datetime] = None) -> dict:
    """Today's usage for display: used, limit, remaining, resets_at."""
    limit = settings.AI_DAILY_CALL_LIMIT
    used = count_calls_today(db, user_id, now)
    return {
        "used": used,
        "limit": limit,
        "remaining": max(0, limit - used),
        "resets_at": start_of_utc_day(now) + timedelta(days=1),
    }
