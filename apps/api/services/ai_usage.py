"""
Usage ledger writes for accepted AI calls.

A row is added only after the model output has been parsed and validated,
in the same transaction as the persisted result. Failed calls leave no row.
"""
import logging
from uuid import UUID

from sqlalchemy.orm import Session

from core.config import settings
from models import AIUsageLog

logger = logging.getLogger(__name__)


def estimate_cost_eur(input_tokens: int, output_tokens: int) -> float:
    return (
        input_tokens * settings.AI_COST_INPUT_PER_MTOK
        + output_tokens * settings.AI_COST_OUTPUT_PER_MTOK
    ) / 1_000_000


def record_usage(
    db: Session,
    user_id: UUID,
    function_name: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
) -> AIUsageLog:
    row = AIUsageLog(
        user_id=user_id,
        function_name=function_name,
        model=model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        estimated_cost_eur=estimate_cost_eur(input_tokens, output_tokens),
    )
    db.add(row)
    logger.info(
        f"AI usage recorded: {function_name}",
        extra={"extra_fields": {
            "user_id": str(user_id),
            "function_name": function_name,
            "model": model,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "estimated_cost_eur": row.estimated_cost_eur,
        }},
    )
    return row
