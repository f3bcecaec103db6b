from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import InternalError, ValidationError
from models import LoanApplication
from schemas.application import ApplicationStatus, LoanApplicationCreate

logger = logging.getLogger(__name__)


def validate_payload(payload: Any) -> LoanApplicationCreate:
    """Validate an inbound body; raise ValidationError naming the first bad field."""
    try:
        return LoanApplicationCreate.model_validate(payload)
    except PydanticValidationError as e:
        error = ValidationError.from_errors(e.errors())
        logger.warning("Rejected loan application: %s (%s)", error.message, error.field)
        raise error from e


async def submit_application(session: AsyncSession, payload: Any) -> LoanApplication:
    """
    Validate and insert one loan application. Nothing is written unless the
    whole payload validates; status always starts as pending.
    """
    data = validate_payload(payload)
    app = LoanApplication(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        income=data.income,
        identity_file_url=data.identity_file_url,
        amount=data.amount,
        duration=data.duration,
        currency=data.currency.value,
        iban=data.iban,
        payment_method_type=data.payment_method_type.value,
        status=ApplicationStatus.PENDING.value,
        created_at=datetime.now(timezone.utc),
    )
    session.add(app)
    try:
        await session.flush()
    except SQLAlchemyError as e:
        logger.exception("Failed to persist loan application")
        raise InternalError() from e
    logger.info("Created loan application %s (%s %s over %s months)", app.id, app.amount, app.currency, app.duration)
    return app


async def get_application(session: AsyncSession, application_id: int) -> Optional[LoanApplication]:
    result = await session.execute(select(LoanApplication).where(LoanApplication.id == application_id))
    return result.scalar_one_or_none()
