from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import LoanApplication
from schemas.application import LoanApplicationResponse
from services.submission import get_application, submit_application

router = APIRouter(prefix="/api/loans", tags=["loans"])


def _app_to_response(app: LoanApplication) -> dict[str, Any]:
    """Serialize a stored application with camelCase keys for the frontend."""
    return LoanApplicationResponse.model_validate(app).model_dump(by_alias=True, mode="json")


@router.post("", status_code=201)
async def create_loan_application(payload: Any = Body(...), db: AsyncSession = Depends(get_db)):
    app = await submit_application(db, payload)
    return _app_to_response(app)


@router.get("/{application_id}")
async def read_loan_application(application_id: int, db: AsyncSession = Depends(get_db)):
    app = await get_application(db, application_id)
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")
    return _app_to_response(app)
