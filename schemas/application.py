from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from utils.iban import is_valid_iban, normalize_iban


class Currency(str, Enum):
    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"
    CHF = "CHF"
    JPY = "JPY"


class PaymentMethodType(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"  # not offered to applicants yet


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LoanApplicationCreate(BaseModel):
    """Insert fields for a loan application; camelCase on the wire."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    income: int = Field(..., gt=0)
    identity_file_url: Optional[str] = None
    amount: int = Field(..., gt=0)
    duration: int = Field(..., gt=0)
    currency: Currency
    # Must precede iban: the iban check reads it from already-validated data
    payment_method_type: PaymentMethodType = PaymentMethodType.BANK_TRANSFER
    iban: Optional[str] = Field(None, validate_default=True)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "extra": "ignore",
    }

    @field_validator("identity_file_url")
    @classmethod
    def _blank_url_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("iban")
    @classmethod
    def _check_iban(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        iban = normalize_iban(v) if v else None
        if info.data.get("payment_method_type") == PaymentMethodType.BANK_TRANSFER and not iban:
            raise PydanticCustomError("iban_required", "IBAN is required for bank transfers")
        if iban and not is_valid_iban(iban):
            raise PydanticCustomError("iban_invalid", "Invalid IBAN")
        return iban


class ApplicationForm(LoanApplicationCreate):
    """Wizard-side form: the insert fields plus the terms checkbox gate."""

    terms_accepted: Literal[True] = Field(False, validate_default=True)

    @field_validator("terms_accepted", mode="before")
    @classmethod
    def _terms_must_be_accepted(cls, v: Any) -> Any:
        if v is not True:
            raise PydanticCustomError("terms_required", "You must accept the terms")
        return v


class LoanApplicationResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    income: int
    identity_file_url: Optional[str] = None
    amount: int
    duration: int
    currency: Currency
    iban: Optional[str] = None
    payment_method_type: PaymentMethodType
    status: ApplicationStatus
    created_at: datetime

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands timestamps back without tzinfo
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class UploadResponse(BaseModel):
    url: str
    filename: str
