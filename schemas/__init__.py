from schemas.application import (
    ApplicationForm,
    ApplicationStatus,
    Currency,
    LoanApplicationCreate,
    LoanApplicationResponse,
    PaymentMethodType,
    UploadResponse,
)
from schemas.calculator import PaymentQuote

__all__ = [
    "ApplicationForm",
    "ApplicationStatus",
    "Currency",
    "LoanApplicationCreate",
    "LoanApplicationResponse",
    "PaymentMethodType",
    "UploadResponse",
    "PaymentQuote",
]
