from pydantic import BaseModel


class PaymentQuote(BaseModel):
    monthly_payment: float
    total_payback: float
