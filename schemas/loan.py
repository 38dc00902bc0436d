from decimal import Decimal

from pydantic import BaseModel, Field


class LoanCreate(BaseModel):
    """LEND request body."""
    customer_id: str = Field(..., min_length=1)
    loan_amount: Decimal
    loan_period_years: int
    interest_rate_yearly: Decimal


class PaymentCreate(BaseModel):
    """PAYMENT request body; payment_type is EMI or LUMP_SUM, any case."""
    amount: Decimal
    payment_type: str
