"""Value types produced by the amortization engine. Amounts keep full Decimal precision."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, Field


class LoanTerms(BaseModel):
    total_interest: Decimal
    total_payable: Decimal
    monthly_installment: Decimal


class PaymentOutcome(BaseModel):
    new_balance: Decimal
    installments_remaining: int
    is_paid_off: bool


class TransactionEntry(BaseModel):
    transaction_id: str
    date: Optional[datetime] = None
    amount: Decimal
    type: str


class LedgerView(BaseModel):
    loan_id: str
    customer_id: str
    principal: Decimal
    total_amount: Decimal
    monthly_emi: Decimal
    amount_paid: Decimal
    balance_amount: Decimal
    emis_left: int
    status: str
    # Validated lazily: a one-shot iterator over the recorded payments
    transactions: Iterable[TransactionEntry]


class LoanSummary(BaseModel):
    loan_id: str
    principal: Decimal
    total_amount: Decimal
    total_interest: Decimal
    emi_amount: Decimal
    amount_paid: Decimal
    balance_amount: Decimal
    emis_left: int
    status: str


class AccountOverview(BaseModel):
    customer_id: str
    total_loans: int
    loans: list[LoanSummary] = Field(default_factory=list)
