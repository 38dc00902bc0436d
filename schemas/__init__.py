from schemas.amortization import (
    AccountOverview,
    LedgerView,
    LoanSummary,
    LoanTerms,
    PaymentOutcome,
    TransactionEntry,
)
from schemas.customer import CustomerCreate
from schemas.loan import LoanCreate, PaymentCreate

__all__ = [
    "AccountOverview",
    "CustomerCreate",
    "LedgerView",
    "LoanCreate",
    "LoanSummary",
    "LoanTerms",
    "PaymentCreate",
    "PaymentOutcome",
    "TransactionEntry",
]
