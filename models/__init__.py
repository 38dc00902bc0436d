from models.customer import Customer
from models.loan import (
    LOAN_ACTIVE,
    LOAN_PAID_OFF,
    PAYMENT_EMI,
    PAYMENT_LUMP_SUM,
    PAYMENT_TYPES,
    Loan,
    Payment,
)

__all__ = [
    "Customer",
    "Loan",
    "Payment",
    "LOAN_ACTIVE",
    "LOAN_PAID_OFF",
    "PAYMENT_EMI",
    "PAYMENT_LUMP_SUM",
    "PAYMENT_TYPES",
]
