"""
Simple-interest amortization and payment application.
Pure functions over Decimal: no I/O, no rounding. Rounding to cents happens only
when values leave the API (see utils.money).
"""
from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any, Iterable, Iterator, Mapping, Sequence

from exceptions import NotFoundError, ValidationError
from models.loan import LOAN_ACTIVE, LOAN_PAID_OFF
from schemas.amortization import (
    AccountOverview,
    LedgerView,
    LoanSummary,
    LoanTerms,
    PaymentOutcome,
    TransactionEntry,
)

MONTHS_PER_YEAR = 12
HUNDRED = Decimal(100)
ZERO = Decimal(0)

def to_decimal(value: Any, field: str) -> Decimal:
    """Coerce int/str/float/Decimal to Decimal; floats go through str to keep the written digits."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, float):
        value = repr(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"{field} must be a number") from e
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return result


def compute_loan_terms(principal: Any, period_years: Any, rate_percent: Any) -> LoanTerms:
    """
    total_interest = P * N * R / 100, total_payable = P + total_interest,
    monthly_installment = total_payable / (N * 12).
    """
    principal = to_decimal(principal, "loan_amount")
    rate = to_decimal(rate_percent, "interest_rate_yearly")
    years = to_decimal(period_years, "loan_period_years")

    if principal <= 0:
        raise ValidationError("Loan amount must be a positive number.")
    if years <= 0 or years != years.to_integral_value():
        raise ValidationError("Loan period must be a positive whole number of years.")
    if rate < 0:
        raise ValidationError("Interest rate must not be negative.")

    total_interest = principal * years * (rate / HUNDRED)
    total_payable = principal + total_interest
    monthly_installment = total_payable / (years * MONTHS_PER_YEAR)
    return LoanTerms(
        total_interest=total_interest,
        total_payable=total_payable,
        monthly_installment=monthly_installment,
    )


def exact_installment(total_payable: Decimal, period_years: int) -> Fraction:
    """The monthly installment as an exact fraction; the stored Decimal is rounded to 28 digits."""
    return Fraction(total_payable) / (int(period_years) * MONTHS_PER_YEAR)


def installments_left(balance: Decimal, monthly_installment: Decimal | Fraction) -> int:
    """Whole installments needed to clear balance; any positive remainder counts as one."""
    if balance <= 0:
        return 0
    return math.ceil(Fraction(balance) / Fraction(monthly_installment))


def apply_payment(
    current_balance: Decimal,
    monthly_installment: Decimal | Fraction,
    amount: Any,
) -> PaymentOutcome:
    """
    Subtract a payment from the balance. EMI and LUMP_SUM share this arithmetic;
    overpayment is absorbed and the negative balance is kept as-is.
    """
    amount = to_decimal(amount, "amount")
    if amount <= 0:
        raise ValidationError("Payment amount must be a positive number.")

    new_balance = current_balance - amount
    return PaymentOutcome(
        new_balance=new_balance,
        installments_remaining=installments_left(new_balance, monthly_installment),
        is_paid_off=new_balance <= 0,
    )


def status_for_balance(balance: Decimal) -> str:
    return LOAN_PAID_OFF if balance <= 0 else LOAN_ACTIVE


def _transactions(payments: Sequence[Any]) -> Iterator[TransactionEntry]:
    for p in sorted(payments, key=lambda p: p.paid_at):
        yield TransactionEntry(
            transaction_id=p.id,
            date=p.paid_at,
            amount=p.amount,
            type=p.payment_type,
        )


def _amount_paid(payments: Iterable[Any]) -> Decimal:
    return sum((p.amount for p in payments), ZERO)


def build_ledger_view(loan: Any, ordered_payments: Sequence[Any]) -> LedgerView:
    """
    Snapshot of one loan plus its payment history.
    total_amount is rebuilt from principal, rate and period rather than read from
    the (decremented) balance; transactions is a one-shot iterator.
    """
    terms = compute_loan_terms(loan.principal, loan.period_years, loan.interest_rate)
    balance = loan.outstanding_balance
    return LedgerView(
        loan_id=loan.id,
        customer_id=loan.customer_id,
        principal=loan.principal,
        total_amount=terms.total_payable,
        monthly_emi=loan.monthly_installment,
        amount_paid=_amount_paid(ordered_payments),
        balance_amount=balance,
        emis_left=installments_left(balance, exact_installment(loan.total_payable, loan.period_years)),
        status=loan.status,
        transactions=_transactions(ordered_payments),
    )


def summarize_loan(loan: Any, payments: Sequence[Any]) -> LoanSummary:
    terms = compute_loan_terms(loan.principal, loan.period_years, loan.interest_rate)
    balance = loan.outstanding_balance
    return LoanSummary(
        loan_id=loan.id,
        principal=loan.principal,
        total_amount=terms.total_payable,
        total_interest=terms.total_interest,
        emi_amount=loan.monthly_installment,
        amount_paid=_amount_paid(payments),
        balance_amount=balance,
        emis_left=installments_left(balance, exact_installment(loan.total_payable, loan.period_years)),
        status=loan.status,
    )


def build_account_overview(
    customer_id: str,
    loans: Sequence[Any],
    payments_by_loan: Mapping[str, Sequence[Any]],
) -> AccountOverview:
    """
    Per-loan summaries for one customer. A customer with no loans is reported as
    not found rather than as an empty overview.
    """
    if not loans:
        raise NotFoundError("No loans found for this customer_id.")
    return AccountOverview(
        customer_id=customer_id,
        total_loans=len(loans),
        loans=[summarize_loan(loan, payments_by_loan.get(loan.id, ())) for loan in loans],
    )
