from __future__ import annotations

import uuid
from typing import Any

from exceptions import LoanPaidOffError, NotFoundError, ValidationError
from log_config import get_logger
from models import LOAN_PAID_OFF, PAYMENT_TYPES, Customer, Loan, Payment
from schemas.amortization import AccountOverview, LedgerView, LoanTerms, PaymentOutcome
from services.amortization import (
    apply_payment,
    build_account_overview,
    build_ledger_view,
    compute_loan_terms,
    exact_installment,
    status_for_balance,
    to_decimal,
)
from services.loan_store import LoanStore

logger = get_logger(__name__)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def normalize_payment_type(payment_type: Any) -> str:
    if not isinstance(payment_type, str) or payment_type.upper() not in PAYMENT_TYPES:
        raise ValidationError("Invalid payment type. Must be EMI or LUMP_SUM.")
    return payment_type.upper()


async def lend(
    store: LoanStore,
    customer_id: str,
    loan_amount: Any,
    loan_period_years: Any,
    interest_rate_yearly: Any,
) -> tuple[Loan, LoanTerms]:
    """LEND: validate terms, compute total payable and EMI, persist the loan."""
    if not customer_id:
        raise ValidationError("Missing required loan parameters.")
    terms = compute_loan_terms(loan_amount, loan_period_years, interest_rate_yearly)

    loan = await store.create_loan(
        loan_id=_new_id("loan"),
        customer_id=customer_id,
        principal=to_decimal(loan_amount, "loan_amount"),
        total_payable=terms.total_payable,
        interest_rate=to_decimal(interest_rate_yearly, "interest_rate_yearly"),
        period_years=int(to_decimal(loan_period_years, "loan_period_years")),
        monthly_installment=terms.monthly_installment,
    )
    logger.info(
        "Created loan %s for customer %s: total payable %s, EMI %s",
        loan.id,
        customer_id,
        terms.total_payable,
        terms.monthly_installment,
    )
    return loan, terms


async def make_payment(
    store: LoanStore,
    loan_id: str,
    amount: Any,
    payment_type: Any,
) -> tuple[Payment, PaymentOutcome]:
    """
    PAYMENT: record one payment and decrement the loan balance.
    Both writes happen inside store.atomic(), so a failed balance update also
    discards the payment row.
    """
    payment_type = normalize_payment_type(payment_type)
    amount = to_decimal(amount, "amount")
    if amount <= 0:
        raise ValidationError("Payment amount must be a positive number.")

    async with store.atomic():
        loan = await store.get_loan(loan_id, for_update=True)
        if loan is None:
            raise NotFoundError("Loan not found.")
        if loan.status == LOAN_PAID_OFF or loan.outstanding_balance <= 0:
            raise LoanPaidOffError("Loan is already paid off.")

        outcome = apply_payment(
            loan.outstanding_balance,
            exact_installment(loan.total_payable, loan.period_years),
            amount,
        )
        payment = await store.record_payment(
            payment_id=_new_id("pay"),
            loan_id=loan_id,
            amount=amount,
            payment_type=payment_type,
        )
        await store.update_loan_balance(loan_id, outcome.new_balance, status_for_balance(outcome.new_balance))

    logger.info(
        "Recorded %s payment %s of %s on loan %s: balance %s, %d EMIs left",
        payment_type,
        payment.id,
        amount,
        loan_id,
        outcome.new_balance,
        outcome.installments_remaining,
    )
    if outcome.is_paid_off:
        logger.info("Loan %s paid off", loan_id)
    return payment, outcome


async def get_ledger(store: LoanStore, loan_id: str) -> LedgerView:
    loan = await store.get_loan(loan_id)
    if loan is None:
        raise NotFoundError("Loan not found.")
    payments = await store.list_payments_for_loan(loan_id)
    return build_ledger_view(loan, payments)


async def get_account_overview(store: LoanStore, customer_id: str) -> AccountOverview:
    loans = await store.list_loans_for_customer(customer_id)
    payments_by_loan = {loan.id: await store.list_payments_for_loan(loan.id) for loan in loans}
    return build_account_overview(customer_id, loans, payments_by_loan)


async def register_customer(store: LoanStore, name: str, customer_id: str | None = None) -> Customer:
    if not name or not name.strip():
        raise ValidationError("Customer name is required.")
    customer_id = customer_id or _new_id("cust")
    if await store.get_customer(customer_id) is not None:
        raise ValidationError("Customer id already in use.")
    customer = await store.create_customer(customer_id, name.strip())
    logger.info("Registered customer %s", customer_id)
    return customer


async def get_customer(store: LoanStore, customer_id: str) -> Customer:
    customer = await store.get_customer(customer_id)
    if customer is None:
        raise NotFoundError("Customer not found.")
    return customer
