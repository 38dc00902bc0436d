from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from api.deps import get_store
from config import settings
from schemas.amortization import LedgerView
from schemas.loan import LoanCreate, PaymentCreate
from services import lending
from services.loan_store import LoanStore
from utils.money import money_out

router = APIRouter(prefix=f"{settings.api_prefix}/loans", tags=["loans"])


def _ledger_to_response(view: LedgerView) -> dict[str, Any]:
    return {
        "loan_id": view.loan_id,
        "customer_id": view.customer_id,
        "principal": money_out(view.principal),
        "total_amount": money_out(view.total_amount),
        "monthly_emi": money_out(view.monthly_emi),
        "amount_paid": money_out(view.amount_paid),
        "balance_amount": money_out(view.balance_amount),
        "emis_left": view.emis_left,
        "status": view.status,
        "transactions": [
            {
                "transaction_id": t.transaction_id,
                "date": t.date.isoformat() if t.date else None,
                "amount": money_out(t.amount),
                "type": t.type,
            }
            for t in view.transactions
        ],
    }


@router.post("", response_model=dict, status_code=201)
async def create_loan(body: LoanCreate, store: LoanStore = Depends(get_store)):
    loan, terms = await lending.lend(
        store,
        customer_id=body.customer_id,
        loan_amount=body.loan_amount,
        loan_period_years=body.loan_period_years,
        interest_rate_yearly=body.interest_rate_yearly,
    )
    return {
        "loan_id": loan.id,
        "customer_id": loan.customer_id,
        "total_amount_payable": money_out(terms.total_payable),
        "monthly_emi": money_out(terms.monthly_installment),
    }


@router.post("/{loan_id}/payments", response_model=dict)
async def record_payment(loan_id: str, body: PaymentCreate, store: LoanStore = Depends(get_store)):
    payment, outcome = await lending.make_payment(store, loan_id, body.amount, body.payment_type)
    return {
        "payment_id": payment.id,
        "loan_id": loan_id,
        "message": "Payment recorded successfully.",
        "remaining_balance": money_out(outcome.new_balance),
        "emis_left": outcome.installments_remaining,
    }


@router.get("/{loan_id}/ledger", response_model=dict)
async def get_ledger(loan_id: str, store: LoanStore = Depends(get_store)):
    view = await lending.get_ledger(store, loan_id)
    return _ledger_to_response(view)
