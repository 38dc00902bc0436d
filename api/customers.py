from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from api.deps import get_store
from config import settings
from models import Customer
from schemas.customer import CustomerCreate
from services import lending
from services.loan_store import LoanStore
from utils.money import money_out

router = APIRouter(prefix=f"{settings.api_prefix}/customers", tags=["customers"])


def _customer_to_response(c: Customer) -> dict[str, Any]:
    return {
        "customer_id": c.id,
        "name": c.name,
        "created_at": c.created_at.isoformat() if c.created_at else None,
    }


@router.post("", response_model=dict, status_code=201)
async def create_customer(body: CustomerCreate, store: LoanStore = Depends(get_store)):
    customer = await lending.register_customer(store, body.name, body.customer_id)
    return _customer_to_response(customer)


@router.get("/{customer_id}", response_model=dict)
async def get_customer(customer_id: str, store: LoanStore = Depends(get_store)):
    customer = await lending.get_customer(store, customer_id)
    return _customer_to_response(customer)


@router.get("/{customer_id}/overview", response_model=dict)
async def get_overview(customer_id: str, store: LoanStore = Depends(get_store)):
    overview = await lending.get_account_overview(store, customer_id)
    return {
        "customer_id": overview.customer_id,
        "total_loans": overview.total_loans,
        "loans": [
            {
                "loan_id": s.loan_id,
                "principal": money_out(s.principal),
                "total_amount": money_out(s.total_amount),
                "total_interest": money_out(s.total_interest),
                "emi_amount": money_out(s.emi_amount),
                "amount_paid": money_out(s.amount_paid),
                "balance_amount": money_out(s.balance_amount),
                "emis_left": s.emis_left,
                "status": s.status,
            }
            for s in overview.loans
        ],
    }
