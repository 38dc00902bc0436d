"""
Record store for customers, loans and payments.

LoanStore is the narrow interface the lending service talks to. SqlLoanStore
works on the request's AsyncSession (see database.get_db); InMemoryLoanStore
keeps plain model instances in dicts for tests and local experiments.
"""
from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncIterator, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import NotFoundError, PersistenceError
from log_config import get_logger
from models import LOAN_ACTIVE, Customer, Loan, Payment

logger = get_logger(__name__)


class LoanStore(ABC):
    @abstractmethod
    async def create_loan(
        self,
        loan_id: str,
        customer_id: str,
        principal: Decimal,
        total_payable: Decimal,
        interest_rate: Decimal,
        period_years: int,
        monthly_installment: Decimal,
    ) -> Loan: ...

    @abstractmethod
    async def get_loan(self, loan_id: str, for_update: bool = False) -> Optional[Loan]: ...

    @abstractmethod
    async def update_loan_balance(self, loan_id: str, new_balance: Decimal, new_status: str) -> Loan: ...

    @abstractmethod
    async def list_loans_for_customer(self, customer_id: str) -> Sequence[Loan]: ...

    @abstractmethod
    async def record_payment(self, payment_id: str, loan_id: str, amount: Decimal, payment_type: str) -> Payment: ...

    @abstractmethod
    async def list_payments_for_loan(self, loan_id: str) -> Sequence[Payment]:
        """Payments for one loan, oldest first."""

    @abstractmethod
    async def create_customer(self, customer_id: str, name: str) -> Customer: ...

    @abstractmethod
    async def get_customer(self, customer_id: str) -> Optional[Customer]: ...

    @abstractmethod
    def atomic(self):
        """Async context manager: every write inside commits together or not at all."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SqlLoanStore(LoanStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _flush(self, action: str) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Store write failed while %s: %s", action, e)
            raise PersistenceError(f"Failed to {action}.") from e

    async def _scalars(self, stmt, action: str):
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Store read failed while %s: %s", action, e)
            raise PersistenceError(f"Failed to {action}.") from e
        return result.scalars()

    async def create_loan(
        self,
        loan_id,
        customer_id,
        principal,
        total_payable,
        interest_rate,
        period_years,
        monthly_installment,
    ):
        loan = Loan(
            id=loan_id,
            customer_id=customer_id,
            principal=principal,
            interest_rate=interest_rate,
            period_years=period_years,
            total_payable=total_payable,
            monthly_installment=monthly_installment,
            outstanding_balance=total_payable,
            status=LOAN_ACTIVE,
            created_at=_now(),
        )
        self.session.add(loan)
        await self._flush("create loan")
        return loan

    async def get_loan(self, loan_id, for_update=False):
        stmt = select(Loan).where(Loan.id == loan_id)
        if for_update:
            stmt = stmt.with_for_update()
        scalars = await self._scalars(stmt, "retrieve loan details")
        return scalars.one_or_none()

    async def update_loan_balance(self, loan_id, new_balance, new_status):
        loan = await self.get_loan(loan_id)
        if loan is None:
            raise NotFoundError("Loan not found.")
        loan.outstanding_balance = new_balance
        loan.status = new_status
        await self._flush("update loan after payment")
        return loan

    async def list_loans_for_customer(self, customer_id):
        stmt = select(Loan).where(Loan.customer_id == customer_id).order_by(Loan.created_at)
        scalars = await self._scalars(stmt, "retrieve customer loans")
        return scalars.all()

    async def record_payment(self, payment_id, loan_id, amount, payment_type):
        stmt = select(func.coalesce(func.max(Payment.sequence_no), 0)).where(Payment.loan_id == loan_id)
        last_sequence = (await self._scalars(stmt, "record payment")).one()
        payment = Payment(
            id=payment_id,
            loan_id=loan_id,
            sequence_no=last_sequence + 1,
            amount=amount,
            payment_type=payment_type,
            paid_at=_now(),
        )
        self.session.add(payment)
        await self._flush("record payment")
        return payment

    async def list_payments_for_loan(self, loan_id):
        stmt = (
            select(Payment)
            .where(Payment.loan_id == loan_id)
            .order_by(Payment.paid_at.asc(), Payment.sequence_no.asc())
        )
        scalars = await self._scalars(stmt, "retrieve transaction history")
        return scalars.all()

    async def create_customer(self, customer_id, name):
        customer = Customer(id=customer_id, name=name, created_at=_now())
        self.session.add(customer)
        await self._flush("create customer")
        return customer

    async def get_customer(self, customer_id):
        scalars = await self._scalars(select(Customer).where(Customer.id == customer_id), "retrieve customer")
        return scalars.one_or_none()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        # The request session holds a single transaction (database.get_db);
        # rolling it back here discards every write made inside the block.
        try:
            yield
        except Exception:
            await self.session.rollback()
            raise


class InMemoryLoanStore(LoanStore):
    def __init__(self):
        self.customers: dict[str, Customer] = {}
        self.loans: dict[str, Loan] = {}
        self.payments: list[Payment] = []

    async def create_loan(
        self,
        loan_id,
        customer_id,
        principal,
        total_payable,
        interest_rate,
        period_years,
        monthly_installment,
    ):
        if loan_id in self.loans:
            raise PersistenceError("Failed to create loan.")
        loan = Loan(
            id=loan_id,
            customer_id=customer_id,
            principal=principal,
            interest_rate=interest_rate,
            period_years=period_years,
            total_payable=total_payable,
            monthly_installment=monthly_installment,
            outstanding_balance=total_payable,
            status=LOAN_ACTIVE,
            created_at=_now(),
        )
        self.loans[loan_id] = loan
        return loan

    async def get_loan(self, loan_id, for_update=False):
        return self.loans.get(loan_id)

    async def update_loan_balance(self, loan_id, new_balance, new_status):
        loan = self.loans.get(loan_id)
        if loan is None:
            raise NotFoundError("Loan not found.")
        loan.outstanding_balance = new_balance
        loan.status = new_status
        return loan

    async def list_loans_for_customer(self, customer_id):
        return [loan for loan in self.loans.values() if loan.customer_id == customer_id]

    async def record_payment(self, payment_id, loan_id, amount, payment_type):
        sequence_no = sum(1 for p in self.payments if p.loan_id == loan_id) + 1
        payment = Payment(
            id=payment_id,
            loan_id=loan_id,
            sequence_no=sequence_no,
            amount=amount,
            payment_type=payment_type,
            paid_at=_now(),
        )
        self.payments.append(payment)
        return payment

    async def list_payments_for_loan(self, loan_id):
        return sorted(
            (p for p in self.payments if p.loan_id == loan_id),
            key=lambda p: (p.paid_at, p.sequence_no),
        )

    async def create_customer(self, customer_id, name):
        if customer_id in self.customers:
            raise PersistenceError("Failed to create customer.")
        customer = Customer(id=customer_id, name=name, created_at=_now())
        self.customers[customer_id] = customer
        return customer

    async def get_customer(self, customer_id):
        return self.customers.get(customer_id)

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        balances = {
            loan_id: (loan.outstanding_balance, loan.status) for loan_id, loan in self.loans.items()
        }
        payments = copy.copy(self.payments)
        try:
            yield
        except Exception:
            for loan_id, (balance, status) in balances.items():
                self.loans[loan_id].outstanding_balance = balance
                self.loans[loan_id].status = status
            self.payments = payments
            raise
