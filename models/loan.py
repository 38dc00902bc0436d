from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from database import Base
from models.types import Money

LOAN_ACTIVE = "ACTIVE"
LOAN_PAID_OFF = "PAID_OFF"

PAYMENT_EMI = "EMI"
PAYMENT_LUMP_SUM = "LUMP_SUM"
PAYMENT_TYPES = (PAYMENT_EMI, PAYMENT_LUMP_SUM)


class Loan(Base):
    __tablename__ = "loans"

    id = Column(String(64), primary_key=True, index=True)
    # Plain column: loans may be opened for customer ids not registered in customers
    customer_id = Column(String(64), nullable=False, index=True)
    principal = Column(Money, nullable=False)
    interest_rate = Column(Money, nullable=False)
    period_years = Column(Integer, nullable=False)
    # Fixed at creation
    total_payable = Column(Money, nullable=False)
    monthly_installment = Column(Money, nullable=False)
    # Mutated by payments only
    outstanding_balance = Column(Money, nullable=False)
    status = Column(String(16), nullable=False, default=LOAN_ACTIVE, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    payments = relationship("Payment", back_populates="loan", order_by="[Payment.paid_at, Payment.sequence_no]")


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (UniqueConstraint("loan_id", "sequence_no", name="uq_payments_loan_sequence"),)

    id = Column(String(64), primary_key=True, index=True)
    loan_id = Column(String(64), ForeignKey("loans.id"), nullable=False, index=True)
    # 1, 2, 3... per loan; orders payments that share a timestamp
    sequence_no = Column(Integer, nullable=False)
    amount = Column(Money, nullable=False)
    payment_type = Column(String(16), nullable=False)
    paid_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    loan = relationship("Loan", back_populates="payments")
