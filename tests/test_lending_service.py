"""
Tests for the lending use cases (lend, payment, ledger, overview) over the in-memory store.
Run from project root: python -m pytest tests/test_lending_service.py -v
"""
import unittest
from decimal import Decimal

from exceptions import LoanPaidOffError, NotFoundError, PersistenceError, ValidationError
from models import LOAN_ACTIVE, LOAN_PAID_OFF
from services import lending
from services.loan_store import InMemoryLoanStore


class FailingBalanceStore(InMemoryLoanStore):
    async def update_loan_balance(self, loan_id, new_balance, new_status):
        raise PersistenceError("Failed to update loan after payment.")


class TestLend(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = InMemoryLoanStore()

    async def test_lend_persists_terms(self):
        loan, terms = await lending.lend(self.store, "cust_123", 100000, 2, 10)
        self.assertTrue(loan.id.startswith("loan-"))
        self.assertEqual(terms.total_payable, Decimal("120000"))
        self.assertEqual(terms.monthly_installment, Decimal("5000"))
        stored = await self.store.get_loan(loan.id)
        self.assertEqual(stored.outstanding_balance, Decimal("120000"))
        self.assertEqual(stored.period_years, 2)
        self.assertEqual(stored.status, LOAN_ACTIVE)

    async def test_lend_validates_before_store(self):
        with self.assertRaises(ValidationError):
            await lending.lend(self.store, "", 100000, 2, 10)
        with self.assertRaises(ValidationError):
            await lending.lend(self.store, "cust_123", -1, 2, 10)
        self.assertEqual(self.store.loans, {})


class TestPayments(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = InMemoryLoanStore()
        loan, _ = await lending.lend(self.store, "cust_123", 100000, 2, 10)
        self.loan_id = loan.id

    async def test_two_lump_sums_pay_off_loan(self):
        _, outcome = await lending.make_payment(self.store, self.loan_id, 60000, "LUMP_SUM")
        self.assertEqual(outcome.new_balance, Decimal("60000"))
        self.assertEqual(outcome.installments_remaining, 12)
        self.assertEqual((await self.store.get_loan(self.loan_id)).status, LOAN_ACTIVE)

        _, outcome = await lending.make_payment(self.store, self.loan_id, 60000, "LUMP_SUM")
        self.assertEqual(outcome.new_balance, 0)
        self.assertEqual(outcome.installments_remaining, 0)
        self.assertTrue(outcome.is_paid_off)
        self.assertEqual((await self.store.get_loan(self.loan_id)).status, LOAN_PAID_OFF)

    async def test_tiny_shortfall_keeps_an_extra_installment(self):
        _, outcome = await lending.make_payment(self.store, self.loan_id, "4999.9999999", "EMI")
        self.assertEqual(outcome.installments_remaining, 24)
        ledger = await lending.get_ledger(self.store, self.loan_id)
        self.assertEqual(ledger.emis_left, 24)
        _, outcome = await lending.make_payment(self.store, self.loan_id, "55000.0000001", "LUMP_SUM")
        self.assertEqual(outcome.new_balance, Decimal("60000"))
        self.assertEqual(outcome.installments_remaining, 12)

    async def test_payment_type_is_case_insensitive(self):
        payment, _ = await lending.make_payment(self.store, self.loan_id, 5000, "emi")
        self.assertEqual(payment.payment_type, "EMI")

    async def test_invalid_payment_inputs(self):
        for amount, payment_type in [(0, "EMI"), (-5, "EMI"), (100, "CHEQUE"), (100, None)]:
            with self.assertRaises(ValidationError):
                await lending.make_payment(self.store, self.loan_id, amount, payment_type)
        self.assertEqual(self.store.payments, [])

    async def test_unknown_loan(self):
        with self.assertRaises(NotFoundError):
            await lending.make_payment(self.store, "loan-missing", 100, "EMI")

    async def test_overpayment_then_paid_off_rejects(self):
        _, outcome = await lending.make_payment(self.store, self.loan_id, 120001, "LUMP_SUM")
        self.assertTrue(outcome.is_paid_off)
        self.assertEqual(outcome.new_balance, Decimal("-1"))
        with self.assertRaises(LoanPaidOffError):
            await lending.make_payment(self.store, self.loan_id, 1, "EMI")
        self.assertEqual(len(self.store.payments), 1)

    async def test_balance_is_conserved(self):
        amounts = [Decimal("5000"), Decimal("0.01"), Decimal("33333.33"), Decimal("1234.56")]
        for amount in amounts:
            await lending.make_payment(self.store, self.loan_id, amount, "EMI")
        loan = await self.store.get_loan(self.loan_id)
        self.assertEqual(sum(amounts) + loan.outstanding_balance, loan.total_payable)

    async def test_payments_summing_to_total_close_loan(self):
        for _ in range(24):
            await lending.make_payment(self.store, self.loan_id, 5000, "EMI")
        loan = await self.store.get_loan(self.loan_id)
        self.assertEqual(loan.outstanding_balance, 0)
        self.assertEqual(loan.status, LOAN_PAID_OFF)
        ledger = await lending.get_ledger(self.store, self.loan_id)
        self.assertEqual(ledger.emis_left, 0)
        self.assertEqual(ledger.amount_paid, Decimal("120000"))

    async def test_failed_balance_update_discards_payment(self):
        store = FailingBalanceStore()
        loan, _ = await lending.lend(store, "cust_123", 1200, 1, 0)
        with self.assertRaises(PersistenceError):
            await lending.make_payment(store, loan.id, 100, "EMI")
        self.assertEqual(store.payments, [])
        self.assertEqual((await store.get_loan(loan.id)).outstanding_balance, Decimal("1200"))


class TestReads(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = InMemoryLoanStore()

    async def test_ledger_unknown_loan(self):
        with self.assertRaises(NotFoundError):
            await lending.get_ledger(self.store, "loan-missing")

    async def test_overview_counts_loans(self):
        first, _ = await lending.lend(self.store, "cust_123", 100000, 2, 10)
        await lending.lend(self.store, "cust_123", 5000, 1, 12)
        await lending.make_payment(self.store, first.id, 5000, "EMI")
        overview = await lending.get_account_overview(self.store, "cust_123")
        self.assertEqual(overview.total_loans, 2)
        by_id = {s.loan_id: s for s in overview.loans}
        self.assertEqual(by_id[first.id].amount_paid, Decimal("5000"))
        self.assertEqual(by_id[first.id].emis_left, 23)

    async def test_overview_without_loans_is_not_found(self):
        await lending.register_customer(self.store, "Bob", "cust_bob")
        with self.assertRaises(NotFoundError):
            await lending.get_account_overview(self.store, "cust_bob")


class TestCustomers(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = InMemoryLoanStore()

    async def test_register_and_get(self):
        customer = await lending.register_customer(self.store, "  Alice Smith ", "cust_123")
        self.assertEqual(customer.name, "Alice Smith")
        self.assertEqual((await lending.get_customer(self.store, "cust_123")).id, "cust_123")

    async def test_generated_id(self):
        customer = await lending.register_customer(self.store, "Carol")
        self.assertTrue(customer.id.startswith("cust-"))

    async def test_duplicate_and_blank(self):
        await lending.register_customer(self.store, "Alice", "cust_123")
        with self.assertRaises(ValidationError):
            await lending.register_customer(self.store, "Alice again", "cust_123")
        with self.assertRaises(ValidationError):
            await lending.register_customer(self.store, "   ")

    async def test_unknown_customer(self):
        with self.assertRaises(NotFoundError):
            await lending.get_customer(self.store, "cust_404")


if __name__ == "__main__":
    unittest.main()
