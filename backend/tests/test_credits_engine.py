import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest import mock

from postboard.models.credit_purchase import CreditPurchase
from postboard.services import payments
from postboard.services.credits_engine import (
    amount_for_credits,
    debit_credits,
    get_balance,
    get_credit_history,
    purchase_credits,
)
from postboard.services.errors import Conflict, InsufficientCredits, NotFound, PaymentError, ValidationError
from postboard.services.posts import create_post

from helpers import add_user, make_session_factory


CARD = {"card_number": "4242 4242 4242 4242"}


class FixedIdGateway(payments.PaymentGateway):
    def process(self, payment_method, amount, details):
        return "cc_fixed"


class CreditsTestCase(unittest.TestCase):
    def setUp(self):
        self.engine, self.Session = make_session_factory()
        self.db = self.Session()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()


class TestAmounts(unittest.TestCase):
    def test_five_credits_per_unit(self):
        self.assertEqual(amount_for_credits(5), Decimal("1.00"))
        self.assertEqual(amount_for_credits(25), Decimal("5.00"))
        self.assertEqual(amount_for_credits(1), Decimal("0.20"))
        self.assertEqual(amount_for_credits(7), Decimal("1.40"))


class TestPurchase(CreditsTestCase):
    def test_purchase_credits_balance_and_record(self):
        u = add_user(self.db, credits=1)
        purchase = purchase_credits(self.db, u.id, 25, "credit_card", CARD)

        self.assertEqual(purchase.credits_purchased, 25)
        self.assertEqual(Decimal(purchase.amount_paid), Decimal("5.00"))
        self.assertEqual(purchase.payment_method, "credit_card")
        self.assertTrue(purchase.transaction_id.startswith("cc_"))
        self.assertEqual(get_balance(self.db, u.id), 26)

    def test_transaction_prefix_per_method(self):
        u = add_user(self.db)
        pp = purchase_credits(self.db, u.id, 5, "paypal", {"paypal_email": "user@example.com"})
        bt = purchase_credits(self.db, u.id, 5, "bank_transfer", {"bank_account": "DE00 1234"})
        self.assertTrue(pp.transaction_id.startswith("pp_"))
        self.assertTrue(bt.transaction_id.startswith("bt_"))
        self.assertNotEqual(pp.transaction_id, bt.transaction_id)

    def test_missing_detail_names_field(self):
        u = add_user(self.db)
        with self.assertRaises(ValidationError) as ctx:
            purchase_credits(self.db, u.id, 5, "bank_transfer", {"card_number": "1"})
        self.assertEqual(ctx.exception.field, "bank_account")
        self.assertIn("bank_account", str(ctx.exception))
        self.assertEqual(get_balance(self.db, u.id), 1)

    def test_invalid_method(self):
        u = add_user(self.db)
        with self.assertRaises(ValidationError) as ctx:
            purchase_credits(self.db, u.id, 5, "bitcoin", CARD)
        self.assertEqual(ctx.exception.field, "payment_method")

    def test_non_positive_credits(self):
        u = add_user(self.db)
        with self.assertRaises(ValidationError):
            purchase_credits(self.db, u.id, 0, "credit_card", CARD)

    def test_unknown_user(self):
        with self.assertRaises(NotFound):
            purchase_credits(self.db, 999, 5, "credit_card", CARD)

    def test_duplicate_transaction_id_conflicts(self):
        u = add_user(self.db, credits=1)
        gateway = FixedIdGateway()
        purchase_credits(self.db, u.id, 10, "credit_card", CARD, gateway=gateway)

        with self.assertRaises(Conflict):
            purchase_credits(self.db, u.id, 10, "credit_card", CARD, gateway=gateway)

        self.db.expire_all()
        self.assertEqual(get_balance(self.db, u.id), 11)
        self.assertEqual(self.db.query(CreditPurchase).count(), 1)

    def test_history_newest_first(self):
        u = add_user(self.db)
        other = add_user(self.db, email="other@example.com")
        t0 = datetime(2026, 3, 1, tzinfo=timezone.utc)
        first = purchase_credits(self.db, u.id, 5, "credit_card", CARD, now=t0)
        second = purchase_credits(self.db, u.id, 10, "credit_card", CARD, now=t0 + timedelta(minutes=5))
        purchase_credits(self.db, other.id, 50, "credit_card", CARD, now=t0)

        history = get_credit_history(self.db, u.id)
        self.assertEqual([p.id for p in history], [second.id, first.id])


class TestDebitAndBalance(CreditsTestCase):
    def test_debit(self):
        u = add_user(self.db, credits=12)
        debit_credits(self.db, u.id, 5)
        self.db.commit()
        self.assertEqual(get_balance(self.db, u.id), 7)

    def test_debit_insufficient(self):
        u = add_user(self.db, credits=4)
        with self.assertRaises(InsufficientCredits) as ctx:
            debit_credits(self.db, u.id, 5)
        self.assertEqual((ctx.exception.required, ctx.exception.available), (5, 4))

    def test_debit_unknown_user(self):
        with self.assertRaises(NotFound):
            debit_credits(self.db, 404, 5)

    def test_balance_unknown_user(self):
        with self.assertRaises(NotFound):
            get_balance(self.db, 404)


class TestCreditScenario(CreditsTestCase):
    def test_register_post_buy_post(self):
        u = add_user(self.db, credits=1)
        t0 = datetime(2026, 5, 1, 9, tzinfo=timezone.utc)

        create_post(self.db, u.id, "Post A", "first", now=t0)
        self.assertEqual(get_balance(self.db, u.id), 1)

        with self.assertRaises(InsufficientCredits) as ctx:
            create_post(self.db, u.id, "Post B", "second", now=t0)
        self.assertEqual((ctx.exception.required, ctx.exception.available), (5, 1))

        purchase = purchase_credits(self.db, u.id, 25, "credit_card", CARD)
        self.assertEqual(Decimal(purchase.amount_paid), Decimal("5.00"))
        self.assertEqual(get_balance(self.db, u.id), 26)

        create_post(self.db, u.id, "Post B", "second", now=t0)
        self.db.expire_all()
        self.assertEqual(get_balance(self.db, u.id), 21)


class TestPaymentGateways(unittest.TestCase):
    def test_simulated_validates_details(self):
        gateway = payments.SimulatedPaymentGateway()
        with self.assertRaises(ValidationError) as ctx:
            gateway.process("paypal", Decimal("1.00"), {})
        self.assertEqual(ctx.exception.field, "paypal_email")

    def test_http_gateway_returns_transaction_id(self):
        gateway = payments.HttpPaymentGateway(url="https://pay.example.test/charge", api_key="k")
        resp = mock.Mock(status_code=200)
        resp.json.return_value = {"transaction_id": "cc_remote_1"}
        with mock.patch("requests.post", return_value=resp) as post:
            tx = gateway.process("credit_card", Decimal("2.00"), CARD)

        self.assertEqual(tx, "cc_remote_1")
        kwargs = post.call_args.kwargs
        self.assertEqual(kwargs["json"]["amount"], "2.00")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer k")

    def test_http_gateway_decline(self):
        gateway = payments.HttpPaymentGateway(url="https://pay.example.test/charge")
        with mock.patch("requests.post", return_value=mock.Mock(status_code=402)):
            with self.assertRaises(PaymentError):
                gateway.process("credit_card", Decimal("2.00"), CARD)


if __name__ == "__main__":
    unittest.main()
