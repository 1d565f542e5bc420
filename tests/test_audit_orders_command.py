"""
Tests for the audit_orders management command.
"""

from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from core.models import Order, Product, Review
from core.services import OrderLifecycleManager


def run_audit(*args):
    out = StringIO()
    call_command('audit_orders', *args, stdout=out)
    return out.getvalue()


@pytest.fixture
def orders(buyer, bat):
    manager = OrderLifecycleManager()
    return [manager.create_order(buyer.id, bat.id, quantity) for quantity in (1, 2, 3)]


@pytest.mark.django_db
class TestAuditTotals:

    def test_clean_ledger(self, orders):
        output = run_audit()

        assert 'Processed 3 orders total.' in output
        assert 'Audit completed. No drift found.' in output

    def test_reports_drift_without_fixing(self, orders):
        Order.objects.filter(pk=orders[1].pk).update(total_amount=Decimal('1.00'))

        output = run_audit()

        assert f'Order {orders[1].pk}: total 1.00 != 2 x 9.99 = 19.98' in output
        assert 'Found 1 record(s) with drift' in output
        orders[1].refresh_from_db()
        assert orders[1].total_amount == Decimal('1.00')

    def test_fix_repairs_drift(self, orders):
        Order.objects.filter(pk__in=[orders[0].pk, orders[2].pk]).update(total_amount=Decimal('0.00'))

        output = run_audit('--fix')

        assert 'Audit completed. Repaired 2 record(s).' in output
        assert [o.total_amount for o in Order.objects.order_by('id')] == [
            Decimal('9.99'), Decimal('19.98'), Decimal('29.97')
        ]
        assert 'No drift found.' in run_audit()

    def test_fix_in_small_batches(self, orders):
        Order.objects.update(total_amount=Decimal('0.00'))

        output = run_audit('--fix', '--batch-size', '2')

        assert 'Repaired 3 record(s).' in output
        assert 'No drift found.' in run_audit()

    def test_invalid_batch_size(self, db):
        with pytest.raises(CommandError):
            run_audit('--batch-size', '0')

    def test_empty_database(self, db):
        output = run_audit()

        assert 'Processed 0 orders total.' in output
        assert 'No drift found.' in output


@pytest.mark.django_db
class TestAuditRatings:

    def test_ratings_are_checked_only_on_request(self, bat, buyer):
        Review.objects.create(user=buyer, product=bat, rating=4)
        Product.objects.filter(pk=bat.pk).update(rating_average=Decimal('1.00'), total_reviews=7)

        assert 'No drift found.' in run_audit()

        output = run_audit('--ratings')

        assert 'Auditing product ratings...' in output
        assert 'Found 1 record(s) with drift' in output

    def test_fix_ratings(self, bat, coaching, buyer, other_buyer):
        Review.objects.create(user=buyer, product=bat, rating=5)
        Review.objects.create(user=other_buyer, product=bat, rating=2)
        Product.objects.update(rating_average=Decimal('5.00'), total_reviews=1)

        output = run_audit('--ratings', '--fix')

        assert 'Repaired 2 record(s).' in output
        bat.refresh_from_db()
        coaching.refresh_from_db()
        assert (bat.rating_average, bat.total_reviews) == (Decimal('3.50'), 2)
        assert (coaching.rating_average, coaching.total_reviews) == (Decimal('0.00'), 0)
