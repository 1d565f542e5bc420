"""
Concurrent order tests.

Runs real threads against the test database, so these use
TransactionTestCase: each thread gets its own connection and must see
committed rows.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import connection
from django.test import TransactionTestCase

from core.exceptions import InsufficientStock, InvalidState
from core.models import Order, Product
from core.services import OrderLifecycleManager

User = get_user_model()


class ConcurrentOrderTests(TransactionTestCase):

    def setUp(self):
        self.users = [
            User.objects.create_user(
                username=f'racer{i}',
                email=f'racer{i}@example.com',
                password='SecurePass123!'
            )
            for i in range(4)
        ]
        self.product = Product.objects.create(
            name='Carrom Board',
            price=Decimal('35.00'),
            stock=10,
            category='indoor-games'
        )

    def _create(self, user_id, quantity):
        try:
            return OrderLifecycleManager().create_order(user_id, self.product.id, quantity)
        except InsufficientStock as e:
            return e
        finally:
            connection.close()

    def _cancel(self, order_id):
        try:
            return OrderLifecycleManager().cancel_order(order_id)
        except InvalidState as e:
            return e
        finally:
            connection.close()

    def test_two_orders_for_more_than_total_stock(self):
        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [
                executor.submit(self._create, user.id, 6)
                for user in self.users[:2]
            ]
            results = [future.result() for future in as_completed(futures)]

        created = [r for r in results if isinstance(r, Order)]
        rejected = [r for r in results if isinstance(r, InsufficientStock)]

        self.assertEqual(len(created), 1)
        self.assertEqual(len(rejected), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 4)
        self.assertEqual(Order.objects.count(), 1)

    def test_many_small_orders_never_oversell(self):
        with ThreadPoolExecutor(max_workers=4) as executor:
            futures = [
                executor.submit(self._create, self.users[i % 4].id, 3)
                for i in range(6)
            ]
            results = [future.result() for future in as_completed(futures)]

        created = [r for r in results if isinstance(r, Order)]
        self.assertEqual(len(created), 3)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 1)

    def test_concurrent_cancels_restock_once(self):
        order = OrderLifecycleManager().create_order(self.users[0].id, self.product.id, 5)

        with ThreadPoolExecutor(max_workers=3) as executor:
            futures = [executor.submit(self._cancel, order.id) for _ in range(3)]
            results = [future.result() for future in as_completed(futures)]

        cancelled = [r for r in results if isinstance(r, Order)]
        self.assertEqual(len(cancelled), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
