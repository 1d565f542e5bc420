# Audit Orders Management Command
from decimal import Decimal
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.db.models import Avg, Count

from core.models import Order, Product


class Command(BaseCommand):
    help = 'Verifies that every order total equals quantity x unit price, and optionally repairs drift.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Write corrected totals instead of only reporting them.',
        )
        parser.add_argument(
            '--ratings',
            action='store_true',
            help='Also verify product rating averages and review counts.',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=1000,
            help='Batch size for bulk processing.',
        )

    def handle(self, *args, **options):
        fix = options['fix']
        batch_size = options['batch_size']

        if batch_size <= 0:
            raise CommandError('--batch-size must be a positive integer.')

        drifted = self.audit_totals(fix, batch_size)

        if options['ratings']:
            drifted += self.audit_ratings(fix, batch_size)

        if drifted == 0:
            self.stdout.write(self.style.SUCCESS('Audit completed. No drift found.'))
        elif fix:
            self.stdout.write(self.style.SUCCESS(f'Audit completed. Repaired {drifted} record(s).'))
        else:
            self.stdout.write(self.style.WARNING(
                f'Audit completed. Found {drifted} record(s) with drift. Re-run with --fix to repair.'
            ))

    def audit_totals(self, fix, batch_size):
        self.stdout.write('Auditing order totals...')
        orders = Order.objects.only('id', 'quantity', 'price', 'total_amount').order_by('id')
        updates = []
        count = 0
        drifted = 0

        for order in self._iterate(orders, batch_size):
            expected = order.calculate_total()

            if expected is not None and order.total_amount != expected:
                drifted += 1
                self.stdout.write(
                    f'  Order {order.id}: total {order.total_amount} != '
                    f'{order.quantity} x {order.price} = {expected}'
                )
                order.total_amount = expected
                updates.append(order)

            if len(updates) >= batch_size:
                if fix:
                    self._write(Order, updates, ['total_amount'])
                updates = []

            count += 1
            if count % 100 == 0:
                self.stdout.write(f'Processed {count} orders...')

        if updates and fix:
            self._write(Order, updates, ['total_amount'])

        self.stdout.write(f'Processed {count} orders total.')
        return drifted

    def audit_ratings(self, fix, batch_size):
        self.stdout.write('Auditing product ratings...')
        products = Product.objects.annotate(
            review_avg=Avg('reviews__rating'),
            review_count=Count('reviews')
        ).order_by('id')
        updates = []
        count = 0
        drifted = 0

        for product in self._iterate(products, batch_size):
            raw_avg = product.review_avg
            if raw_avg is None:
                new_avg = Decimal('0.00')
            else:
                new_avg = Decimal(str(raw_avg)).quantize(Decimal('0.01'))
            new_total = product.review_count or 0

            if product.rating_average != new_avg or product.total_reviews != new_total:
                drifted += 1
                self.stdout.write(
                    f'  Product {product.id} ({product.name}): rating '
                    f'{product.rating_average} -> {new_avg}, count {product.total_reviews} -> {new_total}'
                )
                product.rating_average = new_avg
                product.total_reviews = new_total
                updates.append(product)

            if len(updates) >= batch_size:
                if fix:
                    self._write(Product, updates, ['rating_average', 'total_reviews'])
                updates = []

            count += 1

        if updates and fix:
            self._write(Product, updates, ['rating_average', 'total_reviews'])

        self.stdout.write(f'Processed {count} products total.')
        return drifted

    def _write(self, model, objects, fields):
        # bulk_update skips save(), so model validation and signals do not run
        with transaction.atomic():
            model.objects.bulk_update(objects, fields)

    def _iterate(self, queryset, batch_size):
        """
        Yield rows in primary-key order, one fully fetched batch at a time.

        Each batch is fetched completely before its rows are yielded.
        """
        last_pk = 0
        while True:
            batch = list(queryset.filter(pk__gt=last_pk)[:batch_size])
            if not batch:
                return
            yield from batch
            last_pk = batch[-1].pk
