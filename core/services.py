"""
Order lifecycle management.

Every operation that touches stock runs inside a single
``transaction.atomic()`` block together with the order write, so stock and
orders are committed together or not at all. The product row (on creation)
or the order row (on cancellation) is locked with ``select_for_update()`` so
concurrent requests against the same item serialize.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .accounts import AccountDirectory
from .exceptions import InvalidArgument, InvalidState, InsufficientStock
from .models import Order, Product
from .validators import validate_order_quantity

logger = logging.getLogger(__name__)


def _validation_message(error):
    """Flatten a Django ValidationError into one readable line."""
    if hasattr(error, 'message_dict'):
        return '; '.join(
            f"{field}: {' '.join(messages)}"
            for field, messages in error.message_dict.items()
        )
    return ' '.join(error.messages)


class OrderLifecycleManager:
    """
    Create, advance and cancel orders while keeping stock consistent.

    Usage:
        manager = OrderLifecycleManager()
        order = manager.create_order(user_id=1, product_id=7, quantity=3)
        manager.cancel_order(order.pk)
    """

    def __init__(self, accounts=None):
        self.accounts = accounts or AccountDirectory()

    # ------------------------------------------------------------------
    # Order creation
    # ------------------------------------------------------------------

    def create_order(self, user_id, product_id, quantity, shipping_address='',
                     payment_method='', notes=''):
        """
        Create a PENDING order for the user identified by ``user_id``.

        Raises:
            InvalidArgument: If quantity is not a positive integer or the
                product is not available
            NotFound: If the user or product does not exist
            InsufficientStock: If the product tracks stock and has fewer
                units than requested
        """
        self._check_quantity(quantity)
        user = self.accounts.get_by_id(user_id)
        return self._open_order(
            user, product_id, quantity,
            shipping_address=shipping_address,
            payment_method=payment_method,
            notes=notes,
        )

    def place_order(self, order_data, user):
        """
        Create a PENDING order for the authenticated ``user``.

        ``order_data`` holds ``product`` (a Product) or ``product_id``,
        ``quantity`` and the optional shipping/payment/notes fields.
        Same rules as ``create_order``.
        """
        if user is None or not user.is_authenticated:
            raise InvalidArgument('An authenticated user is required to place an order.')

        product = order_data.get('product')
        product_id = product.pk if isinstance(product, Product) else order_data.get('product_id')
        if product_id is None:
            raise InvalidArgument('A product is required to place an order.')

        quantity = order_data.get('quantity')
        self._check_quantity(quantity)

        return self._open_order(
            user, product_id, quantity,
            shipping_address=order_data.get('shipping_address') or '',
            payment_method=order_data.get('payment_method') or '',
            notes=order_data.get('notes') or '',
        )

    def _check_quantity(self, quantity):
        try:
            validate_order_quantity(quantity)
        except ValidationError as e:
            raise InvalidArgument(' '.join(e.messages))

    def _open_order(self, user, product_id, quantity, shipping_address, payment_method, notes):
        with transaction.atomic():
            product = Product.objects.select_for_update().get_by_id(product_id)

            if not product.is_available:
                raise InvalidArgument(f'Product "{product.name}" is not available for ordering.')

            if not product.has_stock_for(quantity):
                logger.warning(
                    f"Order rejected for insufficient stock. "
                    f"Product ID: {product.pk}, Available: {product.stock}, "
                    f"Requested: {quantity}, User ID: {user.pk}"
                )
                raise InsufficientStock(
                    f'Insufficient stock for product "{product.name}". '
                    f'Available: {product.stock}, requested: {quantity}.',
                    available=product.stock,
                    requested=quantity,
                )

            Product.objects.decrement_stock(product.pk, quantity)

            order = Order(
                user=user,
                product=product,
                quantity=quantity,
                price=product.price,
                status=Order.STATUS_PENDING,
                shipping_address=shipping_address,
                payment_method=payment_method,
                notes=notes,
                order_date=timezone.now(),
            )
            try:
                order.save()
            except ValidationError as e:
                raise InvalidArgument(_validation_message(e))

        product.refresh_from_db(fields=['stock', 'updated_at'])

        logger.info(
            f"Order created. Order ID: {order.pk}, User ID: {user.pk}, "
            f"Product ID: {product.pk}, Quantity: {quantity}, "
            f"Unit Price: {order.price}, Total: {order.total_amount}, "
            f"Remaining Stock: {product.stock}"
        )
        return order

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def update_order_status(self, order_id, new_status):
        """
        Move an order to ``new_status`` along the transition table.

        A move to CANCELLED restores stock exactly like ``cancel_order``.

        Raises:
            NotFound: If the order does not exist
            InvalidArgument: If ``new_status`` is not a known status
            InvalidState: If the transition is not allowed
        """
        if isinstance(new_status, str):
            new_status = new_status.strip().upper()

        with transaction.atomic():
            order = Order.objects.select_for_update().get_by_id(order_id)

            if new_status not in Order.VALID_TRANSITIONS:
                valid = ', '.join(Order.VALID_TRANSITIONS)
                raise InvalidArgument(f'Invalid status "{new_status}". Must be one of: {valid}.')

            if new_status == Order.STATUS_CANCELLED and order.status != Order.STATUS_CANCELLED:
                return self._cancel_locked(order)

            is_valid, error_message = order.can_transition_to(new_status)
            if not is_valid:
                logger.warning(
                    f"Rejected order status transition. Order ID: {order.pk}, "
                    f"From: {order.status}, To: {new_status}"
                )
                raise InvalidState(error_message)

            if order.status == new_status:
                return order

            old_status = order.status
            order.status = new_status
            order.save(update_fields=['status', 'updated_at'])

        logger.info(
            f"Order status updated. Order ID: {order.pk}, "
            f"Old Status: {old_status}, New Status: {new_status}"
        )
        return order

    def cancel_order(self, order_id):
        """
        Cancel a PENDING or CONFIRMED order and return its units to stock.

        Raises:
            NotFound: If the order does not exist
            InvalidState: If the order is neither PENDING nor CONFIRMED
        """
        with transaction.atomic():
            order = Order.objects.select_for_update().get_by_id(order_id)
            return self._cancel_locked(order)

    def _cancel_locked(self, order):
        # Caller holds the row lock inside an open transaction
        if not order.is_cancellable():
            logger.warning(
                f"Rejected order cancellation. Order ID: {order.pk}, Status: {order.status}"
            )
            raise InvalidState(
                f'Order {order.pk} cannot be cancelled from status {order.status}. '
                f'Only PENDING or CONFIRMED orders can be cancelled.'
            )

        restocked = Product.objects.increment_stock(order.product_id, order.quantity)

        order.status = Order.STATUS_CANCELLED
        order.save(update_fields=['status', 'updated_at'])

        logger.info(
            f"Order cancelled. Order ID: {order.pk}, Product ID: {order.product_id}, "
            f"Quantity Restocked: {order.quantity if restocked else 0}"
        )
        return order

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_order(self, order_id):
        return Order.objects.select_related('user', 'product').get_by_id(order_id)

    def list_orders(self, status=None):
        """All orders, newest first, optionally filtered by status."""
        queryset = Order.objects.select_related('user', 'product').newest_first()
        if status:
            status = status.strip().upper()
            if status not in Order.VALID_TRANSITIONS:
                raise InvalidArgument(f'Invalid status "{status}".')
            queryset = queryset.with_status(status)
        return queryset

    def orders_for_user(self, user_id):
        """Orders placed by ``user_id``, newest first."""
        return Order.objects.select_related('user', 'product').for_user(user_id)

    def orders_with_status(self, status):
        return self.list_orders(status=status)
