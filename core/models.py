"""
Data model for the marketplace: users, catalog items, orders and reviews.
"""

from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .exceptions import NotFound, InsufficientStock
from .validators import validate_phone_number, validate_category, validate_product_image


def product_image_upload_path(instance, filename):
    """
    Generate upload path for catalog images.

    Path format: products/{category}/{filename}, with 'uncategorized' for
    items without a category.
    """
    return f'products/{instance.category or "uncategorized"}/{filename}'


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Additional fields:
    - role: Either 'USER' or 'ADMIN'
    - full_name, phone, address, service_type: Contact and profile details
    - is_available: Whether the user is currently taking work (providers)
    - created_at: Account creation timestamp
    - updated_at: Last update timestamp

    The inherited ``is_active`` flag is the account's active status; inactive
    users cannot log in.
    """

    ROLE_USER = 'USER'
    ROLE_ADMIN = 'ADMIN'

    ROLE_CHOICES = [
        (ROLE_USER, 'User'),
        (ROLE_ADMIN, 'Administrator'),
    ]

    full_name = models.CharField(
        _('full name'),
        max_length=150,
        blank=True,
        default='',
        help_text=_('Display name of the user.')
    )

    phone = models.CharField(
        _('phone'),
        max_length=20,
        blank=True,
        default='',
        validators=[validate_phone_number],
        help_text=_('Optional. Enter phone number in international format.')
    )

    address = models.CharField(
        _('address'),
        max_length=300,
        blank=True,
        default='',
        help_text=_('Default postal address.')
    )

    service_type = models.CharField(
        _('service type'),
        max_length=100,
        blank=True,
        default='',
        help_text=_('Kind of service offered, for users acting as providers.')
    )

    role = models.CharField(
        _('role'),
        max_length=10,
        choices=ROLE_CHOICES,
        default=ROLE_USER,
        help_text=_('Authorization role of the account.')
    )

    is_available = models.BooleanField(
        _('available'),
        default=True,
        help_text=_('Whether the user is currently available to take work.')
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
        help_text=_('Timestamp when the account was created.')
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
        help_text=_('Timestamp when the account was last updated.')
    )

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role']),
            models.Index(fields=['is_available']),
        ]

    def __str__(self):
        """Return username as string representation."""
        return self.username

    def is_admin(self):
        """
        Check if user has the ADMIN role.

        Returns:
            bool: True if role is 'ADMIN', False otherwise
        """
        return self.role == self.ROLE_ADMIN

    def clean(self):
        """
        Validate model fields.

        Ensures:
        - Email is lowercase for case-insensitive lookups
        - Role is one of the known roles

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if self.email:
            self.email = self.email.lower()

        if self.role not in dict(self.ROLE_CHOICES):
            raise ValidationError({
                'role': _('Role must be USER or ADMIN.')
            })

    def save(self, *args, **kwargs):
        """Normalize email before saving."""
        if self.email:
            self.email = self.email.lower()
        super().save(*args, **kwargs)


# ============================================================================
# Catalog Models
# ============================================================================

class ProductQuerySet(models.QuerySet):
    """
    Catalog store queries.

    Stock mutations are single conditional UPDATE statements. They do not
    open a transaction of their own; callers wrap them together with the
    order write in ``transaction.atomic()``.
    """

    def available(self):
        return self.filter(is_available=True)

    def tangible(self):
        return self.filter(item_type=Product.TYPE_PRODUCT)

    def services(self):
        return self.filter(item_type=Product.TYPE_SERVICE)

    def in_category(self, category):
        return self.filter(category__icontains=category)

    def search(self, name):
        return self.filter(name__icontains=name)

    def get_by_id(self, product_id):
        """
        Fetch a catalog item by primary key.

        Raises:
            NotFound: If no item has this ID
        """
        try:
            return self.get(pk=product_id)
        except (self.model.DoesNotExist, ValueError, TypeError):
            raise NotFound(f'Product with ID {product_id} does not exist.')

    def decrement_stock(self, product_id, quantity):
        """
        Remove ``quantity`` units from a product's stock.

        The WHERE clause refuses any update that would drive stock below
        zero, so two concurrent decrements can never oversell.

        Returns:
            bool: True if stock was decremented, False if the item does not
            track stock

        Raises:
            NotFound: If the product does not exist
            InsufficientStock: If stock is lower than quantity
        """
        updated = self.filter(
            pk=product_id,
            stock__isnull=False,
            stock__gte=quantity,
        ).update(stock=F('stock') - quantity, updated_at=timezone.now())

        if updated:
            return True

        product = self.get_by_id(product_id)
        if product.stock is None:
            return False

        raise InsufficientStock(
            f'Insufficient stock for product "{product.name}". '
            f'Available: {product.stock}, requested: {quantity}.',
            available=product.stock,
            requested=quantity,
        )

    def increment_stock(self, product_id, quantity):
        """
        Return ``quantity`` units to a product's stock.

        Returns:
            bool: True if stock was incremented, False if the item does not
            track stock

        Raises:
            NotFound: If the product does not exist
        """
        updated = self.filter(
            pk=product_id,
            stock__isnull=False,
        ).update(stock=F('stock') + quantity, updated_at=timezone.now())

        if updated:
            return True

        # Distinguish a missing product from a stockless service
        self.get_by_id(product_id)
        return False


class Product(models.Model):
    """
    Orderable catalog item.

    A tangible product carries a stock count; a service has no stock and is
    owned by a provider. Stock checks are skipped for items without stock.

    Fields:
    - name, description, category: Catalog details
    - price: Current unit price (non-negative)
    - stock: Units on hand, NULL for services
    - item_type: 'PRODUCT' or 'SERVICE'
    - provider: User offering the service (services only)
    - image: Optional catalog picture
    - is_available: Whether the item can be ordered
    - rating_average / total_reviews: Maintained from reviews by signals
    """

    TYPE_PRODUCT = 'PRODUCT'
    TYPE_SERVICE = 'SERVICE'

    ITEM_TYPE_CHOICES = [
        (TYPE_PRODUCT, 'Product'),
        (TYPE_SERVICE, 'Service'),
    ]

    name = models.CharField(
        _('name'),
        max_length=200,
        blank=False,
        null=False,
        help_text=_('Name of the product or service')
    )

    description = models.TextField(
        _('description'),
        blank=True,
        default='',
        help_text=_('Detailed description')
    )

    price = models.DecimalField(
        _('price'),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'), message=_('Price cannot be negative.'))],
        help_text=_('Current unit price')
    )

    stock = models.PositiveIntegerField(
        _('stock'),
        null=True,
        blank=True,
        help_text=_('Units available. Empty for services, which do not track stock.')
    )

    category = models.CharField(
        _('category'),
        max_length=50,
        blank=True,
        default='',
        validators=[validate_category],
        help_text=_('Catalog category slug')
    )

    item_type = models.CharField(
        _('item type'),
        max_length=10,
        choices=ITEM_TYPE_CHOICES,
        default=TYPE_PRODUCT,
        help_text=_('Whether this is a tangible product or a service')
    )

    provider = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='services',
        help_text=_('Provider offering this service')
    )

    image = models.ImageField(
        _('image'),
        upload_to=product_image_upload_path,
        blank=True,
        null=True,
        validators=[validate_product_image],
        help_text=_('Optional. Catalog picture (max 5MB, formats: jpg, png, webp).')
    )

    is_available = models.BooleanField(
        _('available'),
        default=True,
        help_text=_('Whether the item can currently be ordered')
    )

    rating_average = models.DecimalField(
        _('rating average'),
        max_digits=3,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text=_('Average review rating from 0.00 to 5.00')
    )

    total_reviews = models.PositiveIntegerField(
        _('total reviews'),
        default=0,
        help_text=_('Total number of reviews received')
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
        help_text=_('Timestamp when the item was created')
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
        help_text=_('Timestamp when the item was last updated')
    )

    objects = ProductQuerySet.as_manager()

    class Meta:
        verbose_name = _('product')
        verbose_name_plural = _('products')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['category']),
            models.Index(fields=['item_type']),
            models.Index(fields=['is_available']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name='product_price_non_negative'
            ),
            models.CheckConstraint(
                condition=Q(stock__isnull=True) | Q(stock__gte=0),
                name='product_stock_non_negative'
            ),
        ]

    def __str__(self):
        """Return name as string representation."""
        return self.name

    @property
    def tracks_stock(self):
        """Whether orders against this item consume stock."""
        return self.stock is not None

    def is_service(self):
        return self.item_type == self.TYPE_SERVICE

    def has_stock_for(self, quantity):
        """
        Check if ``quantity`` units can be ordered.

        Items that do not track stock can always be ordered.
        """
        if not self.tracks_stock:
            return True
        return self.stock >= quantity

    def clean(self):
        """
        Validate model fields.

        Ensures:
        - Name is not empty
        - Price is not negative
        - Tangible products carry a stock count
        - Services have a provider and no stock count
        - The item type cannot change while orders against the item can
          still be cancelled

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if not self.name or not self.name.strip():
            raise ValidationError({
                'name': _('Name cannot be empty.')
            })

        if self.price is not None and self.price < 0:
            raise ValidationError({
                'price': _('Price cannot be negative.')
            })

        if self.item_type == self.TYPE_PRODUCT and self.stock is None:
            raise ValidationError({
                'stock': _('Products must have a stock quantity.')
            })

        if self.item_type == self.TYPE_SERVICE:
            if self.stock is not None:
                raise ValidationError({
                    'stock': _('Services do not track stock.')
                })
            if not self.provider_id:
                raise ValidationError({
                    'provider': _('Services must have a provider.')
                })

        if self.pk and self._has_item_type_change() and self.orders.filter(
            status__in=Order.CANCELLABLE_STATUSES
        ).exists():
            raise ValidationError({
                'item_type': _('Item type cannot change while the item has open orders.')
            })

    def _has_item_type_change(self):
        stored = Product.objects.filter(pk=self.pk).values_list('item_type', flat=True).first()
        return stored is not None and stored != self.item_type

    def save(self, *args, **kwargs):
        """Run full validation before saving."""
        self.full_clean()
        super().save(*args, **kwargs)


# ============================================================================
# Order Models
# ============================================================================

class OrderQuerySet(models.QuerySet):
    """Order ledger queries."""

    def newest_first(self):
        return self.order_by('-order_date', '-id')

    def for_user(self, user):
        """Orders placed by ``user`` (instance or ID), newest first."""
        return self.filter(user=user).newest_first()

    def with_status(self, status):
        return self.filter(status=status)

    def get_by_id(self, order_id):
        """
        Fetch an order by primary key.

        Raises:
            NotFound: If no order has this ID
        """
        try:
            return self.get(pk=order_id)
        except (self.model.DoesNotExist, ValueError, TypeError):
            raise NotFound(f'Order with ID {order_id} does not exist.')


class Order(models.Model):
    """
    An order of one catalog item by one user.

    The unit price is captured from the product when the order is created and
    never follows later catalog price changes. ``total_amount`` is always
    recomputed from quantity and price on save.

    Status moves along VALID_TRANSITIONS only:
    PENDING -> CONFIRMED -> SHIPPED -> DELIVERED, and PENDING/CONFIRMED -> CANCELLED.
    """

    STATUS_PENDING = 'PENDING'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_SHIPPED = 'SHIPPED'
    STATUS_DELIVERED = 'DELIVERED'
    STATUS_CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_SHIPPED, 'Shipped'),
        (STATUS_DELIVERED, 'Delivered'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    VALID_TRANSITIONS = {
        STATUS_PENDING: [STATUS_CONFIRMED, STATUS_CANCELLED],
        STATUS_CONFIRMED: [STATUS_SHIPPED, STATUS_CANCELLED],
        STATUS_SHIPPED: [STATUS_DELIVERED],
        STATUS_DELIVERED: [],  # Terminal state
        STATUS_CANCELLED: [],  # Terminal state
    }

    CANCELLABLE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

    user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='orders',
        help_text=_('User who placed the order')
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name='orders',
        help_text=_('Product or service being ordered')
    )

    quantity = models.PositiveIntegerField(
        _('quantity'),
        validators=[MinValueValidator(1, message=_('Quantity must be at least 1.'))],
        help_text=_('Number of units ordered')
    )

    price = models.DecimalField(
        _('unit price'),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'), message=_('Price cannot be negative.'))],
        help_text=_('Unit price at the time of ordering')
    )

    total_amount = models.DecimalField(
        _('total amount'),
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text=_('Quantity multiplied by unit price')
    )

    status = models.CharField(
        _('status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        help_text=_('Current status of the order')
    )

    shipping_address = models.CharField(
        _('shipping address'),
        max_length=300,
        blank=True,
        default='',
        help_text=_('Address to deliver to')
    )

    payment_method = models.CharField(
        _('payment method'),
        max_length=50,
        blank=True,
        default='',
        help_text=_('Payment method chosen by the buyer')
    )

    notes = models.TextField(
        _('notes'),
        blank=True,
        default='',
        help_text=_('Free-text notes from the buyer')
    )

    order_date = models.DateTimeField(
        _('order date'),
        default=timezone.now,
        editable=False,
        help_text=_('Timestamp when the order was placed')
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
        help_text=_('Timestamp when the order was last updated')
    )

    objects = OrderQuerySet.as_manager()

    class Meta:
        verbose_name = _('order')
        verbose_name_plural = _('orders')
        ordering = ['-order_date']
        indexes = [
            models.Index(fields=['user']),
            models.Index(fields=['product']),
            models.Index(fields=['status']),
            models.Index(fields=['order_date']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name='order_quantity_positive'
            ),
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name='order_price_non_negative'
            ),
        ]

    def __str__(self):
        """Return meaningful string representation."""
        return f"Order #{self.pk} by {self.user.username} - {self.product.name} x{self.quantity}"

    def calculate_total(self):
        """
        Compute quantity multiplied by unit price.

        Returns:
            Decimal: Total rounded to cents, or None if either part is unset
        """
        if self.quantity is None or self.price is None:
            return None
        total = Decimal(str(self.price)) * self.quantity
        return total.quantize(Decimal('0.01'))

    def is_cancellable(self):
        return self.status in self.CANCELLABLE_STATUSES

    def can_transition_to(self, new_status):
        """
        Validate if the order can move to ``new_status``.

        Setting the current status again is allowed and changes nothing.

        Args:
            new_status: Target status

        Returns:
            tuple: (is_valid: bool, error_message: str or None)
        """
        current_status = self.status

        if new_status not in self.VALID_TRANSITIONS:
            return False, f'Unknown order status: {new_status}.'

        if current_status == new_status:
            return True, None

        if not self.VALID_TRANSITIONS.get(current_status):
            return False, f'Cannot modify an order that is {current_status}.'

        if new_status not in self.VALID_TRANSITIONS[current_status]:
            return False, f'Invalid status transition from {current_status} to {new_status}.'

        return True, None

    def clean(self):
        """
        Validate model fields and immutable history.

        Ensures:
        - Quantity is positive
        - Price is not negative
        - Unit price and order date never change after creation
        - Status transitions follow VALID_TRANSITIONS

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if self.quantity is not None and self.quantity <= 0:
            raise ValidationError({
                'quantity': _('Quantity must be greater than 0.')
            })

        if self.price is not None and self.price < 0:
            raise ValidationError({
                'price': _('Price cannot be negative.')
            })

        if self.pk is not None:
            previous = Order.objects.filter(pk=self.pk).values(
                'price', 'order_date', 'status'
            ).first()

            if previous is not None:
                if previous['price'] != Decimal(str(self.price)):
                    raise ValidationError({
                        'price': _('The unit price of an order cannot be changed.')
                    })

                if previous['order_date'] != self.order_date:
                    raise ValidationError({
                        'order_date': _('The order date cannot be changed.')
                    })

                old_status = previous['status']
                if old_status != self.status:
                    allowed = self.VALID_TRANSITIONS.get(old_status, [])
                    if self.status not in allowed:
                        raise ValidationError({
                            'status': _(
                                f'Invalid status transition from {old_status} to {self.status}.'
                            )
                        })

    def save(self, *args, **kwargs):
        """
        Recompute the total, validate and save.

        Args:
            *args: Positional arguments
            **kwargs: Keyword arguments
        """
        total = self.calculate_total()
        if total is not None:
            self.total_amount = total

        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'total_amount' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['total_amount']

        self.full_clean()
        super().save(*args, **kwargs)


# ============================================================================
# Review Model
# ============================================================================

class Review(models.Model):
    """
    Review of a catalog item by a user.

    Fields:
    - user: Author of the review
    - product: Reviewed product or service
    - rating: Integer rating from 1 to 5
    - comment: Written feedback (optional)
    - created_at: Timestamp when review was created (never changes)
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='reviews',
        help_text=_('User writing the review')
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='reviews',
        help_text=_('Product or service being reviewed')
    )

    rating = models.PositiveSmallIntegerField(
        _('rating'),
        validators=[
            MinValueValidator(1, message=_('Rating must be at least 1.')),
            MaxValueValidator(5, message=_('Rating must be at most 5.'))
        ],
        help_text=_('Rating from 1 to 5 stars')
    )

    comment = models.TextField(
        _('comment'),
        max_length=1000,
        blank=True,
        default='',
        help_text=_('Written feedback about the item')
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
        help_text=_('Timestamp when the review was created')
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
        help_text=_('Timestamp when the review was last updated')
    )

    class Meta:
        verbose_name = _('review')
        verbose_name_plural = _('reviews')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user']),
            models.Index(fields=['product']),
            models.Index(fields=['rating']),
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        """Return meaningful string representation."""
        return f"Review by {self.user.username} for {self.product.name} - {self.rating}★"

    def save(self, *args, **kwargs):
        """Run full validation before saving."""
        self.full_clean()
        super().save(*args, **kwargs)
