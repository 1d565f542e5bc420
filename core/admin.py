"""
Django admin configuration for the marketplace models.
"""

from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db import transaction
from django.utils.translation import gettext_lazy as _

from .exceptions import MarketplaceError
from .models import User, Product, Order, Review
from .services import OrderLifecycleManager


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.

    Extends Django's UserAdmin to include the marketplace profile fields.
    """

    list_display = [
        'username',
        'email',
        'full_name',
        'role',
        'is_available',
        'is_active',
        'created_at',
    ]

    list_filter = [
        'role',
        'is_available',
        'is_staff',
        'is_superuser',
        'is_active',
        'created_at',
    ]

    search_fields = [
        'username',
        'email',
        'full_name',
        'service_type',
    ]

    ordering = ['-created_at']

    fieldsets = (
        (None, {
            'fields': ('username', 'password')
        }),
        (_('Contact Details'), {
            'fields': (
                'full_name',
                'email',
                'phone',
                'address',
                'service_type',
            )
        }),
        (_('Role & Availability'), {
            'fields': ('role', 'is_available')
        }),
        (_('Permissions'), {
            'fields': (
                'is_active',
                'is_staff',
                'is_superuser',
                'groups',
                'user_permissions',
            ),
            'classes': ('collapse',),
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'username',
                'email',
                'password1',
                'password2',
                'role',
            ),
        }),
    )

    readonly_fields = ['created_at', 'updated_at', 'last_login', 'date_joined']

    date_hierarchy = 'created_at'

    list_per_page = 25


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for catalog items (products and services)."""

    list_display = [
        'name',
        'item_type',
        'category',
        'price',
        'stock',
        'provider',
        'is_available',
        'rating_average',
        'total_reviews',
    ]

    list_filter = [
        'item_type',
        'is_available',
        'category',
        'created_at',
    ]

    search_fields = [
        'name',
        'description',
        'category',
        'provider__username',
    ]

    readonly_fields = ['rating_average', 'total_reviews', 'created_at', 'updated_at']

    ordering = ['-created_at']

    list_per_page = 25

    fieldsets = (
        (None, {
            'fields': ('name', 'description', 'category', 'item_type', 'provider')
        }),
        (_('Pricing & Stock'), {
            'fields': ('price', 'stock', 'is_available')
        }),
        (_('Ratings'), {
            'fields': ('rating_average', 'total_reviews'),
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def save_model(self, request, obj, form, change):
        """
        Edits are saved under a row lock and write only the fields the
        form changed.
        """
        if not change:
            super().save_model(request, obj, form, change)
            return

        editable = {field.name for field in Product._meta.concrete_fields}
        with transaction.atomic():
            Product.objects.select_for_update().get_by_id(obj.pk)
            changed = [name for name in form.changed_data if name in editable]
            obj.save(update_fields=[*changed, 'updated_at'])


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin interface for orders.

    Orders are created through the API only. Status changes go through the
    lifecycle manager so that cancellations return stock.
    """

    list_display = [
        'id',
        'user',
        'product',
        'quantity',
        'price',
        'total_amount',
        'status',
        'order_date',
    ]

    list_filter = [
        'status',
        'order_date',
    ]

    search_fields = [
        'user__username',
        'product__name',
        'shipping_address',
    ]

    readonly_fields = [
        'user', 'product', 'quantity', 'price', 'total_amount',
        'status', 'order_date', 'updated_at',
    ]

    fields = [
        'user', 'product', 'quantity', 'price', 'total_amount', 'status',
        'shipping_address', 'payment_method', 'notes', 'order_date', 'updated_at',
    ]

    ordering = ['-order_date']

    date_hierarchy = 'order_date'

    list_per_page = 25

    actions = ['confirm_orders', 'ship_orders', 'deliver_orders', 'cancel_orders']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def _move_orders(self, request, queryset, new_status):
        manager = OrderLifecycleManager()
        moved = 0
        for order in queryset:
            try:
                manager.update_order_status(order.pk, new_status)
                moved += 1
            except MarketplaceError as e:
                self.message_user(request, f'Order {order.pk}: {e.message}', level=messages.WARNING)
        if moved:
            self.message_user(request, f'{moved} order(s) moved to {new_status}.')

    @admin.action(description=_('Mark selected orders as confirmed'))
    def confirm_orders(self, request, queryset):
        self._move_orders(request, queryset, Order.STATUS_CONFIRMED)

    @admin.action(description=_('Mark selected orders as shipped'))
    def ship_orders(self, request, queryset):
        self._move_orders(request, queryset, Order.STATUS_SHIPPED)

    @admin.action(description=_('Mark selected orders as delivered'))
    def deliver_orders(self, request, queryset):
        self._move_orders(request, queryset, Order.STATUS_DELIVERED)

    @admin.action(description=_('Cancel selected orders and restock'))
    def cancel_orders(self, request, queryset):
        self._move_orders(request, queryset, Order.STATUS_CANCELLED)


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    """Admin interface for Review model."""

    list_display = [
        'id',
        'user',
        'product',
        'rating',
        'created_at',
    ]

    list_filter = [
        'rating',
        'created_at',
    ]

    search_fields = [
        'user__username',
        'product__name',
        'comment',
    ]

    readonly_fields = ['created_at', 'updated_at']

    ordering = ['-created_at']

    date_hierarchy = 'created_at'

    list_per_page = 25

    fieldsets = (
        (None, {
            'fields': ('user', 'product')
        }),
        (_('Review Content'), {
            'fields': ('rating', 'comment')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )
