"""
Serializers for accounts, catalog, orders and reviews.

Order, catalog and review payloads use camelCase field names on the wire;
the ``source=`` argument maps them onto the snake_case model attributes.
"""

from rest_framework import serializers
from rest_framework.exceptions import NotFound
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.contrib.auth.hashers import make_password
from django.db import transaction

from .models import Product, Order, Review

User = get_user_model()


def _as_drf_error(error):
    """Convert a model-level ValidationError into a DRF one."""
    if hasattr(error, 'message_dict'):
        return serializers.ValidationError(error.message_dict)
    return serializers.ValidationError(list(error.messages))


# ============================================================================
# Account Serializers
# ============================================================================

class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user reference embedded in orders and reviews."""

    class Meta:
        model = User
        fields = ['id', 'username']
        read_only_fields = fields


class UserRegistrationSerializer(serializers.ModelSerializer):
    """
    Serializer for user registration with comprehensive validation.

    Fields:
    - username: Required, unique (case-insensitive)
    - password: Required, must meet strength requirements
    - confirm_password: Required, must match password
    - email: Optional, unique if provided
    - full_name, phone, address, service_type: Optional contact details
    - role: Optional, only 'USER' can be self-assigned
    """

    password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    confirm_password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'password', 'confirm_password',
                  'full_name', 'phone', 'address', 'service_type', 'role',
                  'is_available', 'created_at']
        read_only_fields = ['id', 'is_available', 'created_at']
        extra_kwargs = {
            'username': {'required': True},
            'role': {'required': False},
        }

    def validate_username(self, value):
        """
        Validate username uniqueness (case-insensitive).
        """
        value = value.strip()

        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError(
                "A user with that username already exists."
            )

        return value

    def validate_email(self, value):
        """
        Normalize email and check it is not already registered.
        """
        if not value:
            return value

        value = value.strip().lower()

        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(
                "A user with that email already exists."
            )

        return value

    def validate_password(self, value):
        """
        Validate password strength using Django's password validators.
        """
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))

        return value

    def validate_role(self, value):
        """
        Only the regular USER role can be chosen at registration.
        """
        if value != User.ROLE_USER:
            raise serializers.ValidationError(
                "Administrator accounts cannot be self-registered."
            )

        return value

    def validate(self, attrs):
        """
        Object-level validation for password confirmation matching.
        """
        if attrs.get('password') != attrs.get('confirm_password'):
            raise serializers.ValidationError({
                'confirm_password': 'Password confirmation does not match.'
            })

        return attrs

    def create(self, validated_data):
        """
        Create user with hashed password and the USER role.
        """
        validated_data.pop('confirm_password', None)
        validated_data['password'] = make_password(validated_data.pop('password'))
        validated_data['role'] = User.ROLE_USER

        # Never trust privilege flags from the request body
        for field in ('is_superuser', 'is_staff', 'is_active', 'groups', 'user_permissions'):
            validated_data.pop(field, None)

        with transaction.atomic():
            user = User.objects.create(**validated_data)

        return user


class LoginSerializer(serializers.Serializer):
    """
    Serializer for user login with username and password.

    Minimal validation to prevent user enumeration attacks.
    Actual authentication happens in the view.
    """
    username = serializers.CharField(
        required=True,
        help_text='Account username'
    )
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'},
        help_text='Account password'
    )


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(
        required=True,
        help_text='Refresh token to blacklist'
    )


class UserProfileSerializer(serializers.ModelSerializer):
    """
    Serializer for user profile retrieval.

    Excludes sensitive fields (password, is_staff, is_superuser, etc.).
    Also used by the admin user listing.
    """

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'full_name',
            'phone',
            'address',
            'service_type',
            'role',
            'is_active',
            'is_available',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class UserProfileUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for user profile updates (PUT/PATCH).

    Updatable fields:
    - full_name, email, phone, address, service_type, is_available

    Restricted fields (username, password, role, is_active, ...) are not
    declared and therefore ignored if sent.
    """

    class Meta:
        model = User
        fields = ['full_name', 'email', 'phone', 'address', 'service_type', 'is_available']
        extra_kwargs = {
            'full_name': {'required': False},
            'email': {'required': False},
            'phone': {'required': False},
            'address': {'required': False},
            'service_type': {'required': False},
            'is_available': {'required': False},
        }

    def validate_email(self, value):
        if not value:
            return value

        value = value.strip().lower()

        clash = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError(
                "A user with that email already exists."
            )

        return value

    def update(self, instance, validated_data):
        fields_to_update = []
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
            fields_to_update.append(attr)

        if fields_to_update:
            instance.save(update_fields=fields_to_update + ['updated_at'])

        return instance


class PasswordChangeSerializer(serializers.Serializer):
    """
    Serializer for changing one's own password.

    The current password is verified by the view through the account
    directory; this serializer only checks the new password.
    """
    current_password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    new_password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    confirm_password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    def validate_new_password(self, value):
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        try:
            validate_password(value, user=user)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value

    def validate(self, attrs):
        if attrs.get('new_password') != attrs.get('confirm_password'):
            raise serializers.ValidationError({
                'confirm_password': 'Password confirmation does not match.'
            })
        return attrs


class AdminPasswordSerializer(serializers.Serializer):
    new_password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    def validate_new_password(self, value):
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value


class UserStatusSerializer(serializers.Serializer):
    active = serializers.BooleanField(required=True)


class UserAvailabilitySerializer(serializers.Serializer):
    available = serializers.BooleanField(required=True)


# ============================================================================
# Catalog Serializers
# ============================================================================

class ProductSummarySerializer(serializers.ModelSerializer):
    """Minimal product reference embedded in orders and reviews."""

    class Meta:
        model = Product
        fields = ['id', 'name']
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    """
    Read serializer for catalog items.

    ``stock`` is null for services, which do not track stock.
    """

    itemType = serializers.CharField(source='item_type', read_only=True)
    provider = UserSummarySerializer(read_only=True)
    isAvailable = serializers.BooleanField(source='is_available', read_only=True)
    ratingAverage = serializers.DecimalField(
        source='rating_average', max_digits=3, decimal_places=2, read_only=True
    )
    totalReviews = serializers.IntegerField(source='total_reviews', read_only=True)
    imageUrl = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'description', 'price', 'stock', 'category',
            'itemType', 'provider', 'isAvailable', 'ratingAverage',
            'totalReviews', 'imageUrl', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields

    def get_imageUrl(self, obj):
        """
        Full URL to the catalog image, or None if no image was uploaded.
        """
        if not obj.image:
            return None
        request = self.context.get('request')
        if request is not None:
            return request.build_absolute_uri(obj.image.url)
        return obj.image.url


class ProductWriteSerializer(serializers.ModelSerializer):
    """
    Serializer for administrator catalog writes (POST/PUT/PATCH).

    Model-level rules (products need stock, services need a provider) are
    enforced by ``Product.clean()`` and reported as field errors.
    """

    itemType = serializers.ChoiceField(
        source='item_type',
        choices=Product.ITEM_TYPE_CHOICES,
        required=False
    )
    isAvailable = serializers.BooleanField(source='is_available', required=False)
    providerId = serializers.PrimaryKeyRelatedField(
        source='provider',
        queryset=User.objects.all(),
        required=False,
        allow_null=True
    )

    class Meta:
        model = Product
        fields = ['id', 'name', 'description', 'price', 'stock', 'category',
                  'itemType', 'isAvailable', 'providerId', 'image']
        read_only_fields = ['id']
        extra_kwargs = {
            'image': {'required': False, 'allow_null': True},
        }

    def validate_name(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Name cannot be empty.")
        return value.strip()

    def validate_price(self, value):
        """
        Validate price is not negative.
        """
        if value is not None and value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value

    def validate_stock(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Stock cannot be negative.")
        return value

    def create(self, validated_data):
        product = Product(**validated_data)
        try:
            product.save()
        except DjangoValidationError as e:
            raise _as_drf_error(e)
        return product

    def update(self, instance, validated_data):
        # Replacing the image removes the old file from storage
        if validated_data.get('image') and instance.image:
            instance.image.delete(save=False)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        # Write only the submitted columns
        try:
            instance.save(update_fields=[*validated_data, 'updated_at'])
        except DjangoValidationError as e:
            raise _as_drf_error(e)
        return instance


class CategorySerializer(serializers.Serializer):
    slug = serializers.CharField(read_only=True)
    productCount = serializers.IntegerField(read_only=True)


class ServiceCreateSerializer(serializers.ModelSerializer):
    """
    Serializer for offering a new service.

    The authenticated user becomes the provider. Services never track
    stock.

    Fields:
    - name: Required
    - description, category: Optional
    - price: Required, not negative
    """

    class Meta:
        model = Product
        fields = ['id', 'name', 'description', 'price', 'category']
        read_only_fields = ['id']
        extra_kwargs = {
            'name': {'required': True},
            'price': {'required': True},
        }

    def validate_name(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Service name is required.")
        return value.strip()

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value

    def create(self, validated_data):
        request = self.context.get('request')
        if request is None or not request.user.is_authenticated:
            raise serializers.ValidationError(
                "A provider is required to offer a service."
            )

        service = Product(
            item_type=Product.TYPE_SERVICE,
            provider=request.user,
            stock=None,
            **validated_data
        )
        try:
            service.save()
        except DjangoValidationError as e:
            raise _as_drf_error(e)
        return service


# ============================================================================
# Order Serializers
# ============================================================================

class OrderSerializer(serializers.ModelSerializer):
    """
    Read serializer for orders.

    JSON shape:
    {
        "id": 12,
        "orderDate": "2025-01-05T10:21:00Z",
        "status": "PENDING",
        "user": {"id": 3, "username": "alice"},
        "product": {"id": 7, "name": "Cricket Bat"},
        "quantity": 3,
        "price": 9.99,
        "totalAmount": 29.97,
        "shippingAddress": "...",
        "paymentMethod": "...",
        "notes": "..."
    }
    """

    orderDate = serializers.DateTimeField(source='order_date', read_only=True)
    user = UserSummarySerializer(read_only=True)
    product = ProductSummarySerializer(read_only=True)
    totalAmount = serializers.DecimalField(
        source='total_amount', max_digits=12, decimal_places=2, read_only=True
    )
    shippingAddress = serializers.CharField(source='shipping_address', read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'orderDate', 'status', 'user', 'product', 'quantity',
            'price', 'totalAmount', 'shippingAddress', 'paymentMethod', 'notes',
        ]
        read_only_fields = fields


class OrderPlaceSerializer(serializers.Serializer):
    """
    Input for placing an order as the authenticated user.

    Quantity is only type-checked here. Range and stock rules belong to the
    lifecycle manager so that every entry point reports them the same way.
    """
    productId = serializers.IntegerField(source='product_id', required=True)
    quantity = serializers.IntegerField(required=True)
    shippingAddress = serializers.CharField(
        source='shipping_address', required=False, allow_blank=True, max_length=300
    )
    paymentMethod = serializers.CharField(
        source='payment_method', required=False, allow_blank=True, max_length=50
    )
    notes = serializers.CharField(required=False, allow_blank=True)


class OrderCreateSerializer(OrderPlaceSerializer):
    """Input for creating an order on behalf of ``userId``."""
    userId = serializers.IntegerField(source='user_id', required=True)


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField(required=True)


# ============================================================================
# Review Serializers
# ============================================================================

class ReviewSerializer(serializers.ModelSerializer):
    """Read serializer for reviews."""

    user = UserSummarySerializer(read_only=True)
    product = ProductSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'rating', 'comment', 'user', 'product', 'createdAt', 'updatedAt']
        read_only_fields = fields


class ReviewCreateSerializer(serializers.ModelSerializer):
    """
    Serializer for creating reviews.

    Fields:
    - productId: Required, ID of the reviewed product or service
    - rating: Required, integer from 1-5
    - comment: Optional, text feedback

    The author is always the authenticated user.
    """

    productId = serializers.IntegerField(source='product_id', write_only=True, required=True)

    class Meta:
        model = Review
        fields = ['id', 'productId', 'rating', 'comment']
        read_only_fields = ['id']
        extra_kwargs = {
            'rating': {'required': True},
        }

    def validate_rating(self, value):
        """
        Validate rating is integer between 1-5.

        Raises:
            ValidationError: If rating is not between 1-5
        """
        if value < 1 or value > 5:
            raise serializers.ValidationError(
                "Rating must be between 1 and 5."
            )
        return value

    def validate_productId(self, value):
        """
        Validate the product exists.

        Raises:
            NotFound: If the product doesn't exist (returns 404)
        """
        if not Product.objects.filter(pk=value).exists():
            raise NotFound("Product not found.")
        return value

    def create(self, validated_data):
        request = self.context.get('request')
        review = Review(user=request.user, **validated_data)
        try:
            review.save()
        except DjangoValidationError as e:
            raise _as_drf_error(e)
        return review


class ReviewUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for updating existing reviews.

    Supports partial updates (PATCH) for rating and comment fields only.
    Author, product and creation timestamp never change.
    """

    class Meta:
        model = Review
        fields = ['id', 'rating', 'comment']
        read_only_fields = ['id']

    def validate_rating(self, value):
        if value < 1 or value > 5:
            raise serializers.ValidationError(
                "Rating must be between 1 and 5."
            )
        return value

    def update(self, instance, validated_data):
        if 'rating' in validated_data:
            instance.rating = validated_data['rating']

        if 'comment' in validated_data:
            instance.comment = validated_data['comment']

        try:
            instance.save()
        except DjangoValidationError as e:
            raise _as_drf_error(e)

        return instance
