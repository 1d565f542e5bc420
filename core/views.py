"""
API views for the marketplace backend.
"""

import logging

from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework import generics, status
from rest_framework.views import APIView
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, ProtectedError

from .accounts import AccountDirectory
from .exceptions import MarketplaceError, NotFound
from .models import Product, Review
from .permissions import IsAdminRole, IsAdminRoleOrReadOnly, IsReviewAuthor
from .serializers import (
    UserRegistrationSerializer,
    LoginSerializer,
    LogoutSerializer,
    UserProfileSerializer,
    UserProfileUpdateSerializer,
    PasswordChangeSerializer,
    AdminPasswordSerializer,
    UserStatusSerializer,
    UserAvailabilitySerializer,
    ProductSerializer,
    ProductWriteSerializer,
    CategorySerializer,
    ServiceCreateSerializer,
    OrderSerializer,
    OrderCreateSerializer,
    OrderPlaceSerializer,
    OrderStatusSerializer,
    ReviewSerializer,
    ReviewCreateSerializer,
    ReviewUpdateSerializer,
)
from .services import OrderLifecycleManager

User = get_user_model()
logger = logging.getLogger(__name__)


def get_client_ip(request):
    """
    Get client IP address from request.
    Handles proxy headers for accurate IP detection.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip


def rejected(request, action, exc, status_code=status.HTTP_400_BAD_REQUEST):
    """Log a rejected domain operation and build the client error response."""
    logger.warning(
        f"{action} rejected. Reason: {exc.message}, "
        f"User ID: {getattr(request.user, 'id', None)}, IP: {get_client_ip(request)}"
    )
    return Response({'detail': exc.message}, status=status_code)


def method_not_allowed(method):
    return Response(
        {'detail': f'Method "{method}" not allowed.'},
        status=status.HTTP_405_METHOD_NOT_ALLOWED
    )


# ============================================================================
# Authentication & Account Views
# ============================================================================

class UserRegistrationView(generics.CreateAPIView):
    """
    API endpoint for user registration.

    Accepts POST requests with user registration data.
    Returns created user data (excluding password) on success.
    Handles concurrent registration attempts with database-level uniqueness.
    """
    serializer_class = UserRegistrationSerializer
    permission_classes = [AllowAny]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self.perform_create(serializer)
        except IntegrityError:
            # Concurrent registration with the same username
            return Response(
                {'username': ['A user with that username already exists.']},
                status=status.HTTP_400_BAD_REQUEST
            )

        logger.info(
            f"User registered. Username: {serializer.instance.username}, "
            f"IP: {get_client_ip(request)}"
        )
        headers = self.get_success_headers(serializer.data)
        return Response(serializer.data, status=status.HTTP_201_CREATED, headers=headers)


class LoginView(APIView):
    """
    API endpoint for user login with JWT token generation.

    Security features:
    - Scoped rate limiting ('login')
    - Generic error messages to prevent user enumeration
    - Failed login attempt logging with client IP

    POST /api/auth/login/
    Request body: {"username": "alice", "password": "S3cret!pass"}

    Success response (200):
    {
        "access": "<jwt_access_token>",
        "refresh": "<jwt_refresh_token>",
        "user": {"id": 1, "username": "alice", "role": "USER"}
    }

    Error response (401): {"detail": "Invalid credentials"}
    """
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'login'
    directory_class = AccountDirectory

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        username = serializer.validated_data['username'].strip()
        password = serializer.validated_data['password']
        client_ip = get_client_ip(request)

        user = self.directory_class().authenticate(username, password)
        if user is None:
            logger.warning(
                f"Failed login attempt. Username: {username}, IP: {client_ip}"
            )
            return Response(
                {'detail': 'Invalid credentials'},
                status=status.HTTP_401_UNAUTHORIZED
            )

        refresh = RefreshToken.for_user(user)
        update_last_login(None, user)

        logger.info(f"Successful login. Username: {user.username}, IP: {client_ip}")

        return Response({
            'access': str(refresh.access_token),
            'refresh': str(refresh),
            'user': {
                'id': user.id,
                'username': user.username,
                'role': user.role,
            }
        }, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """
    API endpoint that blacklists a refresh token.

    POST /api/auth/logout/
    Request body: {"refresh": "<jwt_refresh_token>"}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = LogoutSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            RefreshToken(serializer.validated_data['refresh']).blacklist()
        except TokenError as e:
            logger.warning(
                f"Logout with invalid refresh token. User ID: {request.user.id}, "
                f"Error: {e}, IP: {get_client_ip(request)}"
            )
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        logger.info(f"User logged out. User ID: {request.user.id}")
        return Response({'detail': 'Successfully logged out.'}, status=status.HTTP_200_OK)


class UserProfileView(APIView):
    """
    API endpoint for retrieving and updating the authenticated user's profile.

    GET /api/auth/profile/
    PUT /api/auth/profile/
    PATCH /api/auth/profile/

    Only full_name, email, phone, address, service_type and is_available can
    be changed here.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        serializer = UserProfileSerializer(request.user)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def put(self, request, *args, **kwargs):
        return self._update_profile(request, partial=False)

    def patch(self, request, *args, **kwargs):
        return self._update_profile(request, partial=True)

    def _update_profile(self, request, partial=False):
        user = request.user
        serializer = UserProfileUpdateSerializer(
            user,
            data=request.data,
            partial=partial,
            context={'request': request}
        )

        if not serializer.is_valid():
            logger.warning(
                f"Profile update validation failed. "
                f"User ID: {user.id}, Errors: {serializer.errors}"
            )
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        serializer.save()
        logger.info(f"Profile updated. User ID: {user.id}, Partial: {partial}")
        return Response(UserProfileSerializer(user).data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        return method_not_allowed('POST')

    def delete(self, request, *args, **kwargs):
        return method_not_allowed('DELETE')


class PasswordChangeView(APIView):
    """
    POST /api/auth/password/
    Body: {"current_password": ..., "new_password": ..., "confirm_password": ...}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = PasswordChangeSerializer(data=request.data, context={'request': request})
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            AccountDirectory().change_password(
                request.user.id,
                serializer.validated_data['current_password'],
                serializer.validated_data['new_password'],
            )
        except MarketplaceError as e:
            return rejected(request, 'Password change', e)

        return Response({'detail': 'Password updated successfully.'}, status=status.HTTP_200_OK)


class AdminUserListView(generics.ListAPIView):
    """
    Administrator listing of all accounts, paginated.

    GET /api/users/?page=N
    """
    permission_classes = [IsAuthenticated, IsAdminRole]
    pagination_class = PageNumberPagination
    serializer_class = UserProfileSerializer

    def get_queryset(self):
        return User.objects.order_by('id')


class AdminUserDetailView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request, user_id, *args, **kwargs):
        try:
            user = AccountDirectory().get_by_id(user_id)
        except NotFound as e:
            return Response({'detail': e.message}, status=status.HTTP_404_NOT_FOUND)
        return Response(UserProfileSerializer(user).data, status=status.HTTP_200_OK)


class AdminUserPasswordView(APIView):
    """
    PUT /api/users/<user_id>/password/
    Body: {"new_password": "..."}
    """
    permission_classes = [IsAuthenticated, IsAdminRole]

    def put(self, request, user_id, *args, **kwargs):
        serializer = AdminPasswordSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            AccountDirectory().set_password(user_id, serializer.validated_data['new_password'])
        except MarketplaceError as e:
            return rejected(request, 'Administrator password reset', e)

        return Response({'detail': 'Password updated successfully.'}, status=status.HTTP_200_OK)


class AdminUserStatusView(APIView):
    """
    PUT /api/users/<user_id>/status/
    Body: {"active": false}
    """
    permission_classes = [IsAuthenticated, IsAdminRole]

    def put(self, request, user_id, *args, **kwargs):
        serializer = UserStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            user = AccountDirectory().set_active(user_id, serializer.validated_data['active'])
        except MarketplaceError as e:
            return rejected(request, 'Account status change', e)

        return Response(UserProfileSerializer(user).data, status=status.HTTP_200_OK)


class AdminUserAvailabilityView(APIView):
    """
    PUT /api/users/<user_id>/availability/
    Body: {"available": true}
    """
    permission_classes = [IsAuthenticated, IsAdminRole]

    def put(self, request, user_id, *args, **kwargs):
        serializer = UserAvailabilitySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            user = AccountDirectory().set_available(user_id, serializer.validated_data['available'])
        except MarketplaceError as e:
            return rejected(request, 'Availability change', e)

        return Response(UserProfileSerializer(user).data, status=status.HTTP_200_OK)


# ============================================================================
# Catalog Views
# ============================================================================

class ProductListCreateView(APIView):
    """
    API endpoint for browsing the catalog and adding to it.

    GET /api/products/
    Query parameters (all optional):
    - category: Case-insensitive substring of the category slug
    - search: Case-insensitive substring of the name
    - item_type: PRODUCT or SERVICE

    POST /api/products/ (administrators only)
    """
    permission_classes = [IsAdminRoleOrReadOnly]

    def get(self, request, *args, **kwargs):
        queryset = Product.objects.select_related('provider').order_by('-created_at', '-id')

        category = request.query_params.get('category', '').strip()
        if category:
            queryset = queryset.in_category(category)

        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.search(search)

        item_type = request.query_params.get('item_type', '').strip().upper()
        if item_type:
            if item_type not in dict(Product.ITEM_TYPE_CHOICES):
                return Response(
                    {'detail': f'Invalid item_type "{item_type}". Must be PRODUCT or SERVICE.'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            queryset = queryset.filter(item_type=item_type)

        return Response(ProductSerializer(queryset, many=True, context={'request': request}).data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = ProductWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        product = serializer.save()
        logger.info(
            f"Product created. Product ID: {product.pk}, Name: {product.name}, "
            f"Admin ID: {request.user.id}"
        )
        return Response(ProductSerializer(product, context={'request': request}).data, status=status.HTTP_201_CREATED)


class ProductDetailView(APIView):
    """
    GET /api/products/<product_id>/
    PUT/PATCH/DELETE /api/products/<product_id>/ (administrators only)

    A product that has orders cannot be deleted; mark it unavailable
    instead.
    """
    permission_classes = [IsAdminRoleOrReadOnly]

    def get(self, request, product_id, *args, **kwargs):
        try:
            product = Product.objects.select_related('provider').get_by_id(product_id)
        except NotFound as e:
            return Response({'detail': e.message}, status=status.HTTP_404_NOT_FOUND)
        return Response(ProductSerializer(product, context={'request': request}).data, status=status.HTTP_200_OK)

    def put(self, request, product_id, *args, **kwargs):
        return self._update(request, product_id, partial=False)

    def patch(self, request, product_id, *args, **kwargs):
        return self._update(request, product_id, partial=True)

    def _update(self, request, product_id, partial):
        # Row lock held from read to write
        with transaction.atomic():
            try:
                product = Product.objects.select_for_update().get_by_id(product_id)
            except NotFound as e:
                return Response({'detail': e.message}, status=status.HTTP_404_NOT_FOUND)

            serializer = ProductWriteSerializer(product, data=request.data, partial=partial)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            product = serializer.save()

        logger.info(
            f"Product updated. Product ID: {product.pk}, Admin ID: {request.user.id}, "
            f"Partial: {partial}"
        )
        return Response(ProductSerializer(product, context={'request': request}).data, status=status.HTTP_200_OK)

    def delete(self, request, product_id, *args, **kwargs):
        try:
            product = Product.objects.get_by_id(product_id)
        except NotFound as e:
            return Response({'detail': e.message}, status=status.HTTP_404_NOT_FOUND)

        try:
            with transaction.atomic():
                product.delete()
        except ProtectedError:
            logger.warning(
                f"Refused to delete product with orders. Product ID: {product_id}, "
                f"Admin ID: {request.user.id}, IP: {get_client_ip(request)}"
            )
            return Response(
                {'detail': 'Product has orders and cannot be deleted. Mark it unavailable instead.'},
                status=status.HTTP_400_BAD_REQUEST
            )

        logger.info(f"Product deleted. Product ID: {product_id}, Admin ID: {request.user.id}")
        return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryListView(APIView):
    """
    GET /api/categories/

    Response: [{"slug": "cricket", "productCount": 4}, ...]
    """
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        rows = (
            Product.objects.exclude(category='')
            .values('category')
            .annotate(product_count=Count('id'))
            .order_by('category')
        )
        data = [{'slug': row['category'], 'productCount': row['product_count']} for row in rows]
        return Response(CategorySerializer(data, many=True).data, status=status.HTTP_200_OK)


class ServiceListCreateView(APIView):
    """
    GET /api/services/ lists available services.
    POST /api/services/ offers a new service; the caller becomes its provider.
    """
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request, *args, **kwargs):
        queryset = (
            Product.objects.services().available()
            .select_related('provider')
            .order_by('-created_at', '-id')
        )
        return Response(ProductSerializer(queryset, many=True, context={'request': request}).data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = ServiceCreateSerializer(data=request.data, context={'request': request})
        if not serializer.is_valid():
            logger.warning(
                f"Service creation validation failed. User ID: {request.user.id}, "
                f"Errors: {serializer.errors}, IP: {get_client_ip(request)}"
            )
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        service = serializer.save()
        logger.info(
            f"Service created. Product ID: {service.pk}, Provider ID: {request.user.id}"
        )
        return Response(ProductSerializer(service, context={'request': request}).data, status=status.HTTP_201_CREATED)


# ============================================================================
# Order Views
# ============================================================================

class OrderViewMixin:
    """Shared lifecycle manager construction for order views."""

    permission_classes = [IsAuthenticated]
    manager_class = OrderLifecycleManager

    def get_manager(self):
        return self.manager_class()


class OrderListCreateView(OrderViewMixin, APIView):
    """
    GET /api/orders/?status=PENDING
    POST /api/orders/

    Request body (POST):
    {
        "userId": 3,
        "productId": 7,
        "quantity": 2,
        "shippingAddress": "12 High Street",
        "paymentMethod": "CARD",
        "notes": ""
    }

    Error responses:
    - 400: Unknown user or product, invalid quantity, insufficient stock,
      unknown status filter
    - 401: Missing or invalid JWT token
    """

    def get(self, request, *args, **kwargs):
        try:
            orders = self.get_manager().list_orders(status=request.query_params.get('status'))
        except MarketplaceError as e:
            return rejected(request, 'Order listing', e)
        return Response(OrderSerializer(orders, many=True).data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            order = self.get_manager().create_order(
                user_id=data['user_id'],
                product_id=data['product_id'],
                quantity=data['quantity'],
                shipping_address=data.get('shipping_address', ''),
                payment_method=data.get('payment_method', ''),
                notes=data.get('notes', ''),
            )
        except MarketplaceError as e:
            return rejected(request, 'Order creation', e)
        except Exception:
            logger.error(
                f"Unexpected error creating order. Payload: {dict(data)}, "
                f"IP: {get_client_ip(request)}",
                exc_info=True
            )
            raise

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class OrderPlaceView(OrderViewMixin, APIView):
    """
    POST /api/orders/place/

    Same as order creation, but the buyer is the authenticated user.
    """

    def post(self, request, *args, **kwargs):
        serializer = OrderPlaceSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self.get_manager().place_order(serializer.validated_data, request.user)
        except MarketplaceError as e:
            return rejected(request, 'Order placement', e)
        except Exception:
            logger.error(
                f"Unexpected error placing order. User ID: {request.user.id}, "
                f"IP: {get_client_ip(request)}",
                exc_info=True
            )
            raise

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    def get(self, request, *args, **kwargs):
        return method_not_allowed('GET')


class OrderDetailView(OrderViewMixin, APIView):
    """GET /api/orders/<order_id>/"""

    def get(self, request, order_id, *args, **kwargs):
        try:
            order = self.get_manager().get_order(order_id)
        except NotFound as e:
            return Response({'detail': e.message}, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class UserOrdersView(OrderViewMixin, APIView):
    """GET /api/orders/user/<user_id>/ newest first."""

    def get(self, request, user_id, *args, **kwargs):
        orders = self.get_manager().orders_for_user(user_id)
        return Response(OrderSerializer(orders, many=True).data, status=status.HTTP_200_OK)


class MyOrdersView(OrderViewMixin, APIView):
    """GET /api/orders/mine/ newest first."""

    def get(self, request, *args, **kwargs):
        orders = self.get_manager().orders_for_user(request.user.id)
        return Response(OrderSerializer(orders, many=True).data, status=status.HTTP_200_OK)


class OrderStatusView(OrderViewMixin, APIView):
    """
    PUT /api/orders/<order_id>/status/
    Body: {"status": "SHIPPED"}

    Moving an order to CANCELLED returns its units to stock.

    Error responses:
    - 400: Unknown order, unknown status, or transition not allowed
    """

    def put(self, request, order_id, *args, **kwargs):
        serializer = OrderStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self.get_manager().update_order_status(
                order_id, serializer.validated_data['status']
            )
        except MarketplaceError as e:
            return rejected(request, f'Status change of order {order_id}', e)

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    def get(self, request, *args, **kwargs):
        return method_not_allowed('GET')

    def post(self, request, *args, **kwargs):
        return method_not_allowed('POST')

    def delete(self, request, *args, **kwargs):
        return method_not_allowed('DELETE')


class OrderCancelView(OrderViewMixin, APIView):
    """
    PUT /api/orders/<order_id>/cancel/

    Only PENDING or CONFIRMED orders can be cancelled.
    """

    def put(self, request, order_id, *args, **kwargs):
        try:
            order = self.get_manager().cancel_order(order_id)
        except MarketplaceError as e:
            return rejected(request, f'Cancellation of order {order_id}', e)

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


# ============================================================================
# Review Views
# ============================================================================

class ReviewListCreateView(APIView):
    """
    GET /api/reviews/ lists every review, newest first.
    POST /api/reviews/ creates a review authored by the caller.

    Request body (POST): {"productId": 7, "rating": 5, "comment": "Great bat"}

    Error responses:
    - 400: Invalid rating
    - 401: Not authenticated
    - 404: Product not found
    """
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request, *args, **kwargs):
        reviews = Review.objects.select_related('user', 'product').order_by('-created_at', '-id')
        return Response(ReviewSerializer(reviews, many=True).data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = ReviewCreateSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            review = serializer.save()

        logger.info(
            f"Review created. Review ID: {review.pk}, User ID: {request.user.id}, "
            f"Product ID: {review.product_id}, Rating: {review.rating}"
        )
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class ReviewDetailView(APIView):
    """
    GET /api/reviews/<review_id>/
    PUT/PATCH /api/reviews/<review_id>/ (author only)
    DELETE /api/reviews/<review_id>/ (administrators only)
    """
    permission_classes = [IsAuthenticatedOrReadOnly]

    def _get_review(self, review_id):
        return Review.objects.select_related('user', 'product').filter(pk=review_id).first()

    def get(self, request, review_id, *args, **kwargs):
        review = self._get_review(review_id)
        if review is None:
            return Response({'detail': 'Review not found.'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ReviewSerializer(review).data, status=status.HTTP_200_OK)

    def put(self, request, review_id, *args, **kwargs):
        return self._update(request, review_id, partial=False)

    def patch(self, request, review_id, *args, **kwargs):
        return self._update(request, review_id, partial=True)

    def _update(self, request, review_id, partial):
        review = self._get_review(review_id)
        if review is None:
            return Response({'detail': 'Review not found.'}, status=status.HTTP_404_NOT_FOUND)

        if not IsReviewAuthor().has_object_permission(request, self, review):
            logger.warning(
                f"Review update by non-author. Review ID: {review_id}, "
                f"User ID: {request.user.id}, IP: {get_client_ip(request)}"
            )
            return Response(
                {'detail': IsReviewAuthor.message},
                status=status.HTTP_403_FORBIDDEN
            )

        serializer = ReviewUpdateSerializer(review, data=request.data, partial=partial)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            review = serializer.save()

        logger.info(f"Review updated. Review ID: {review.pk}, User ID: {request.user.id}")
        return Response(ReviewSerializer(review).data, status=status.HTTP_200_OK)

    def delete(self, request, review_id, *args, **kwargs):
        if not IsAdminRole().has_permission(request, self):
            return Response(
                {'detail': IsAdminRole.message},
                status=status.HTTP_403_FORBIDDEN
            )

        review = self._get_review(review_id)
        if review is None:
            return Response({'detail': 'Review not found.'}, status=status.HTTP_404_NOT_FOUND)

        with transaction.atomic():
            review.delete()

        logger.info(f"Review deleted. Review ID: {review_id}, Admin ID: {request.user.id}")
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductReviewsView(APIView):
    """GET /api/reviews/product/<product_id>/ newest first."""
    permission_classes = [AllowAny]

    def get(self, request, product_id, *args, **kwargs):
        try:
            product = Product.objects.get_by_id(product_id)
        except NotFound as e:
            return Response({'detail': e.message}, status=status.HTTP_404_NOT_FOUND)

        reviews = (
            product.reviews.select_related('user', 'product')
            .order_by('-created_at', '-id')
        )
        return Response(ReviewSerializer(reviews, many=True).data, status=status.HTTP_200_OK)


class UserReviewsView(APIView):
    """GET /api/reviews/user/<user_id>/ newest first."""
    permission_classes = [AllowAny]

    def get(self, request, user_id, *args, **kwargs):
        reviews = (
            Review.objects.filter(user_id=user_id)
            .select_related('user', 'product')
            .order_by('-created_at', '-id')
        )
        return Response(ReviewSerializer(reviews, many=True).data, status=status.HTTP_200_OK)


class ProductRatingAverageView(APIView):
    """
    GET /api/reviews/product/<product_id>/average/

    Response: {"productId": 7, "averageRating": 4.5, "totalReviews": 2}
    averageRating is 0.0 when the product has no reviews.
    """
    permission_classes = [AllowAny]

    def get(self, request, product_id, *args, **kwargs):
        try:
            product = Product.objects.get_by_id(product_id)
        except NotFound as e:
            return Response({'detail': e.message}, status=status.HTTP_404_NOT_FOUND)

        stats = product.reviews.aggregate(average=Avg('rating'), total=Count('id'))

        return Response({
            'productId': product.pk,
            'averageRating': round(float(stats['average'] or 0), 2),
            'totalReviews': stats['total'],
        }, status=status.HTTP_200_OK)
