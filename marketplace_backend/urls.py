"""
URL configuration for the marketplace_backend project.

All API endpoints live under /api/; the Django admin is at /admin/.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path
from rest_framework_simplejwt.views import (
    TokenRefreshView,
    TokenVerifyView,
)
from core.views import (
    UserRegistrationView,
    LoginView,
    LogoutView,
    UserProfileView,
    PasswordChangeView,
    AdminUserListView,
    AdminUserDetailView,
    AdminUserPasswordView,
    AdminUserStatusView,
    AdminUserAvailabilityView,
    ProductListCreateView,
    ProductDetailView,
    CategoryListView,
    ServiceListCreateView,
    OrderListCreateView,
    OrderPlaceView,
    OrderDetailView,
    UserOrdersView,
    MyOrdersView,
    OrderStatusView,
    OrderCancelView,
    ReviewListCreateView,
    ReviewDetailView,
    ProductReviewsView,
    UserReviewsView,
    ProductRatingAverageView,
)


urlpatterns = [
    path('admin/', admin.site.urls),

    # Authentication endpoints
    path('api/auth/register/', UserRegistrationView.as_view(), name='user_register'),
    path('api/auth/login/', LoginView.as_view(), name='user_login'),
    path('api/auth/logout/', LogoutView.as_view(), name='user_logout'),
    path('api/auth/profile/', UserProfileView.as_view(), name='user_profile'),
    path('api/auth/password/', PasswordChangeView.as_view(), name='password_change'),

    # JWT endpoints
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    # Account administration
    path('api/users/', AdminUserListView.as_view(), name='admin_user_list'),
    path('api/users/<int:user_id>/', AdminUserDetailView.as_view(), name='admin_user_detail'),
    path('api/users/<int:user_id>/password/', AdminUserPasswordView.as_view(), name='admin_user_password'),
    path('api/users/<int:user_id>/status/', AdminUserStatusView.as_view(), name='admin_user_status'),
    path('api/users/<int:user_id>/availability/', AdminUserAvailabilityView.as_view(), name='admin_user_availability'),

    # Catalog endpoints
    path('api/products/', ProductListCreateView.as_view(), name='product_list'),
    path('api/products/<int:product_id>/', ProductDetailView.as_view(), name='product_detail'),
    path('api/categories/', CategoryListView.as_view(), name='category_list'),
    path('api/services/', ServiceListCreateView.as_view(), name='service_list'),

    # Order endpoints
    path('api/orders/', OrderListCreateView.as_view(), name='order_list'),
    path('api/orders/place/', OrderPlaceView.as_view(), name='order_place'),
    path('api/orders/mine/', MyOrdersView.as_view(), name='order_mine'),
    path('api/orders/user/<int:user_id>/', UserOrdersView.as_view(), name='order_user'),
    path('api/orders/<int:order_id>/', OrderDetailView.as_view(), name='order_detail'),
    path('api/orders/<int:order_id>/status/', OrderStatusView.as_view(), name='order_status'),
    path('api/orders/<int:order_id>/cancel/', OrderCancelView.as_view(), name='order_cancel'),

    # Review endpoints
    path('api/reviews/', ReviewListCreateView.as_view(), name='review_list'),
    path('api/reviews/<int:review_id>/', ReviewDetailView.as_view(), name='review_detail'),
    path('api/reviews/product/<int:product_id>/', ProductReviewsView.as_view(), name='review_product'),
    path('api/reviews/product/<int:product_id>/average/', ProductRatingAverageView.as_view(), name='review_product_average'),
    path('api/reviews/user/<int:user_id>/', UserReviewsView.as_view(), name='review_user'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
