"""
Authentication API tests: registration, login, logout and token refresh.
"""

import jwt
import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.throttling import ScopedRateThrottle
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()


@pytest.fixture
def registration_data():
    return {
        'username': 'newplayer',
        'email': 'NewPlayer@Example.com',
        'password': 'StrongPass123!',
        'confirm_password': 'StrongPass123!',
        'full_name': 'New Player',
        'phone': '+44 20 7946 0958',
    }


def login(client, username='alice', password='SecurePass123!', **extra):
    return client.post(reverse('user_login'), {
        'username': username,
        'password': password,
    }, format='json', **extra)


# ============================================================================
# 1. REGISTRATION
# ============================================================================

@pytest.mark.django_db
class TestRegistration:

    def test_register_user(self, api_client, registration_data):
        response = api_client.post(reverse('user_register'), registration_data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['username'] == 'newplayer'
        assert response.data['email'] == 'newplayer@example.com'
        assert response.data['role'] == User.ROLE_USER
        assert 'password' not in response.data
        assert 'confirm_password' not in response.data

        user = User.objects.get(username='newplayer')
        assert user.check_password('StrongPass123!')
        assert user.is_active

    def test_password_mismatch(self, api_client, registration_data):
        registration_data['confirm_password'] = 'Different123!'

        response = api_client.post(reverse('user_register'), registration_data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'confirm_password' in response.data

    def test_weak_password(self, api_client, registration_data):
        registration_data['password'] = registration_data['confirm_password'] = 'short'

        response = api_client.post(reverse('user_register'), registration_data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data

    def test_duplicate_username_case_insensitive(self, api_client, buyer, registration_data):
        registration_data['username'] = 'ALICE'

        response = api_client.post(reverse('user_register'), registration_data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'username' in response.data

    def test_duplicate_email(self, api_client, buyer, registration_data):
        registration_data['email'] = 'Alice@Example.com'

        response = api_client.post(reverse('user_register'), registration_data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'email' in response.data

    def test_cannot_self_register_as_admin(self, api_client, registration_data):
        registration_data['role'] = User.ROLE_ADMIN

        response = api_client.post(reverse('user_register'), registration_data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'role' in response.data
        assert not User.objects.filter(username='newplayer').exists()

    def test_privilege_flags_are_ignored(self, api_client, registration_data):
        registration_data.update({'is_staff': True, 'is_superuser': True})

        response = api_client.post(reverse('user_register'), registration_data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        user = User.objects.get(username='newplayer')
        assert not user.is_staff
        assert not user.is_superuser

    def test_invalid_phone(self, api_client, registration_data):
        registration_data['phone'] = 'call me'

        response = api_client.post(reverse('user_register'), registration_data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'phone' in response.data


# ============================================================================
# 2. LOGIN
# ============================================================================

@pytest.mark.django_db
class TestLogin:

    def test_login_returns_tokens_and_user(self, api_client, buyer):
        response = login(api_client)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user'] == {'id': buyer.id, 'username': 'alice', 'role': 'USER'}
        token = AccessToken(response.data['access'])
        assert str(token['user_id']) == str(buyer.id)
        assert response.data['refresh']

    def test_access_token_is_signed_hs256(self, api_client, buyer):
        access = login(api_client).data['access']

        assert jwt.get_unverified_header(access)['alg'] == 'HS256'
        claims = jwt.decode(access, settings.SECRET_KEY, algorithms=['HS256'])
        assert claims['token_type'] == 'access'
        assert str(claims['user_id']) == str(buyer.id)
        assert claims['exp'] > claims['iat']

    def test_login_updates_last_login(self, api_client, buyer):
        assert buyer.last_login is None

        login(api_client)

        buyer.refresh_from_db()
        assert buyer.last_login is not None

    def test_wrong_password(self, api_client, buyer):
        response = login(api_client, password='WrongPass123!')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {'detail': 'Invalid credentials'}

    def test_unknown_user_gets_same_message(self, api_client):
        response = login(api_client, username='ghost')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {'detail': 'Invalid credentials'}

    def test_inactive_user(self, api_client, buyer):
        buyer.is_active = False
        buyer.save()

        response = login(api_client)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_missing_fields(self, api_client):
        response = api_client.post(reverse('user_login'), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert {'username', 'password'} <= set(response.data)

    def test_login_is_rate_limited(self, api_client, buyer, monkeypatch):
        monkeypatch.setattr(ScopedRateThrottle, 'THROTTLE_RATES', {'login': '3/minute'})

        codes = [login(api_client, password='WrongPass123!').status_code for _ in range(4)]

        assert codes[:3] == [status.HTTP_401_UNAUTHORIZED] * 3
        assert codes[3] == status.HTTP_429_TOO_MANY_REQUESTS


# ============================================================================
# 3. LOGOUT AND TOKEN REFRESH
# ============================================================================

@pytest.mark.django_db
class TestLogoutAndRefresh:

    def test_refresh_returns_new_access_token(self, api_client, buyer):
        tokens = login(api_client).data

        response = api_client.post(reverse('token_refresh'), {'refresh': tokens['refresh']}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['access']

    def test_logout_blacklists_refresh_token(self, api_client, buyer):
        tokens = login(api_client).data
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = api_client.post(reverse('user_logout'), {'refresh': tokens['refresh']}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'detail': 'Successfully logged out.'}
        assert BlacklistedToken.objects.filter(token__user=buyer).exists()

        api_client.credentials()
        refresh = api_client.post(reverse('token_refresh'), {'refresh': tokens['refresh']}, format='json')
        assert refresh.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_with_garbage_token(self, buyer_client):
        response = buyer_client.post(reverse('user_logout'), {'refresh': 'not-a-token'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_twice(self, api_client, buyer):
        tokens = login(api_client).data
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        api_client.post(reverse('user_logout'), {'refresh': tokens['refresh']}, format='json')

        response = api_client.post(reverse('user_logout'), {'refresh': tokens['refresh']}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_requires_authentication(self, api_client, buyer):
        tokens = login(api_client).data

        response = api_client.post(reverse('user_logout'), {'refresh': tokens['refresh']}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_verify_token(self, api_client, buyer):
        tokens = login(api_client).data

        response = api_client.post(reverse('token_verify'), {'token': tokens['access']}, format='json')

        assert response.status_code == status.HTTP_200_OK
