"""
Profile and password endpoints for the authenticated user.
"""

import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status

User = get_user_model()


@pytest.mark.django_db
class TestProfile:

    def test_get_profile(self, buyer_client, buyer):
        response = buyer_client.get(reverse('user_profile'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == buyer.id
        assert response.data['username'] == 'alice'
        assert response.data['address'] == '12 High Street'
        assert response.data['role'] == 'USER'
        assert 'password' not in response.data

    def test_profile_requires_authentication(self, api_client):
        response = api_client.get(reverse('user_profile'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_patch_profile(self, buyer_client, buyer):
        response = buyer_client.patch(reverse('user_profile'), {
            'full_name': 'Alice B. Buyer',
            'phone': '+1-234-567-8900',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['full_name'] == 'Alice B. Buyer'
        buyer.refresh_from_db()
        assert buyer.phone == '+1-234-567-8900'
        assert buyer.address == '12 High Street'

    def test_restricted_fields_are_ignored(self, buyer_client, buyer):
        response = buyer_client.patch(reverse('user_profile'), {
            'role': 'ADMIN',
            'username': 'mallory',
            'is_active': False,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        buyer.refresh_from_db()
        assert buyer.role == User.ROLE_USER
        assert buyer.username == 'alice'
        assert buyer.is_active

    def test_email_clash(self, buyer_client, other_buyer):
        response = buyer_client.patch(reverse('user_profile'), {
            'email': 'BOB@example.com'
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'email' in response.data

    def test_keeping_own_email_is_fine(self, buyer_client):
        response = buyer_client.put(reverse('user_profile'), {
            'email': 'alice@example.com',
            'full_name': 'Alice',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.parametrize('method', ['post', 'delete'])
    def test_method_not_allowed(self, buyer_client, method):
        response = getattr(buyer_client, method)(reverse('user_profile'))

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


@pytest.mark.django_db
class TestPasswordChange:

    def test_change_password(self, buyer_client, buyer):
        response = buyer_client.post(reverse('password_change'), {
            'current_password': 'SecurePass123!',
            'new_password': 'EvenBetterPass456!',
            'confirm_password': 'EvenBetterPass456!',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        buyer.refresh_from_db()
        assert buyer.check_password('EvenBetterPass456!')

    def test_wrong_current_password(self, buyer_client, buyer):
        response = buyer_client.post(reverse('password_change'), {
            'current_password': 'Guess123!',
            'new_password': 'EvenBetterPass456!',
            'confirm_password': 'EvenBetterPass456!',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['detail'] == 'Current password is incorrect.'
        buyer.refresh_from_db()
        assert buyer.check_password('SecurePass123!')

    def test_confirmation_mismatch(self, buyer_client):
        response = buyer_client.post(reverse('password_change'), {
            'current_password': 'SecurePass123!',
            'new_password': 'EvenBetterPass456!',
            'confirm_password': 'Different456!',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'confirm_password' in response.data

    def test_weak_new_password(self, buyer_client):
        response = buyer_client.post(reverse('password_change'), {
            'current_password': 'SecurePass123!',
            'new_password': 'abc',
            'confirm_password': 'abc',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'new_password' in response.data
