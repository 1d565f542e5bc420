"""
Review API tests.

Covers creation, author-only updates, administrator deletes, per-product and
per-user listings and the rating average endpoint.
"""

from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from core.models import Review


@pytest.fixture
def review(buyer, bat):
    return Review.objects.create(user=buyer, product=bat, rating=4, comment='Solid bat')


# ============================================================================
# 1. CREATION
# ============================================================================

@pytest.mark.django_db
class TestReviewCreation:

    def test_create_review(self, buyer_client, buyer, bat):
        response = buyer_client.post(reverse('review_list'), {
            'productId': bat.id, 'rating': 5, 'comment': 'Great pickup'
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['rating'] == 5
        assert response.data['user'] == {'id': buyer.id, 'username': 'alice'}
        assert response.data['product'] == {'id': bat.id, 'name': 'Pro Cricket Bat'}
        assert response.data['createdAt']

    def test_create_updates_product_rating(self, buyer_client, other_buyer, bat):
        Review.objects.create(user=other_buyer, product=bat, rating=2)

        buyer_client.post(reverse('review_list'), {'productId': bat.id, 'rating': 5}, format='json')

        bat.refresh_from_db()
        assert bat.total_reviews == 2
        assert bat.rating_average == Decimal('3.50')

    @pytest.mark.parametrize('rating', [0, 6, -1])
    def test_rating_out_of_range(self, buyer_client, bat, rating):
        response = buyer_client.post(reverse('review_list'), {
            'productId': bat.id, 'rating': rating
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'rating' in response.data
        assert not Review.objects.exists()

    def test_missing_rating(self, buyer_client, bat):
        response = buyer_client.post(reverse('review_list'), {'productId': bat.id}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_product_is_404(self, buyer_client):
        response = buyer_client.post(reverse('review_list'), {
            'productId': 987654, 'rating': 3
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_requires_authentication(self, api_client, bat):
        response = api_client.post(reverse('review_list'), {
            'productId': bat.id, 'rating': 3
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_author_comes_from_token(self, buyer_client, buyer, other_buyer, bat):
        response = buyer_client.post(reverse('review_list'), {
            'productId': bat.id, 'rating': 3, 'userId': other_buyer.id
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert Review.objects.get(pk=response.data['id']).user == buyer


# ============================================================================
# 2. READS
# ============================================================================

@pytest.mark.django_db
class TestReviewReads:

    def test_list_all_reviews(self, api_client, review, other_buyer, coaching):
        newer = Review.objects.create(user=other_buyer, product=coaching, rating=5)

        response = api_client.get(reverse('review_list'))

        assert response.status_code == status.HTTP_200_OK
        assert [r['id'] for r in response.data] == [newer.id, review.id]

    def test_review_detail(self, api_client, review):
        response = api_client.get(reverse('review_detail', args=[review.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['comment'] == 'Solid bat'

    def test_review_detail_not_found(self, api_client):
        response = api_client.get(reverse('review_detail', args=[987654]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_reviews_for_product(self, api_client, review, other_buyer, coaching):
        Review.objects.create(user=other_buyer, product=coaching, rating=1)

        response = api_client.get(reverse('review_product', args=[review.product_id]))

        assert [r['id'] for r in response.data] == [review.id]

    def test_reviews_for_missing_product(self, api_client):
        response = api_client.get(reverse('review_product', args=[987654]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_reviews_by_user(self, api_client, review, buyer, other_buyer, bat):
        Review.objects.create(user=other_buyer, product=bat, rating=1)

        response = api_client.get(reverse('review_user', args=[buyer.id]))

        assert [r['id'] for r in response.data] == [review.id]

    def test_average_rating(self, api_client, bat, buyer, other_buyer):
        Review.objects.create(user=buyer, product=bat, rating=5)
        Review.objects.create(user=other_buyer, product=bat, rating=4)

        response = api_client.get(reverse('review_product_average', args=[bat.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'productId': bat.id, 'averageRating': 4.5, 'totalReviews': 2}

    def test_average_rating_without_reviews(self, api_client, bat):
        response = api_client.get(reverse('review_product_average', args=[bat.id]))

        assert response.data == {'productId': bat.id, 'averageRating': 0.0, 'totalReviews': 0}

    def test_average_rating_is_rounded(self, api_client, bat, buyer, other_buyer, provider):
        for user, rating in ((buyer, 5), (other_buyer, 4), (provider, 4)):
            Review.objects.create(user=user, product=bat, rating=rating)

        response = api_client.get(reverse('review_product_average', args=[bat.id]))

        assert response.data['averageRating'] == 4.33


# ============================================================================
# 3. UPDATES AND DELETES
# ============================================================================

@pytest.mark.django_db
class TestReviewChanges:

    def test_author_updates_review(self, buyer_client, review, bat):
        response = buyer_client.patch(
            reverse('review_detail', args=[review.id]), {'rating': 2}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['rating'] == 2
        assert response.data['comment'] == 'Solid bat'
        bat.refresh_from_db()
        assert bat.rating_average == Decimal('2.00')

    def test_put_review(self, buyer_client, review):
        response = buyer_client.put(
            reverse('review_detail', args=[review.id]),
            {'rating': 3, 'comment': 'Handle wore out'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        review.refresh_from_db()
        assert review.comment == 'Handle wore out'

    def test_non_author_cannot_update(self, api_client, authenticate, review, other_buyer):
        response = authenticate(api_client, other_buyer).patch(
            reverse('review_detail', args=[review.id]), {'rating': 1}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        review.refresh_from_db()
        assert review.rating == 4

    def test_update_rejects_bad_rating(self, buyer_client, review):
        response = buyer_client.patch(
            reverse('review_detail', args=[review.id]), {'rating': 9}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_admin_deletes_review(self, admin_client, review, bat):
        response = admin_client.delete(reverse('review_detail', args=[review.id]))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Review.objects.filter(pk=review.id).exists()
        bat.refresh_from_db()
        assert bat.total_reviews == 0
        assert bat.rating_average == Decimal('0.00')

    def test_author_cannot_delete(self, buyer_client, review):
        response = buyer_client.delete(reverse('review_detail', args=[review.id]))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Review.objects.filter(pk=review.id).exists()

    def test_admin_delete_missing_review(self, admin_client):
        response = admin_client.delete(reverse('review_detail', args=[987654]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
