"""
Tests for catalog queries and the conditional stock updates on Product.
"""

from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from core.exceptions import InsufficientStock, NotFound
from core.models import Product


@pytest.mark.django_db
class TestStockDecrement:

    def test_decrement_reduces_stock(self, bat):
        assert Product.objects.decrement_stock(bat.id, 3) is True
        bat.refresh_from_db()
        assert bat.stock == 7

    def test_decrement_to_exactly_zero(self, bat):
        Product.objects.decrement_stock(bat.id, 10)
        bat.refresh_from_db()
        assert bat.stock == 0

    def test_decrement_beyond_stock_raises_and_leaves_stock(self, bat):
        with pytest.raises(InsufficientStock) as exc_info:
            Product.objects.decrement_stock(bat.id, 11)

        assert exc_info.value.available == 10
        assert exc_info.value.requested == 11
        bat.refresh_from_db()
        assert bat.stock == 10

    def test_decrement_for_service_is_noop(self, coaching):
        assert Product.objects.decrement_stock(coaching.id, 50) is False
        coaching.refresh_from_db()
        assert coaching.stock is None

    def test_decrement_missing_product(self, db):
        with pytest.raises(NotFound):
            Product.objects.decrement_stock(999999, 1)


@pytest.mark.django_db
class TestStockIncrement:

    def test_increment_adds_stock(self, bat):
        assert Product.objects.increment_stock(bat.id, 4) is True
        bat.refresh_from_db()
        assert bat.stock == 14

    def test_increment_for_service_is_noop(self, coaching):
        assert Product.objects.increment_stock(coaching.id, 4) is False

    def test_increment_missing_product(self, db):
        with pytest.raises(NotFound):
            Product.objects.increment_stock(999999, 1)


@pytest.mark.django_db
class TestCatalogQueries:

    def test_get_by_id(self, bat):
        assert Product.objects.get_by_id(bat.id) == bat

    @pytest.mark.parametrize('bad_id', [424242, 'abc', None])
    def test_get_by_id_missing(self, bad_id):
        with pytest.raises(NotFound):
            Product.objects.get_by_id(bad_id)

    def test_filters(self, bat, coaching):
        gloves = Product.objects.create(
            name='Goalkeeper Gloves', price=Decimal('19.00'), stock=3,
            category='football', is_available=False
        )

        assert set(Product.objects.tangible()) == {bat, gloves}
        assert list(Product.objects.services()) == [coaching]
        assert gloves not in Product.objects.available()
        assert list(Product.objects.in_category('foot')) == [gloves]
        assert list(Product.objects.search('BAT')) == [bat]

    def test_has_stock_for(self, bat, coaching):
        assert bat.has_stock_for(10)
        assert not bat.has_stock_for(11)
        assert coaching.has_stock_for(10_000)
        assert bat.tracks_stock and not coaching.tracks_stock


@pytest.mark.django_db
class TestProductValidation:

    def test_product_requires_stock(self):
        with pytest.raises(ValidationError) as exc_info:
            Product.objects.create(name='Chess Set', price=Decimal('15.00'), stock=None)
        assert 'stock' in exc_info.value.message_dict

    def test_service_requires_provider(self):
        with pytest.raises(ValidationError) as exc_info:
            Product.objects.create(
                name='Racket Restringing', price=Decimal('12.00'),
                item_type=Product.TYPE_SERVICE
            )
        assert 'provider' in exc_info.value.message_dict

    def test_service_rejects_stock(self, provider):
        with pytest.raises(ValidationError) as exc_info:
            Product.objects.create(
                name='Racket Restringing', price=Decimal('12.00'), stock=5,
                item_type=Product.TYPE_SERVICE, provider=provider
            )
        assert 'stock' in exc_info.value.message_dict

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Product.objects.create(name='Yoga Mat', price=Decimal('-0.01'), stock=1)

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            Product.objects.create(name='   ', price=Decimal('1.00'), stock=1)

    def test_category_must_be_slug(self):
        with pytest.raises(ValidationError) as exc_info:
            Product.objects.create(name='Kettlebell', price=Decimal('30.00'), stock=1, category='Gym Gear')
        assert 'category' in exc_info.value.message_dict
