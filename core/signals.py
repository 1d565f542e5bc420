"""
Django signals for automatic product rating maintenance.

Receivers keep ``Product.rating_average`` and ``Product.total_reviews`` in
step with the product's reviews. They run inside the transaction that saved
or deleted the review, so a failure here rolls the review change back too.
"""

import logging
from decimal import Decimal
from django.db import transaction
from django.db.models import Avg, Count
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import Product, Review

logger = logging.getLogger(__name__)


def refresh_product_rating(product_id):
    """
    Recompute a product's rating average and review count from its reviews.

    The product row is locked while the aggregates are written. Nothing is
    written if the product no longer exists (e.g. cascading delete).

    Returns:
        tuple: (rating_average: Decimal, total_reviews: int)
    """
    with transaction.atomic():
        # Lock the product row to serialize concurrent review changes
        locked = list(Product.objects.select_for_update().filter(pk=product_id).values_list('pk', flat=True))

        stats = Review.objects.filter(product_id=product_id).aggregate(
            avg=Avg('rating'),
            total=Count('id')
        )
        average = (
            Decimal(str(stats['avg'])).quantize(Decimal('0.01'))
            if stats['avg'] is not None else Decimal('0.00')
        )
        total = stats['total'] or 0

        if locked:
            Product.objects.filter(pk=product_id).update(
                rating_average=average,
                total_reviews=total
            )

    return average, total


@receiver(post_save, sender=Review)
def update_rating_on_review_save(sender, instance, created, **kwargs):
    """
    Update the reviewed product's aggregates when a review is created or updated.

    Args:
        sender: The Review model class
        instance: The Review instance that was saved
        created: Boolean indicating if this is a new review
        **kwargs: Additional keyword arguments
    """
    try:
        average, total = refresh_product_rating(instance.product_id)
    except Exception as e:
        logger.error(
            f"Error updating rating for review {instance.id}: {e}",
            exc_info=True
        )
        # Re-raise to roll back the review change with the aggregates
        raise

    action = "created" if created else "updated"
    logger.info(
        f"Updated rating for review {instance.id} ({action}): "
        f"product={instance.product_id}, average={average}, total={total}"
    )


@receiver(post_delete, sender=Review)
def update_rating_on_review_delete(sender, instance, **kwargs):
    """
    Recompute the reviewed product's aggregates after a review is deleted.

    With no reviews left the average drops back to 0.00.
    """
    try:
        average, total = refresh_product_rating(instance.product_id)
    except Exception as e:
        logger.error(
            f"Error updating rating after deleting review {instance.id}: {e}",
            exc_info=True
        )
        raise

    logger.info(
        f"Updated rating after deleting review {instance.id}: "
        f"product={instance.product_id}, average={average}, total={total}"
    )
