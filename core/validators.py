"""
Custom validators for marketplace models.
"""

import re
from django.core.exceptions import ValidationError


def validate_phone_number(value):
    """
    Validate phone number format.

    Accepts international formats with optional country codes, spaces, dashes, and parentheses.
    Requires at least 10 digits.

    Valid formats:
    - +1-234-567-8900
    - +44 20 7946 0958
    - +1 (234) 567-8900
    - 2345678900

    Args:
        value: Phone number string to validate

    Raises:
        ValidationError: If phone number format is invalid
    """
    if not value:  # Empty string is allowed (optional field)
        return

    if not re.match(r'^[\d\s\-\+\(\)]+$', value):
        raise ValidationError(
            'Phone number can only contain digits, spaces, dashes, parentheses, and plus sign.',
            code='invalid_phone_chars'
        )

    digits = re.sub(r'\D', '', value)

    if len(digits) < 10:
        raise ValidationError(
            'Phone number must contain at least 10 digits.',
            code='phone_too_short'
        )

    if len(set(digits)) == 1:
        raise ValidationError(
            'Phone number cannot be all the same digit.',
            code='invalid_phone_pattern'
        )


def validate_category(value):
    """
    Validate a catalog category slug.

    Categories are lowercase words separated by single dashes
    (e.g. 'cricket', 'indoor-games').

    Raises:
        ValidationError: If the category is not a valid slug
    """
    if not value:
        return

    if not re.match(r'^[a-z0-9]+(-[a-z0-9]+)*$', value):
        raise ValidationError(
            'Category must be lowercase letters and digits separated by single dashes.',
            code='invalid_category'
        )


def validate_order_quantity(value):
    """
    Validate an order quantity is a positive integer.

    Booleans are rejected even though they are ints in Python.

    Raises:
        ValidationError: If quantity is missing, not an integer, or not positive
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            'Quantity must be an integer.',
            code='invalid_quantity'
        )

    if value <= 0:
        raise ValidationError(
            'Quantity must be greater than 0.',
            code='non_positive_quantity'
        )


def validate_product_image(image):
    """
    Validate an uploaded catalog image.

    Checks:
    - File size (max 5MB)
    - File format (jpg, jpeg, png, webp)

    Raises:
        ValidationError: If image is invalid
    """
    if not image:
        return

    max_size = 5 * 1024 * 1024
    if image.size > max_size:
        raise ValidationError(
            f'Image file size cannot exceed 5MB. Current size: {image.size / (1024 * 1024):.2f}MB',
            code='image_too_large'
        )

    valid_extensions = ['jpg', 'jpeg', 'png', 'webp']
    file_name = image.name.lower()

    if not any(file_name.endswith(f'.{ext}') for ext in valid_extensions):
        raise ValidationError(
            f'Invalid image format. Allowed formats: {", ".join(valid_extensions)}',
            code='invalid_image_format'
        )

    content_type = getattr(image, 'content_type', None)
    if content_type and content_type not in ('image/jpeg', 'image/png', 'image/webp'):
        raise ValidationError(
            f'Invalid image content type: {content_type}',
            code='invalid_content_type'
        )
