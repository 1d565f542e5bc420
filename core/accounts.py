"""
Account directory: user lookup and credential verification.
"""

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import check_password, make_password

from .exceptions import NotFound, InvalidArgument

logger = logging.getLogger(__name__)


class AccountDirectory:
    """
    Look up users and verify their credentials.

    Password checking is delegated to ``password_matcher``, a callable
    ``(raw_password, encoded_password) -> bool``. It defaults to Django's
    configured password hashers, and tests or other callers can inject their
    own.

    Usage:
        directory = AccountDirectory()
        user = directory.authenticate('alice', 'S3cret!pass')
    """

    def __init__(self, password_matcher=None, password_encoder=None):
        self.password_matcher = password_matcher or check_password
        self.password_encoder = password_encoder or make_password
        self.user_model = get_user_model()

    def get_by_id(self, user_id):
        """
        Fetch a user by primary key.

        Raises:
            NotFound: If no user has this ID
        """
        try:
            return self.user_model.objects.get(pk=user_id)
        except (self.user_model.DoesNotExist, ValueError, TypeError):
            raise NotFound(f'User with ID {user_id} does not exist.')

    def get_by_username(self, username):
        """
        Fetch a user by username (case-insensitive).

        Raises:
            NotFound: If no user has this username
        """
        if not username:
            raise NotFound('User not found.')
        try:
            return self.user_model.objects.get(username__iexact=username.strip())
        except self.user_model.DoesNotExist:
            raise NotFound('User not found.')

    def matches(self, raw_password, encoded_password):
        """Check a raw password against a stored hash."""
        if raw_password is None or not encoded_password:
            return False
        return self.password_matcher(raw_password, encoded_password)

    def authenticate(self, username, password):
        """
        Verify a username/password pair.

        Inactive accounts never authenticate.

        Returns:
            User if the credentials are valid and the account is active,
            None otherwise
        """
        try:
            user = self.get_by_username(username)
        except NotFound:
            # Run the hasher once to reduce the timing difference between an
            # existing and a nonexistent user
            self.password_encoder(password)
            return None

        if not self.matches(password, user.password):
            return None

        if not user.is_active:
            return None

        return user

    def change_password(self, user_id, current_password, new_password):
        """
        Change a user's password after verifying the current one.

        Raises:
            NotFound: If the user does not exist
            InvalidArgument: If the current password is wrong
        """
        user = self.get_by_id(user_id)
        if not self.matches(current_password, user.password):
            raise InvalidArgument('Current password is incorrect.')
        user.password = self.password_encoder(new_password)
        user.save(update_fields=['password', 'updated_at'])
        logger.info(f"Password changed. User ID: {user.pk}")
        return user

    def set_password(self, user_id, new_password):
        """Set a user's password without checking the old one (admin use)."""
        user = self.get_by_id(user_id)
        user.password = self.password_encoder(new_password)
        user.save(update_fields=['password', 'updated_at'])
        logger.info(f"Password reset by administrator. User ID: {user.pk}")
        return user

    def set_active(self, user_id, active):
        """Activate or deactivate an account."""
        user = self.get_by_id(user_id)
        user.is_active = active
        user.save(update_fields=['is_active', 'updated_at'])
        logger.info(f"Account active status changed. User ID: {user.pk}, Active: {active}")
        return user

    def set_available(self, user_id, available):
        """Set a user's availability flag."""
        user = self.get_by_id(user_id)
        user.is_available = available
        user.save(update_fields=['is_available', 'updated_at'])
        logger.info(f"Availability changed. User ID: {user.pk}, Available: {available}")
        return user
