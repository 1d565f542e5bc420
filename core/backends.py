"""
Authentication backend that verifies credentials through the account directory.
"""

from django.contrib.auth.backends import ModelBackend

from .accounts import AccountDirectory
from .exceptions import NotFound


class UsernameBackend(ModelBackend):
    """
    Authenticate by case-insensitive username.

    Used by the Django admin login and by ``django.contrib.auth.authenticate``.
    Inactive accounts are rejected.
    """

    directory_class = AccountDirectory

    def authenticate(self, request, username=None, password=None, **kwargs):
        """
        Args:
            request: HTTP request object
            username: Account username
            password: Account password

        Returns:
            User object if authentication successful, None otherwise
        """
        if username is None:
            username = kwargs.get('username')

        if username is None or password is None:
            return None

        return self.directory_class().authenticate(username, password)

    def get_user(self, user_id):
        try:
            user = self.directory_class().get_by_id(user_id)
        except NotFound:
            return None
        return user if self.user_can_authenticate(user) else None
