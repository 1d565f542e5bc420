"""
Domain exceptions for the marketplace.

Raised by the service layer (``core.services``, ``core.accounts`` and the
catalog queryset) when a business rule is violated. Views catch them and
translate them into client error responses.
"""


class MarketplaceError(Exception):
    """Base class for all client-facing marketplace errors."""

    default_message = 'The request could not be processed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(MarketplaceError):
    """A referenced user, product, order or review does not exist."""

    default_message = 'The requested resource was not found.'


class InvalidArgument(MarketplaceError):
    """A request argument is missing or out of range."""

    default_message = 'Invalid argument.'


class InsufficientStock(MarketplaceError):
    """The requested quantity exceeds the available stock."""

    default_message = 'Insufficient stock.'

    def __init__(self, message=None, available=None, requested=None):
        self.available = available
        self.requested = requested
        super().__init__(message)


class InvalidState(MarketplaceError):
    """The operation is not allowed from the order's current status."""

    default_message = 'Operation not allowed in the current state.'
