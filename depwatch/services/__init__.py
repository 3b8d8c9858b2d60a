"""Service layer: subscription rules between the API routers and the DAOs.

Every :class:`ServiceError` is an expected outcome of bad client input and
is reported as HTTP 400.
"""

import uuid


class ServiceError(Exception):
    """Base service exception."""


class NotFoundError(ServiceError):
    """A referenced row does not exist."""


class SubscriptionNotFound(NotFoundError):
    def __init__(self, subscription_id: uuid.UUID) -> None:
        self.subscription_id = subscription_id
        super().__init__("subscription not found")


class ValidationError(ServiceError):
    """Input passed schema validation but breaks a business rule."""
