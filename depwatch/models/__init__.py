"""SQLAlchemy ORM models — one file per table."""

from depwatch.models.subscription import Subscription

__all__ = ["Subscription"]
