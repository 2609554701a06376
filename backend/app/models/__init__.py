"""Aggregate model imports for Alembic auto-detection."""

from app.models.dealer import Dealer, DealerStatus  # noqa: F401
from app.models.user import User, UserStatus  # noqa: F401
