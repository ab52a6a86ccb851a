"""Web application module for the finval onboarding and funding service."""

from .api import app
from .database import Account, Database, Transaction, User

__all__ = [
    "app",
    "Account",
    "Database",
    "Transaction",
    "User",
]
