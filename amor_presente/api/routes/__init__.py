"""API route modules."""

from . import (
    admin,
    auth,
    checkout,
    guests,
    health,
    layouts,
    products,
    public,
    sites,
    uploads,
)

__all__ = [
    "admin",
    "auth",
    "checkout",
    "guests",
    "health",
    "layouts",
    "products",
    "public",
    "sites",
    "uploads",
]
