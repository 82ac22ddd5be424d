"""Database models."""

from amor_presente.db.models.base import Base
from amor_presente.db.models.accounts import (
    Admin,
    GuestUser,
    Profile,
    SiteUser,
)
from amor_presente.db.models.sites import (
    Layout,
    Site,
    SiteProduct,
    SiteRsvp,
)
from amor_presente.db.models.commerce import (
    Order,
    OrderItem,
    PlatformSettings,
    Product,
)

__all__ = [
    "Base",
    "Admin",
    "GuestUser",
    "Profile",
    "SiteUser",
    "Layout",
    "Site",
    "SiteProduct",
    "SiteRsvp",
    "Order",
    "OrderItem",
    "PlatformSettings",
    "Product",
]
