"""FastAPI routers package."""

from . import (
    agencies,
    approvals,
    auth,
    blogs,
    bookings,
    cars,
    community,
    dashboard,
    health,
    hotels,
    metrics,
    notifications,
    payments,
    trips,
    uploads,
    users,
    wallet,
)

__all__ = [
    "agencies",
    "approvals",
    "auth",
    "blogs",
    "bookings",
    "cars",
    "community",
    "dashboard",
    "health",
    "hotels",
    "metrics",
    "notifications",
    "payments",
    "trips",
    "uploads",
    "users",
    "wallet",
]
