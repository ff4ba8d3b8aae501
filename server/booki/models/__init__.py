"""Models module exporting all database models."""

from .agency import Agency, AgencyEmployee, ApprovalStatus
from .blog import Blog, BlogCategory
from .booking import (
    BookingKind,
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from .car import Car, CarBooking
from .chat import ChatMessage
from .favorite import Favorite
from .hotel import Hotel, Room, RoomBooking
from .notification import Notification, NotificationType
from .trip import Trip, TripActivity, TripBooking, TripImage
from .user import User, UserRole, UserSession
from .wallet import (
    TransactionStatus,
    TransactionType,
    Wallet,
    WalletTransaction,
    WithdrawalRequest,
    WithdrawalStatus,
)

__all__ = [
    # Accounts
    "User",
    "UserRole",
    "UserSession",
    "Agency",
    "AgencyEmployee",

    # Offers
    "ApprovalStatus",
    "Trip",
    "TripImage",
    "TripActivity",
    "Hotel",
    "Room",
    "Car",

    # Bookings
    "BookingKind",
    "BookingStatus",
    "PaymentStatus",
    "PaymentType",
    "PaymentMethod",
    "TripBooking",
    "RoomBooking",
    "CarBooking",

    # Money
    "Wallet",
    "WalletTransaction",
    "WithdrawalRequest",
    "TransactionType",
    "TransactionStatus",
    "WithdrawalStatus",

    # Community
    "Notification",
    "NotificationType",
    "ChatMessage",
    "Favorite",
    "Blog",
    "BlogCategory",
]
