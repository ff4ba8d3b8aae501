"""Service layer package."""

from .agency_service import AgencyService
from .approval_service import ApprovalService
from .auth_service import AuthService
from .blog_service import BlogService
from .booking_service import BookingService
from .car_booking_service import CarBookingService
from .car_service import CarService
from .chat_service import ChatService
from .dashboard_service import DashboardService
from .email_service import EmailService
from .favorite_service import FavoriteService
from .hotel_service import HotelService
from .invoice_service import InvoiceService
from .notification_service import NotificationService
from .payment_service import PaymentService
from .room_booking_service import RoomBookingService
from .trip_booking_service import TripBookingService
from .trip_service import TripService
from .upload_service import UploadService
from .user_service import UserService
from .wallet_service import WalletService
from .withdrawal_service import WithdrawalService

__all__ = [
    "AgencyService",
    "ApprovalService",
    "AuthService",
    "BlogService",
    "BookingService",
    "CarBookingService",
    "CarService",
    "ChatService",
    "DashboardService",
    "EmailService",
    "FavoriteService",
    "HotelService",
    "InvoiceService",
    "NotificationService",
    "PaymentService",
    "RoomBookingService",
    "TripBookingService",
    "TripService",
    "UploadService",
    "UserService",
    "WalletService",
    "WithdrawalService",
]
