"""Agency and agency staff models, plus the moderation status shared by agency content."""

from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, TimestampMixin


class ApprovalStatus(str, Enum):
    """Moderation state of trips, hotels, cars and blogs."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Agency(TimestampMixin, Base):
    """A travel agency, owned by exactly one ``agency_owner`` user."""

    __tablename__ = "agencies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    agency_name: Mapped[str] = mapped_column(String(255), nullable=False)
    agency_unique_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    contact_email: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_phone: Mapped[str | None] = mapped_column(String(32))
    address: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(String(255))
    logo: Mapped[str | None] = mapped_column(Text)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Agency(id={self.id}, name={self.agency_name}, owner_id={self.owner_id})>"


class AgencyEmployee(TimestampMixin, Base):
    """Links an ``agency_employee`` user to the agency they work for."""

    __tablename__ = "agency_employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    agency_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("agencies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    position: Mapped[str | None] = mapped_column(String(100))

    def __repr__(self) -> str:
        return f"<AgencyEmployee(agency_id={self.agency_id}, employee_id={self.employee_id})>"
