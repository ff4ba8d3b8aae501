"""Agency service: profile, staff and agency resolution."""

import logging
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..core.security import hash_password
from ..models.agency import Agency, AgencyEmployee
from ..models.blog import Blog
from ..models.car import Car, CarBooking
from ..models.hotel import Hotel, Room, RoomBooking
from ..models.trip import Trip, TripBooking
from ..models.user import User, UserRole, UserSession
from ..schemas.agency import (
    AgencyDetail,
    CreateEmployeeRequest,
    EmployeeOut,
    UpdateAgencyRequest,
    UpdateEmployeeRequest,
)
from .email_service import EmailService

logger = logging.getLogger(__name__)


class AgencyService:
    """Service for agency-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_agency_by_id(self, agency_id: int) -> Agency:
        agency = await self.db.get(Agency, agency_id)
        if agency is None:
            raise NotFoundError("agency", agency_id)
        return agency

    async def find_agency_for_user(self, user: User) -> Optional[Agency]:
        """The agency ``user`` owns or works for, if any."""
        if user.role == UserRole.AGENCY_OWNER:
            result = await self.db.execute(select(Agency).where(Agency.owner_id == user.id))
            return result.scalar_one_or_none()
        if user.role == UserRole.AGENCY_EMPLOYEE:
            result = await self.db.execute(
                select(Agency)
                .join(AgencyEmployee, AgencyEmployee.agency_id == Agency.id)
                .where(AgencyEmployee.employee_id == user.id)
            )
            return result.scalar_one_or_none()
        return None

    async def get_agency_for_user(self, user: User) -> Agency:
        """
        Resolve the agency of an agency owner or employee.

        Raises:
            AuthorizationError: If the user is not attached to an agency
        """
        agency = await self.find_agency_for_user(user)
        if agency is None:
            raise AuthorizationError("You are not attached to an agency")
        return agency

    async def ensure_staff_of(self, user: User, agency_id: int) -> None:
        """Admins pass; agency staff must belong to ``agency_id``."""
        if user.role == UserRole.ADMIN:
            return
        agency = await self.find_agency_for_user(user)
        if agency is None or agency.id != agency_id:
            raise AuthorizationError("This resource belongs to another agency")

    async def update_profile(self, user: User, request: UpdateAgencyRequest) -> Agency:
        """
        Update the agency profile. Only the owner may do this.

        Raises:
            AuthorizationError: If the caller is an employee
        """
        if user.role != UserRole.AGENCY_OWNER:
            raise AuthorizationError("Only the agency owner can update the profile")
        agency = await self.get_agency_for_user(user)

        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(agency, field, value)

        await self.db.commit()
        await self.db.refresh(agency)
        logger.info("Agency profile updated", extra={"agency_id": agency.id})
        return agency

    # Employees

    async def list_employees(self, user: User) -> list[EmployeeOut]:
        agency = await self.get_agency_for_user(user)
        result = await self.db.execute(
            select(AgencyEmployee, User)
            .join(User, User.id == AgencyEmployee.employee_id)
            .where(AgencyEmployee.agency_id == agency.id)
            .order_by(AgencyEmployee.created_at)
        )
        return [self._employee_out(link, employee) for link, employee in result.all()]

    async def add_employee(self, owner: User, request: CreateEmployeeRequest) -> EmployeeOut:
        """
        Create an employee account attached to the owner's agency.

        Raises:
            ConflictError: If the email is already registered
        """
        agency = await self.get_agency_for_user(owner)
        email = request.email.lower()

        existing = await self.db.scalar(select(User.id).where(User.email == email))
        if existing is not None:
            raise ConflictError(
                detail="An account with this email already exists",
                conflicting_resource={"email": email},
            )

        employee = User(
            name=request.name,
            email=email,
            password_hash=hash_password(request.password),
            phone_number=request.phone_number,
            role=UserRole.AGENCY_EMPLOYEE,
        )
        self.db.add(employee)
        await self.db.flush()

        link = AgencyEmployee(agency_id=agency.id, employee_id=employee.id, position=request.position)
        self.db.add(link)
        await self.db.commit()

        logger.info(
            "Agency employee added",
            extra={"agency_id": agency.id, "employee_id": employee.id},
        )
        return self._employee_out(link, employee)

    async def _get_employee(self, agency: Agency, employee_id: int) -> tuple[AgencyEmployee, User]:
        result = await self.db.execute(
            select(AgencyEmployee, User)
            .join(User, User.id == AgencyEmployee.employee_id)
            .where(AgencyEmployee.agency_id == agency.id, AgencyEmployee.employee_id == employee_id)
        )
        row = result.first()
        if row is None:
            raise NotFoundError("employee", employee_id)
        return row[0], row[1]

    async def update_employee(
        self,
        owner: User,
        employee_id: int,
        request: UpdateEmployeeRequest,
    ) -> EmployeeOut:
        agency = await self.get_agency_for_user(owner)
        link, employee = await self._get_employee(agency, employee_id)

        data = request.model_dump(exclude_unset=True)
        if "position" in data:
            link.position = data.pop("position")
        for field, value in data.items():
            setattr(employee, field, value)

        await self.db.commit()
        return self._employee_out(link, employee)

    async def delete_employee(self, owner: User, employee_id: int) -> None:
        """Remove an employee and their account."""
        agency = await self.get_agency_for_user(owner)
        link, employee = await self._get_employee(agency, employee_id)

        await self.db.execute(delete(UserSession).where(UserSession.user_id == employee.id))
        await self.db.execute(delete(AgencyEmployee).where(AgencyEmployee.id == link.id))
        await self.db.execute(delete(User).where(User.id == employee.id))
        await self.db.commit()

        logger.info(
            "Agency employee removed",
            extra={"agency_id": agency.id, "employee_id": employee_id},
        )

    @staticmethod
    def _employee_out(link: AgencyEmployee, employee: User) -> EmployeeOut:
        return EmployeeOut(
            user_id=employee.id,
            name=employee.name,
            email=employee.email,
            phone_number=employee.phone_number,
            position=link.position,
            joined_at=link.created_at,
        )

    # Admin

    async def list_agencies(self, search: Optional[str] = None, limit: int = 50, offset: int = 0) -> list[Agency]:
        query = select(Agency)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(Agency.agency_name).like(pattern),
                    func.lower(Agency.agency_unique_id).like(pattern),
                    func.lower(Agency.contact_email).like(pattern),
                )
            )
        query = query.order_by(Agency.created_at.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_agency_detail(self, agency_id: int) -> AgencyDetail:
        agency = await self.get_agency_by_id(agency_id)
        owner = await self.db.get(User, agency.owner_id)

        async def count(query) -> int:
            return (await self.db.scalar(query)) or 0

        trip_bookings = await count(
            select(func.count(TripBooking.id)).join(Trip, Trip.id == TripBooking.trip_id).where(Trip.agency_id == agency_id)
        )
        room_bookings = await count(
            select(func.count(RoomBooking.id))
            .join(Room, Room.id == RoomBooking.room_id)
            .join(Hotel, Hotel.id == Room.hotel_id)
            .where(Hotel.agency_id == agency_id)
        )
        car_bookings = await count(
            select(func.count(CarBooking.id)).join(Car, Car.id == CarBooking.car_id).where(Car.agency_id == agency_id)
        )

        return AgencyDetail(
            **{c.key: getattr(agency, c.key) for c in Agency.__table__.columns},
            owner_name=owner.name if owner else "",
            owner_email=owner.email if owner else "",
            trip_count=await count(select(func.count(Trip.id)).where(Trip.agency_id == agency_id)),
            hotel_count=await count(select(func.count(Hotel.id)).where(Hotel.agency_id == agency_id)),
            car_count=await count(select(func.count(Car.id)).where(Car.agency_id == agency_id)),
            blog_count=await count(select(func.count(Blog.id)).where(Blog.agency_id == agency_id)),
            employee_count=await count(
                select(func.count(AgencyEmployee.id)).where(AgencyEmployee.agency_id == agency_id)
            ),
            booking_count=trip_bookings + room_bookings + car_bookings,
        )

    async def verify_agency(self, agency_id: int, email_service: EmailService) -> Agency:
        agency = await self.get_agency_by_id(agency_id)
        agency.is_verified = True
        await self.db.commit()
        await self.db.refresh(agency)

        logger.info("Agency verified", extra={"agency_id": agency_id})
        await email_service.send_agency_verified(agency.contact_email, agency.agency_name)
        return agency
