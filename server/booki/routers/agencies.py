"""Agency profile, employees and admin agency management."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, AdminUser, AgencyOwner, AgencyStaff
from ..models.user import User
from ..schemas.agency import (
    AgencyDetail,
    AgencyOut,
    CreateEmployeeRequest,
    EmployeeOut,
    UpdateAgencyRequest,
    UpdateEmployeeRequest,
)
from ..schemas.common import MessageResponse
from ..services.agency_service import AgencyService
from ..services.email_service import EmailService, get_email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/agency", tags=["agency"])
admin_router = APIRouter(prefix="/v1/admin/agencies", tags=["admin"])


@router.get("", response_model=AgencyOut)
async def get_my_agency(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> AgencyOut:
    agency = await AgencyService(db).get_agency_for_user(user)
    return AgencyOut.model_validate(agency)


@router.patch("", response_model=AgencyOut)
async def update_my_agency(
    request: UpdateAgencyRequest,
    user: User = AgencyOwner,
    db: AsyncSession = DB_DEPENDENCY,
) -> AgencyOut:
    agency = await AgencyService(db).update_profile(user, request)
    return AgencyOut.model_validate(agency)


@router.get("/employees", response_model=List[EmployeeOut])
async def list_employees(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> List[EmployeeOut]:
    return await AgencyService(db).list_employees(user)


@router.post("/employees", response_model=EmployeeOut, status_code=201)
async def add_employee(
    request: CreateEmployeeRequest,
    owner: User = AgencyOwner,
    db: AsyncSession = DB_DEPENDENCY,
) -> EmployeeOut:
    return await AgencyService(db).add_employee(owner, request)


@router.patch("/employees/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: int,
    request: UpdateEmployeeRequest,
    owner: User = AgencyOwner,
    db: AsyncSession = DB_DEPENDENCY,
) -> EmployeeOut:
    return await AgencyService(db).update_employee(owner, employee_id, request)


@router.delete("/employees/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: int,
    owner: User = AgencyOwner,
    db: AsyncSession = DB_DEPENDENCY,
) -> MessageResponse:
    await AgencyService(db).delete_employee(owner, employee_id)
    return MessageResponse(message="Employee removed")


@admin_router.get("", response_model=List[AgencyOut])
async def list_agencies(
    search: Optional[str] = Query(None, max_length=255, description="Name, unique id or contact email"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> List[AgencyOut]:
    agencies = await AgencyService(db).list_agencies(search, limit, offset)
    return [AgencyOut.model_validate(a) for a in agencies]


@admin_router.get("/{agency_id}", response_model=AgencyDetail)
async def get_agency(agency_id: int, admin: User = AdminUser, db: AsyncSession = DB_DEPENDENCY) -> AgencyDetail:
    return await AgencyService(db).get_agency_detail(agency_id)


@admin_router.post("/{agency_id}/verify", response_model=AgencyOut)
async def verify_agency(
    agency_id: int,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
    email_service: EmailService = Depends(get_email_service),
) -> AgencyOut:
    agency = await AgencyService(db).verify_agency(agency_id, email_service)
    return AgencyOut.model_validate(agency)
