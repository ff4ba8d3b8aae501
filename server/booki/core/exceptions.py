"""Errors rendered as RFC 9457 Problem Details responses."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://booki.tn/problems"
PROBLEM_CONTENT_TYPE = "application/problem+json"


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.title = title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details: Dict[str, Any] = {
            "type": self.type_uri,
            "title": title,
            "status": status_code,
        }
        if detail:
            self.problem_details["detail"] = detail
        if instance:
            self.problem_details["instance"] = instance
        self.problem_details.update(self.extensions)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(ProblemDetailsException):
    """Request data that is well-formed but breaks a business rule."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        errors: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if errors:
            extensions["errors"] = errors

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Missing, invalid or revoked credentials."""

    def __init__(
        self,
        detail: str = "Authentication credentials are required",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/authentication-required",
            instance=instance,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Authenticated caller lacking the role or ownership required."""

    def __init__(
        self,
        detail: str = "Insufficient permissions to access this resource",
        required_roles: Optional[list] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if required_roles:
            extensions["required_roles"] = required_roles

        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/access-forbidden",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[Any] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id is not None:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions: Dict[str, Any] = {"resource_type": resource_type}
        if resource_id is not None:
            extensions["resource_id"] = str(resource_id)

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-conflict",
            instance=instance,
            extensions=extensions,
        )


class InternalServerError(ProblemDetailsException):
    """Exception for internal server errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/internal-server-error",
            instance=instance,
            extensions={
                "error_id": error_id or str(uuid.uuid4()),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )


# Business logic exceptions

class UnavailableError(ConflictError):
    """The offer cannot be booked for the requested seats or dates."""

    def __init__(
        self,
        detail: str,
        resource_type: str,
        resource_id: Any,
        instance: Optional[str] = None,
    ):
        super().__init__(
            detail=detail,
            conflicting_resource={"type": resource_type, "id": str(resource_id)},
            instance=instance,
        )
        self.problem_details.update(
            {
                "type": f"{PROBLEM_BASE_URI}/unavailable",
                "title": "Not Available",
                "code": "UNAVAILABLE",
            }
        )


class InsufficientCapacityError(UnavailableError):
    """Requested seats exceed the seats left on a trip."""

    def __init__(self, trip_id: int, requested: int, available: int):
        super().__init__(
            detail=f"Requested {requested} seat(s) but only {available} left",
            resource_type="trip",
            resource_id=trip_id,
        )
        self.problem_details.update(
            {"requested_seats": requested, "available_seats": available}
        )


class InsufficientBalanceError(ConflictError):
    """A withdrawal larger than the wallet balance."""

    def __init__(self, requested: Any, balance: Any):
        super().__init__(
            detail=f"Requested amount {requested} exceeds available balance {balance}",
        )
        self.problem_details.update(
            {
                "type": f"{PROBLEM_BASE_URI}/insufficient-balance",
                "title": "Insufficient Balance",
                "code": "INSUFFICIENT_BALANCE",
                "requested_amount": str(requested),
                "available_balance": str(balance),
            }
        )


class PaymentProviderError(ProblemDetailsException):
    """An external payment provider refused or failed a call."""

    def __init__(
        self,
        provider: str,
        detail: str = "The payment provider could not process the request",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=502,
            title="Payment Provider Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/payment-provider-error",
            instance=instance,
            extensions={"provider": provider, "code": "PAYMENT_PROVIDER_ERROR"},
        )


class UpstreamServiceError(ProblemDetailsException):
    """A non-payment external service (image CDN) failed or is not configured."""

    def __init__(
        self,
        service: str,
        detail: str = "An upstream service could not process the request",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=502,
            title="Upstream Service Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/upstream-service-error",
            instance=instance,
            extensions={"service": service, "code": "UPSTREAM_SERVICE_ERROR"},
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    content = dict(exc.problem_details)
    content.setdefault("instance", request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=exc.headers,
        media_type=PROBLEM_CONTENT_TYPE,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI request validation failures as Problem Details."""
    violations = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder(
            {
                "type": f"{PROBLEM_BASE_URI}/unprocessable-request",
                "title": "Unprocessable Request",
                "status": 422,
                "detail": "The request body or parameters are invalid",
                "instance": request.url.path,
                "violations": violations,
            }
        ),
        media_type=PROBLEM_CONTENT_TYPE,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={"error_id": error_id, "path": request.url.path, "method": request.method},
    )

    return await problem_details_handler(request, InternalServerError(error_id=error_id, instance=request.url.path))
