# backend/tutorhub/core/exceptions.py
"""
Domain-specific exceptions for the TutorHub platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer
or turned into an ActionResult for the UI layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """Convert to HTTPException using the class status code."""
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised for malformed or out-of-range input, including bad interval ordering."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class PolicyException(DomainException):
    """Raised when a business rule refuses an otherwise well-formed request."""

    status_code = HTTP_422_UNPROCESSABLE
    default_code = "POLICY_VIOLATION"


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class PermissionDeniedException(DomainException):
    """Raised when the actor is not a party to the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = "PERMISSION_DENIED"


class InvalidTransitionException(DomainException):
    """Raised when a booking status change is not in the transition table."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "INVALID_TRANSITION"


class ExternalServiceException(DomainException):
    """Raised when the payment processor (or another collaborator) fails or times out."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "EXTERNAL_SERVICE_ERROR"


class UnauthorizedException(DomainException):
    """Raised when the identity provider supplied no usable identity."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"


class ServiceException(DomainException):
    """Raised for unexpected service-layer failures such as database errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "SERVICE_ERROR"


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking overlaps an existing confirmed booking."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot is already booked. Please choose another time.",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class DuplicateReviewException(ConflictException):
    """Raised when a booking already has its one review."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="You have already reviewed this booking",
            code="DUPLICATE_REVIEW",
            details={"booking_id": booking_id},
        )


class LateCancellationException(PolicyException):
    """Raised when a parent cancels a paid booking inside the notice window."""

    def __init__(self, required_hours: int, hours_until_start: float):
        super().__init__(
            message=(
                f"Cancellations with less than {required_hours} hours notice "
                "may not be eligible for refund"
            ),
            code="LATE_CANCELLATION",
            details={
                "required_hours": required_hours,
                "hours_until_start": round(hours_until_start, 2),
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
