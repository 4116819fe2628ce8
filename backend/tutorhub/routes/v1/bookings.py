# backend/tutorhub/routes/v1/bookings.py
"""
Bookings routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST /                            -> Request a booking (parent)
    GET /                             -> List the caller's bookings
    GET /{booking_id}                 -> Booking details (parties only)
    PATCH /{booking_id}/status        -> Confirm, cancel or complete
    POST /{booking_id}/retry-payment  -> Re-run a failed payment authorization
    POST /{booking_id}/confirm-payment -> Reconcile payment status with the processor
    GET /{booking_id}/earnings        -> Fee breakdown (teacher only)
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies.auth import get_acting_user, get_current_parent
from ...api.dependencies.services import get_booking_service
from ...core.constants import ULID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...principal import ActingUser
from ...schemas.booking import (
    BookingCreate,
    BookingCreatedResponse,
    BookingResponse,
    BookingStatusUpdate,
    EarningsResponse,
)
from ...services.booking_service import BookingCreated, BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _created_response(result: BookingCreated) -> BookingCreatedResponse:
    response = BookingCreatedResponse.model_validate(result.booking)
    response.client_secret = result.client_secret
    return response


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.post(
    "",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Teacher or subject not found"},
        409: {"description": "Time slot already booked"},
        422: {"description": "Teacher not accepting new students"},
        502: {"description": "Booking created but payment authorization failed"},
    },
)
async def create_booking(
    booking_data: BookingCreate = Body(...),
    current_user: ActingUser = Depends(get_current_parent),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingCreatedResponse:
    """
    Request a lesson.

    The booking is created pending and its price is authorized with the
    payment processor. If authorization fails the booking still exists;
    the 502 error body carries its id for retry-payment.
    """
    try:
        result = await asyncio.to_thread(
            booking_service.create_booking,
            current_user,
            teacher_profile_id=booking_data.teacher_profile_id,
            start_time=booking_data.start_time,
            end_time=booking_data.end_time,
            subject_id=booking_data.subject_id,
            notes=booking_data.notes,
        )
        return _created_response(result)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: ActingUser = Depends(get_acting_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """Teachers see bookings against their profile; parents see bookings they made."""
    try:
        bookings = await asyncio.to_thread(
            booking_service.list_bookings_for_user, current_user, status=status_filter
        )
        return [BookingResponse.model_validate(b) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Dynamic routes (with path parameters - placed last)
# ============================================================================


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_acting_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.get_booking_for_user, booking_id, current_user
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    responses={
        403: {"description": "Not a party, or parent asked for something other than cancel"},
        409: {"description": "Invalid transition, overlap, or concurrent modification"},
        422: {"description": "Late cancellation of a paid booking"},
    },
)
async def update_booking_status(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    update: BookingStatusUpdate = Body(...),
    current_user: ActingUser = Depends(get_acting_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.update_booking_status,
            booking_id,
            update.status,
            current_user,
            expected_version=update.expected_version,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/retry-payment", response_model=BookingCreatedResponse)
async def retry_payment(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_current_parent),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingCreatedResponse:
    try:
        result = await asyncio.to_thread(
            booking_service.retry_payment_authorization, booking_id, current_user
        )
        return _created_response(result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/confirm-payment", response_model=BookingResponse)
async def confirm_payment(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_acting_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.confirm_payment, booking_id, current_user
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_id}/earnings", response_model=EarningsResponse)
async def get_booking_earnings(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_acting_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> EarningsResponse:
    try:
        breakdown = await asyncio.to_thread(
            booking_service.get_booking_earnings, booking_id, current_user
        )
        return EarningsResponse.model_validate(breakdown)
    except DomainException as e:
        handle_domain_exception(e)
