# backend/tutorhub/routes/v1/reviews.py
"""
Reviews routes - API v1

Versioned review endpoints under /api/v1/reviews.
All business logic delegated to ReviewService.

Endpoints:
    POST /                                  -> Submit a review (parent of a completed booking)
    GET /booking/{booking_id}               -> Review for a booking, if any
    GET /teacher/{teacher_profile_id}       -> Reviews about a teacher, newest first
    GET /teacher/{teacher_profile_id}/rating -> Average rating and count
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies.auth import get_acting_user
from ...api.dependencies.services import get_review_service
from ...core.constants import ULID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...principal import ActingUser
from ...schemas.review import ReviewCreate, ReviewResponse, TeacherRatingResponse
from ...services.review_service import ReviewService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["reviews-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"description": "Not the booking's parent"},
        409: {"description": "Booking already reviewed"},
        422: {"description": "Booking not completed"},
    },
)
async def submit_review(
    payload: ReviewCreate = Body(...),
    current_user: ActingUser = Depends(get_acting_user),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    try:
        review = await asyncio.to_thread(
            review_service.submit_review,
            payload.booking_id,
            payload.rating,
            payload.comment,
            current_user,
        )
        return ReviewResponse.from_review(review)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/booking/{booking_id}", response_model=Optional[ReviewResponse])
async def get_booking_review(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_acting_user),
    review_service: ReviewService = Depends(get_review_service),
) -> Optional[ReviewResponse]:
    try:
        review = await asyncio.to_thread(review_service.get_booking_review, booking_id)
        return ReviewResponse.from_review(review) if review is not None else None
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/teacher/{teacher_profile_id}", response_model=List[ReviewResponse])
async def get_teacher_reviews(
    teacher_profile_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    limit: int = Query(50, ge=1, le=100),
    review_service: ReviewService = Depends(get_review_service),
) -> List[ReviewResponse]:
    try:
        reviews = await asyncio.to_thread(
            review_service.get_teacher_reviews, teacher_profile_id, limit=limit
        )
        return [ReviewResponse.from_review(r) for r in reviews]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/teacher/{teacher_profile_id}/rating", response_model=TeacherRatingResponse)
async def get_teacher_rating(
    teacher_profile_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    review_service: ReviewService = Depends(get_review_service),
) -> TeacherRatingResponse:
    try:
        rating = await asyncio.to_thread(
            review_service.get_teacher_average_rating, teacher_profile_id
        )
        return TeacherRatingResponse(teacher_profile_id=teacher_profile_id, **rating)
    except DomainException as e:
        handle_domain_exception(e)
