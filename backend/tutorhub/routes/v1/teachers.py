# backend/tutorhub/routes/v1/teachers.py
"""
Teachers routes - API v1

Versioned teacher endpoints under /api/v1/teachers.
Profile, subject and search logic delegated to TeacherService;
availability delegated to AvailabilityService.

Endpoints:
    GET /                                   -> Search teachers accepting new students
    GET /subjects                           -> Subject catalog
    GET /me                                 -> Caller's profile (teacher)
    PUT /me                                 -> Create or update caller's profile
    PATCH /me/accepting                     -> Open/close to new students
    POST /me/subjects/{subject_id}          -> Offer a subject
    DELETE /me/subjects/{subject_id}        -> Stop offering a subject
    GET /me/availability                    -> Caller's weekly slots
    POST /me/availability                   -> Add a slot
    PUT /me/availability/{slot_id}          -> Update a slot
    DELETE /me/availability/{slot_id}       -> Delete a slot
    GET /{teacher_profile_id}               -> Public profile
    GET /{teacher_profile_id}/availability  -> Public weekly slots
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies.auth import get_current_teacher
from ...api.dependencies.services import get_availability_service, get_teacher_service
from ...core.constants import ULID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...principal import ActingUser
from ...schemas.availability import (
    AvailabilitySlotCreate,
    AvailabilitySlotResponse,
    AvailabilitySlotUpdate,
)
from ...schemas.base_responses import DeleteResponse
from ...schemas.teacher import (
    AcceptingStudentsUpdate,
    SubjectResponse,
    TeacherProfileResponse,
    TeacherProfileUpsert,
    TeacherSearchResponse,
    TeacherSearchResult,
)
from ...services.availability_service import AvailabilityService
from ...services.teacher_service import TeacherService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["teachers-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get("", response_model=TeacherSearchResponse)
async def search_teachers(
    q: Optional[str] = Query(None, max_length=200, description="Free-text search"),
    subject_id: Optional[List[str]] = Query(None),
    min_rate: Optional[int] = Query(None, ge=0, description="Minimum hourly rate in cents"),
    max_rate: Optional[int] = Query(None, ge=0, description="Maximum hourly rate in cents"),
    min_rating: Optional[float] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    teacher_service: TeacherService = Depends(get_teacher_service),
) -> TeacherSearchResponse:
    try:
        rows = await asyncio.to_thread(
            teacher_service.search_teachers,
            query=q,
            subject_ids=subject_id,
            min_rate=min_rate,
            max_rate=max_rate,
            min_rating=min_rating,
            limit=limit,
        )
        results = []
        for profile, average_rating, review_count in rows:
            result = TeacherSearchResult.from_profile(profile)
            result.average_rating = round(average_rating, 2)
            result.review_count = review_count
            results.append(result)
        return TeacherSearchResponse(results=results, total=len(results))
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/subjects", response_model=List[SubjectResponse])
async def list_subject_catalog(
    teacher_service: TeacherService = Depends(get_teacher_service),
) -> List[SubjectResponse]:
    subjects = await asyncio.to_thread(teacher_service.list_subjects)
    return [SubjectResponse.model_validate(s) for s in subjects]


@router.get("/me", response_model=TeacherProfileResponse)
async def get_my_profile(
    current_user: ActingUser = Depends(get_current_teacher),
    teacher_service: TeacherService = Depends(get_teacher_service),
) -> TeacherProfileResponse:
    try:
        profile = await asyncio.to_thread(teacher_service.get_profile_for_user, current_user)
        return TeacherProfileResponse.from_profile(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/me", response_model=TeacherProfileResponse)
async def upsert_my_profile(
    profile_data: TeacherProfileUpsert = Body(...),
    current_user: ActingUser = Depends(get_current_teacher),
    teacher_service: TeacherService = Depends(get_teacher_service),
) -> TeacherProfileResponse:
    try:
        profile = await asyncio.to_thread(
            teacher_service.upsert_profile, current_user, profile_data
        )
        return TeacherProfileResponse.from_profile(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/me/accepting", response_model=TeacherProfileResponse)
async def set_accepting_new_students(
    update: AcceptingStudentsUpdate = Body(...),
    current_user: ActingUser = Depends(get_current_teacher),
    teacher_service: TeacherService = Depends(get_teacher_service),
) -> TeacherProfileResponse:
    try:
        profile = await asyncio.to_thread(
            teacher_service.set_accepting_new_students,
            current_user,
            update.is_available_for_new_students,
        )
        return TeacherProfileResponse.from_profile(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/me/subjects/{subject_id}", response_model=List[SubjectResponse])
async def add_subject(
    subject_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_current_teacher),
    teacher_service: TeacherService = Depends(get_teacher_service),
) -> List[SubjectResponse]:
    try:
        subjects = await asyncio.to_thread(teacher_service.add_subject, current_user, subject_id)
        return [SubjectResponse.model_validate(s) for s in subjects]
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/me/subjects/{subject_id}", response_model=List[SubjectResponse])
async def remove_subject(
    subject_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_current_teacher),
    teacher_service: TeacherService = Depends(get_teacher_service),
) -> List[SubjectResponse]:
    try:
        subjects = await asyncio.to_thread(
            teacher_service.remove_subject, current_user, subject_id
        )
        return [SubjectResponse.model_validate(s) for s in subjects]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/me/availability", response_model=List[AvailabilitySlotResponse])
async def list_my_availability(
    current_user: ActingUser = Depends(get_current_teacher),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailabilitySlotResponse]:
    try:
        slots = await asyncio.to_thread(availability_service.list_own_slots, current_user)
        return [AvailabilitySlotResponse.model_validate(s) for s in slots]
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/me/availability",
    response_model=AvailabilitySlotResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_availability_slot(
    slot_data: AvailabilitySlotCreate = Body(...),
    current_user: ActingUser = Depends(get_current_teacher),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilitySlotResponse:
    try:
        slot = await asyncio.to_thread(availability_service.add_slot, current_user, slot_data)
        return AvailabilitySlotResponse.model_validate(slot)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/me/availability/{slot_id}", response_model=AvailabilitySlotResponse)
async def update_availability_slot(
    slot_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    slot_data: AvailabilitySlotUpdate = Body(...),
    current_user: ActingUser = Depends(get_current_teacher),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilitySlotResponse:
    try:
        slot = await asyncio.to_thread(
            availability_service.update_slot, current_user, slot_id, slot_data
        )
        return AvailabilitySlotResponse.model_validate(slot)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/me/availability/{slot_id}", response_model=DeleteResponse)
async def delete_availability_slot(
    slot_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_current_teacher),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DeleteResponse:
    try:
        await asyncio.to_thread(availability_service.delete_slot, current_user, slot_id)
        return DeleteResponse(message="Availability slot deleted")
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Dynamic routes (with path parameters - placed last)
# ============================================================================


@router.get("/{teacher_profile_id}", response_model=TeacherProfileResponse)
async def get_teacher(
    teacher_profile_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    teacher_service: TeacherService = Depends(get_teacher_service),
) -> TeacherProfileResponse:
    try:
        profile = await asyncio.to_thread(teacher_service.get_profile_details, teacher_profile_id)
        return TeacherProfileResponse.from_profile(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{teacher_profile_id}/availability", response_model=List[AvailabilitySlotResponse])
async def get_teacher_availability(
    teacher_profile_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailabilitySlotResponse]:
    try:
        slots = await asyncio.to_thread(availability_service.list_slots, teacher_profile_id)
        return [AvailabilitySlotResponse.model_validate(s) for s in slots]
    except DomainException as e:
        handle_domain_exception(e)
