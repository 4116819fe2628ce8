# backend/tutorhub/services/teacher_service.py
"""
Teacher Service Layer

Handles teacher profiles, the subjects a teacher offers, the
accepting-new-students gate, and marketplace search.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.constants import (
    MAX_BIO_LENGTH,
    MAX_HOURLY_RATE_CENTS,
    MAX_YEARS_EXPERIENCE,
    MIN_BIO_LENGTH,
    MIN_HOURLY_RATE_CENTS,
)
from ..core.exceptions import (
    NotFoundException,
    PermissionDeniedException,
    ValidationException,
)
from ..models.teacher import Subject, TeacherProfile
from ..principal import ActingUser
from ..repositories.factory import RepositoryFactory
from ..repositories.teacher_profile_repository import SearchRow
from ..schemas.teacher import TeacherProfileUpsert
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


def _validate_text(field: str, value: str) -> str:
    text = (value or "").strip()
    if not MIN_BIO_LENGTH <= len(text) <= MAX_BIO_LENGTH:
        raise ValidationException(
            f"{field.capitalize()} must be between {MIN_BIO_LENGTH} and {MAX_BIO_LENGTH} characters",
            details={"field": field, "length": len(text)},
        )
    return text


class TeacherService(BaseService):
    """
    Service layer for teacher-related operations.

    Only users with the teacher role own a profile. Profiles are created once
    and then updated in place; they are never deleted because bookings
    reference them.
    """

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock=clock)
        self.profile_repository = RepositoryFactory.create_teacher_profile_repository(db)
        self.subject_repository = RepositoryFactory.create_subject_repository(db)

    def _require_teacher(self, actor: ActingUser) -> None:
        if not actor.is_teacher:
            raise PermissionDeniedException("Only teachers can manage a teacher profile")

    def _get_own_profile(self, actor: ActingUser) -> TeacherProfile:
        self._require_teacher(actor)
        profile = self.profile_repository.get_by_user_id(actor.id)
        if profile is None:
            raise NotFoundException("Teacher profile not found")
        return profile

    @staticmethod
    def _validate_profile(data: TeacherProfileUpsert) -> Dict[str, Any]:
        if not MIN_HOURLY_RATE_CENTS <= data.hourly_rate <= MAX_HOURLY_RATE_CENTS:
            raise ValidationException(
                f"Hourly rate must be between {MIN_HOURLY_RATE_CENTS} and "
                f"{MAX_HOURLY_RATE_CENTS} cents",
                details={"field": "hourly_rate"},
            )
        if not 0 <= data.years_of_experience <= MAX_YEARS_EXPERIENCE:
            raise ValidationException(
                f"Years of experience must be between 0 and {MAX_YEARS_EXPERIENCE}",
                details={"field": "years_of_experience"},
            )

        values: Dict[str, Any] = {
            "bio": _validate_text("bio", data.bio),
            "qualifications": _validate_text("qualifications", data.qualifications),
            "years_of_experience": data.years_of_experience,
            "hourly_rate": data.hourly_rate,
            "profile_picture": data.profile_picture,
        }
        if data.is_available_for_new_students is not None:
            values["is_available_for_new_students"] = data.is_available_for_new_students
        return values

    @BaseService.measure_operation("upsert_profile")
    def upsert_profile(self, actor: ActingUser, data: TeacherProfileUpsert) -> TeacherProfile:
        """
        Create the acting teacher's profile, or update it if it exists.

        Raises:
            PermissionDeniedException: Actor is not a teacher
            ValidationException: A field is out of range
        """
        self._require_teacher(actor)
        values = self._validate_profile(data)

        with self.transaction():
            profile = self.profile_repository.get_by_user_id(actor.id)
            if profile is None:
                profile = self.profile_repository.create(user_id=actor.id, **values)
                created = True
            else:
                for key, value in values.items():
                    setattr(profile, key, value)
                profile.updated_at = self.now()
                self.profile_repository.flush()
                created = False

        self.log_operation(
            "upsert_profile", teacher_profile_id=profile.id, user_id=actor.id, created=created
        )
        return profile

    @BaseService.measure_operation("get_profile_for_user")
    def get_profile_for_user(self, actor: ActingUser) -> TeacherProfile:
        return self._get_own_profile(actor)

    @BaseService.measure_operation("get_profile_details")
    def get_profile_details(self, profile_id: str) -> TeacherProfile:
        profile = self.profile_repository.get_by_id(profile_id)
        if profile is None:
            raise NotFoundException("Teacher profile not found")
        return profile

    @BaseService.measure_operation("set_accepting_new_students")
    def set_accepting_new_students(self, actor: ActingUser, is_available: bool) -> TeacherProfile:
        """Open or close the teacher to new booking requests."""
        profile = self._get_own_profile(actor)
        with self.transaction():
            profile.is_available_for_new_students = is_available
            profile.updated_at = self.now()

        self.log_operation(
            "set_accepting_new_students", teacher_profile_id=profile.id, is_available=is_available
        )
        return profile

    @BaseService.measure_operation("list_subjects")
    def list_subjects(self, teacher_profile_id: Optional[str] = None) -> List[Subject]:
        """The whole catalog, or the subjects one teacher offers."""
        if teacher_profile_id is None:
            return self.subject_repository.list_all()
        self.get_profile_details(teacher_profile_id)
        return self.subject_repository.get_teacher_subjects(teacher_profile_id)

    @BaseService.measure_operation("add_subject")
    def add_subject(self, actor: ActingUser, subject_id: str) -> List[Subject]:
        """Offer a subject. Adding one already offered is a no-op."""
        profile = self._get_own_profile(actor)
        if self.subject_repository.get_by_id(subject_id) is None:
            raise NotFoundException("Subject not found")

        with self.transaction():
            if self.subject_repository.get_link(profile.id, subject_id) is None:
                self.subject_repository.add_link(profile.id, subject_id)
            self.db.expire(profile, ["subjects"])

        return self.subject_repository.get_teacher_subjects(profile.id)

    @BaseService.measure_operation("remove_subject")
    def remove_subject(self, actor: ActingUser, subject_id: str) -> List[Subject]:
        profile = self._get_own_profile(actor)
        link = self.subject_repository.get_link(profile.id, subject_id)
        if link is None:
            raise NotFoundException("Subject is not offered by this teacher")

        with self.transaction():
            self.subject_repository.remove_link(link)
            self.db.expire(profile, ["subjects"])

        return self.subject_repository.get_teacher_subjects(profile.id)

    @BaseService.measure_operation("search_teachers")
    def search_teachers(
        self,
        query: Optional[str] = None,
        subject_ids: Optional[Sequence[str]] = None,
        min_rate: Optional[int] = None,
        max_rate: Optional[int] = None,
        min_rating: Optional[float] = None,
        limit: int = 50,
    ) -> List[SearchRow]:
        """
        Search teachers accepting new students.

        Args:
            query: Free text matched against name, bio and qualifications
            subject_ids: Only teachers offering at least one of these subjects
            min_rate: Minimum hourly rate in cents
            max_rate: Maximum hourly rate in cents
            min_rating: Minimum average rating
            limit: Maximum number of results

        Returns:
            List of (profile, average rating, review count)
        """
        if min_rate is not None and max_rate is not None and min_rate > max_rate:
            raise ValidationException("min_rate cannot be greater than max_rate")
        if min_rating is not None and not 0 <= min_rating <= 5:
            raise ValidationException("min_rating must be between 0 and 5")

        results = self.profile_repository.search(
            query_text=query,
            subject_ids=subject_ids,
            min_rate=min_rate,
            max_rate=max_rate,
            min_rating=min_rating,
            limit=limit,
        )
        self.logger.debug(f"Teacher search returned {len(results)} results")
        return results
