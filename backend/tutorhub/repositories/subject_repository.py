# backend/tutorhub/repositories/subject_repository.py
"""
Subject Repository for the TutorHub platform

Subject catalog reads and the teacher-subject link table.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.teacher import Subject, TeacherSubject
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SubjectRepository(BaseRepository[Subject]):
    """Repository for subjects and teacher-subject links."""

    def __init__(self, db: Session):
        super().__init__(db, Subject)

    def list_all(self) -> List[Subject]:
        return cast(List[Subject], self._execute_query(self._build_query().order_by(Subject.name)))

    def get_link(self, teacher_profile_id: str, subject_id: str) -> Optional[TeacherSubject]:
        try:
            return cast(
                Optional[TeacherSubject],
                self.db.query(TeacherSubject)
                .filter(
                    TeacherSubject.teacher_profile_id == teacher_profile_id,
                    TeacherSubject.subject_id == subject_id,
                )
                .first(),
            )
        except Exception as e:
            self.logger.error(f"Error reading teacher subject link: {str(e)}")
            raise RepositoryException(f"Failed to read teacher subject: {str(e)}")

    def add_link(self, teacher_profile_id: str, subject_id: str) -> TeacherSubject:
        link = TeacherSubject(teacher_profile_id=teacher_profile_id, subject_id=subject_id)
        self.db.add(link)
        self.db.flush()
        return link

    def remove_link(self, link: TeacherSubject) -> None:
        self.db.delete(link)
        self.db.flush()

    def get_teacher_subjects(self, teacher_profile_id: str) -> List[Subject]:
        query = (
            self._build_query()
            .join(TeacherSubject, TeacherSubject.subject_id == Subject.id)
            .filter(TeacherSubject.teacher_profile_id == teacher_profile_id)
            .order_by(Subject.name)
        )
        return cast(List[Subject], self._execute_query(query))
