"""
Lesson routes. Lessons are listed under their course and edited by id.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import AnyHttpUrl, Field, field_validator
from sqlalchemy.orm import Session

from teacha.api.middleware.auth import AUTHOR_ROLES, optional_auth, require_role
from teacha.api.schemas import CamelModel, LessonPublic, reject_null
from teacha.auth import Identity
from teacha.database.connection import get_db
from teacha.database.models import Lesson
from teacha.services import course_service
from teacha.utils.logger import get_logger
from teacha.utils.transaction import transaction_scope

logger = get_logger(__name__)

router = APIRouter()


class LessonCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    content: str = ""
    video_url: Optional[AnyHttpUrl] = None
    order: Optional[int] = Field(None, ge=0, description="Appended after the last lesson when omitted")
    duration: Optional[int] = Field(None, ge=0, description="Minutes")


class LessonUpdateRequest(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[AnyHttpUrl] = None
    order: Optional[int] = Field(None, ge=0)
    duration: Optional[int] = Field(None, ge=0)

    @field_validator("title", "content", "order", mode="before")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


def _lesson_values(data) -> dict:
    values = data.model_dump(exclude_unset=True)
    if values.get("video_url") is not None:
        values["video_url"] = str(values["video_url"])
    return values


@router.get("/courses/{course_id}/lessons")
async def list_lessons(
    course_id: UUID,
    identity: Optional[Identity] = Depends(optional_auth),
    db: Session = Depends(get_db)
):
    """List the lessons of a course in order."""
    course = course_service.get_readable_course(db, identity, course_id)
    return {"lessons": [LessonPublic.from_lesson(lesson) for lesson in course.lessons]}


@router.post("/courses/{course_id}/lessons", status_code=status.HTTP_201_CREATED)
async def create_lesson(
    course_id: UUID,
    data: LessonCreateRequest,
    identity: Identity = Depends(require_role(AUTHOR_ROLES)),
    db: Session = Depends(get_db)
):
    """Add a lesson to a course of the caller's tenant."""
    course = course_service.get_tenant_course(db, identity, course_id)

    values = _lesson_values(data)
    if values.get("order") is None:
        values["order"] = course_service.next_lesson_order(db, course.id)

    with transaction_scope(db):
        lesson = Lesson(course_id=course.id, **values)
        db.add(lesson)
    db.refresh(lesson)

    logger.info(f"Lesson created: {lesson.id} in course {course.id}")
    return {"message": "Lesson created successfully", "lesson": LessonPublic.from_lesson(lesson)}


@router.put("/lessons/{lesson_id}")
async def update_lesson(
    lesson_id: UUID,
    data: LessonUpdateRequest,
    identity: Identity = Depends(require_role(AUTHOR_ROLES)),
    db: Session = Depends(get_db)
):
    lesson = course_service.get_editable_lesson(db, identity, lesson_id)

    for field, value in _lesson_values(data).items():
        setattr(lesson, field, value)

    with transaction_scope(db):
        db.add(lesson)
    db.refresh(lesson)

    return {"message": "Lesson updated successfully", "lesson": LessonPublic.from_lesson(lesson)}


@router.delete("/lessons/{lesson_id}")
async def delete_lesson(
    lesson_id: UUID,
    identity: Identity = Depends(require_role(AUTHOR_ROLES)),
    db: Session = Depends(get_db)
):
    lesson = course_service.get_editable_lesson(db, identity, lesson_id)

    with transaction_scope(db):
        db.delete(lesson)

    logger.info(f"Lesson deleted: {lesson_id} by {identity.user_id}")
    return {"message": "Lesson deleted successfully"}
