"""
Enrollment routes: enrolling in courses and tracking progress.
"""

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.orm import Session

from teacha.api.middleware.auth import require_auth
from teacha.api.schemas import CamelModel, EnrollmentPublic
from teacha.auth import Identity
from teacha.database.connection import get_db
from teacha.database.models import CourseStatus, Enrollment
from teacha.monitoring.prometheus_metrics import get_metrics
from teacha.services import course_service
from teacha.utils.exceptions import ConflictError, NotFoundError, ValidationError
from teacha.utils.logger import get_logger
from teacha.utils.transaction import transaction_scope

logger = get_logger(__name__)

router = APIRouter()

ALREADY_ENROLLED = "Already enrolled in this course"


class ProgressUpdateRequest(CamelModel):
    progress: int = Field(..., ge=0, le=100, description="Percent complete")


@router.post("/courses/{course_id}/enroll", status_code=status.HTTP_201_CREATED)
async def enroll(
    course_id: UUID,
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Enroll the caller in a published course of their tenant."""
    course = course_service.get_tenant_course(db, identity, course_id)
    if course.status != CourseStatus.PUBLISHED:
        raise ValidationError("Course is not open for enrollment")

    existing = db.query(Enrollment.id).filter(
        Enrollment.user_id == identity.user_uuid,
        Enrollment.course_id == course.id,
    ).first()
    if existing:
        raise ConflictError(ALREADY_ENROLLED)

    with transaction_scope(db, conflict_message=ALREADY_ENROLLED):
        enrollment = Enrollment(user_id=identity.user_uuid, course_id=course.id)
        db.add(enrollment)
    db.refresh(enrollment)
    get_metrics().track_enrollment()

    logger.info(f"User {identity.user_id} enrolled in course {course.id}")
    return {"message": "Enrolled successfully", "enrollment": EnrollmentPublic.from_enrollment(enrollment)}


@router.get("/enrollments/me")
async def my_enrollments(
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """List the caller's enrollments with their courses."""
    enrollments = (
        db.query(Enrollment)
        .filter(Enrollment.user_id == identity.user_uuid)
        .order_by(Enrollment.enrolled_at)
        .all()
    )
    return {
        "enrollments": [
            EnrollmentPublic.from_enrollment(enrollment, with_course=True) for enrollment in enrollments
        ]
    }


@router.patch("/enrollments/{enrollment_id}/progress")
async def update_progress(
    enrollment_id: UUID,
    data: ProgressUpdateRequest,
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """
    Record progress on an enrollment owned by the caller.

    Reaching 100 marks the enrollment completed; going back below clears it.
    """
    enrollment = db.get(Enrollment, enrollment_id)
    if enrollment is None or str(enrollment.user_id) != identity.user_id:
        raise NotFoundError("Enrollment")

    enrollment.progress = data.progress
    if data.progress == 100:
        if enrollment.completed_at is None:
            enrollment.completed_at = datetime.now(timezone.utc)
    else:
        enrollment.completed_at = None

    with transaction_scope(db):
        db.add(enrollment)
    db.refresh(enrollment)

    return {"enrollment": EnrollmentPublic.from_enrollment(enrollment)}
