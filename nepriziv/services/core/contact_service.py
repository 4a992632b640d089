import logging
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from nepriziv.core.config import settings
from nepriziv.infrastructure.rate_limit import FixedWindowRateLimiter
from nepriziv.infrastructure.response import (
    error_response,
    not_found_response,
    success_response,
    validation_error_response,
)
from nepriziv.models.contact import ContactSubmission
from nepriziv.schemas.common import format_validation_errors
from nepriziv.schemas.contact import ContactRequest, ContactStatusUpdate
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)

contact_rate_limiter = FixedWindowRateLimiter(
    window_seconds=settings.CONTACT_RATE_LIMIT_WINDOW_SECONDS,
    max_requests=settings.CONTACT_RATE_LIMIT_MAX,
)


class ContactService:
    """
    联系表单

    先按IP限流（每次尝试都计数），再校验字段
    """

    @staticmethod
    async def submit(db: Session, body: Any, client_ip: str, user_agent: Optional[str] = None):
        limit = contact_rate_limiter.hit(client_ip)
        if not limit.allowed:
            logger.warning(f"联系表单限流: ip={client_ip}")
            return error_response(
                msg=f"Пожалуйста, подождите {limit.retry_after_minutes} мин. перед следующей заявкой",
                code=429,
                data={"error": "Слишком частые запросы"},
            )

        try:
            data = ContactRequest.model_validate(body if isinstance(body, dict) else {})
        except ValidationError as e:
            return validation_error_response(format_validation_errors(e.errors()))

        try:
            submission = ContactSubmission(
                name=data.name,
                phone=data.phone,
                email=data.email,
                message=data.message,
                status="new",
                ip_address=client_ip,
                user_agent=user_agent,
            )
            db.add(submission)
            db.commit()
            db.refresh(submission)
        except Exception as e:
            db.rollback()
            raise e

        logger.info(f"新联系表单: id={submission.id}, ip={client_ip}")
        return success_response(data={
            "success": True,
            "message": "Заявка успешно отправлена",
            "id": str(submission.id),
        })

    @staticmethod
    async def list_submissions(db: Session, status: Optional[str] = None, page: int = 1, limit: int = 50):
        query = db.query(ContactSubmission)
        if status:
            query = query.filter(ContactSubmission.status == status)
        query = query.order_by(ContactSubmission.created_at.desc(), ContactSubmission.id.desc())
        total = query.count()
        items = [row.to_dict() for row in query.offset((page - 1) * limit).limit(limit).all()]
        return success_response(data={"total": total, "items": items})

    @staticmethod
    async def update_status(db: Session, submission_id: str, data: ContactStatusUpdate):
        sid = parse_id(submission_id)
        submission = db.query(ContactSubmission).filter(ContactSubmission.id == sid).first() if sid else None
        if submission is None:
            return not_found_response("Заявка", feminine=True)
        try:
            submission.status = data.status
            db.commit()
            db.refresh(submission)
            return success_response(data=submission.to_dict())
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete_submission(db: Session, submission_id: str):
        sid = parse_id(submission_id)
        submission = db.query(ContactSubmission).filter(ContactSubmission.id == sid).first() if sid else None
        if submission is None:
            return not_found_response("Заявка", feminine=True)
        try:
            db.delete(submission)
            db.commit()
            return success_response(data={"id": str(submission.id)}, msg="Заявка удалена")
        except Exception as e:
            db.rollback()
            raise e


contact_service = ContactService()
