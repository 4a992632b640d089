import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from nepriziv.db.base import get_msk_datetime
from nepriziv.infrastructure.response import not_found_response, success_response
from nepriziv.models.profile import Profile
from nepriziv.models.testimonial import Testimonial
from nepriziv.models.user import User
from nepriziv.schemas.testimonial import TestimonialCreate
from nepriziv.utils.ids import parse_id

logger = logging.getLogger(__name__)

STATUSES = ("pending", "approved", "rejected")


class TestimonialService:
    """用户评价，审核后公开"""

    @staticmethod
    def _get(db: Session, testimonial_id) -> Optional[Testimonial]:
        tid = parse_id(testimonial_id)
        return db.query(Testimonial).filter(Testimonial.id == tid).first() if tid else None

    @staticmethod
    async def list_approved(db: Session, limit: int = 50):
        rows = (
            db.query(Testimonial)
            .filter(Testimonial.status == "approved")
            .order_by(Testimonial.approved_at.desc(), Testimonial.id.desc())
            .limit(limit)
            .all()
        )
        return success_response(data=[row.to_dict() for row in rows])

    @staticmethod
    async def submit(db: Session, user: User, data: TestimonialCreate):
        """作者名取自个人资料，没有则用email"""
        profile = db.query(Profile).filter(Profile.id == user.id).first()
        author_name = (profile.full_name if profile else None) or user.email or "Пользователь"
        try:
            testimonial = Testimonial(
                user_id=user.id,
                author_name=author_name,
                content=data.content,
                rating=data.rating,
                status="pending",
            )
            db.add(testimonial)
            db.commit()
            db.refresh(testimonial)
            return success_response(data=testimonial.to_dict(), msg="Спасибо! Отзыв будет опубликован после модерации")
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def list_all(db: Session, status: Optional[str] = None):
        query = db.query(Testimonial)
        if status:
            query = query.filter(Testimonial.status == status)
        rows = query.order_by(Testimonial.created_at.desc(), Testimonial.id.desc()).all()
        counts = dict(db.query(Testimonial.status, func.count(Testimonial.id)).group_by(Testimonial.status).all())
        return success_response(data={
            "items": [row.to_dict() for row in rows],
            "counts": {s: counts.get(s, 0) for s in STATUSES},
        })

    @staticmethod
    async def set_status(db: Session, testimonial_id: str, status: str):
        testimonial = TestimonialService._get(db, testimonial_id)
        if testimonial is None:
            return not_found_response("Отзыв")
        try:
            testimonial.status = status
            testimonial.approved_at = get_msk_datetime() if status == "approved" else None
            db.commit()
            db.refresh(testimonial)
            return success_response(data=testimonial.to_dict())
        except Exception as e:
            db.rollback()
            raise e

    @staticmethod
    async def delete(db: Session, testimonial_id: str):
        testimonial = TestimonialService._get(db, testimonial_id)
        if testimonial is None:
            return not_found_response("Отзыв")
        try:
            db.delete(testimonial)
            db.commit()
            return success_response(data={"id": str(testimonial.id)}, msg="Отзыв удалён")
        except Exception as e:
            db.rollback()
            raise e


testimonial_service = TestimonialService()
