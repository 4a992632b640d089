import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_current_registered_user, get_db
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.testimonial import TestimonialCreate
from nepriziv.services.core.testimonial_service import testimonial_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_testimonials(limit: int = 50, db: Session = Depends(get_db)):
    try:
        return await testimonial_service.list_approved(db, min(max(limit, 1), 200))
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки отзывов: {str(e)}", code=500)


@router.post("")
async def submit_testimonial(
        data: TestimonialCreate,
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
):
    try:
        return await testimonial_service.submit(db, user, data)
    except Exception as e:
        return error_response(msg=f"Ошибка отправки отзыва: {str(e)}", code=500)
