import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_current_user, get_db
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.services.core.demo_service import demo_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/visit")
async def record_visit(
        request: Request,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    if not user.is_anonymous:
        return error_response(msg="Демо-режим доступен только для анонимной сессии", code=400)
    try:
        return await demo_service.record_visit(db, user, request.headers.get("user-agent"))
    except Exception as e:
        return error_response(msg=f"Ошибка записи визита: {str(e)}", code=500)


@router.get("/status")
async def get_status(
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    try:
        return await demo_service.get_status(db, user)
    except Exception as e:
        return error_response(msg=f"Ошибка получения демо-статуса: {str(e)}", code=500)
