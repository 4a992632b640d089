import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_client_ip, get_db, get_optional_user
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.analytics import AnalyticsEventCreate
from nepriziv.services.core.analytics_service import analytics_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/events")
async def record_event(
        data: AnalyticsEventCreate,
        request: Request,
        user: Optional[User] = Depends(get_optional_user),  # 可选会话
        db: Session = Depends(get_db),
):
    try:
        return await analytics_service.record_event(
            db,
            data,
            user=user,
            user_agent=request.headers.get("user-agent"),
            client_ip=get_client_ip(request),
        )
    except Exception as e:
        logger.warning(f"记录访问事件失败: {str(e)}")
        return error_response(msg=f"Ошибка записи события: {str(e)}", code=500)
