import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_current_registered_user, get_db, get_mailer
from nepriziv.infrastructure.external_apis import ResendClient
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.services.core.subscription_service import subscription_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_subscription(
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
):
    """订阅记录和剩余免费额度"""
    try:
        return await subscription_service.get_subscription(db, user)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки подписки: {str(e)}", code=500)


@router.post("/payment-click")
async def payment_click(
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
        mailer: ResendClient = Depends(get_mailer),  # 邮件通知客户端
):
    """
    用户点击付款链接

    记录点击时间，写入联系表单记录并发邮件通知（邮件失败不影响结果）
    """
    try:
        return await subscription_service.register_payment_click(db, user, mailer)
    except Exception as e:
        return error_response(msg=f"Ошибка регистрации перехода к оплате: {str(e)}", code=500)
