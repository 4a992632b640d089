import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_ai_client, get_current_registered_user, get_db
from nepriziv.infrastructure.external_apis import AIGatewayClient
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
from nepriziv.schemas.profile import GovernmentStructuresRequest, ProfileUpdate
from nepriziv.services.core.profile_service import profile_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_profile(
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
):
    """获取个人资料，不存在时自动创建空资料"""
    try:
        return await profile_service.get_profile(db, user)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки профиля: {str(e)}", code=500)


@router.put("")
async def update_profile(
        data: ProfileUpdate,
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
):
    try:
        return await profile_service.update_profile(db, user, data)
    except Exception as e:
        return error_response(msg=f"Ошибка сохранения профиля: {str(e)}", code=500)


@router.post("/government-structures")
async def suggest_government_structures(
        data: GovernmentStructuresRequest,
        user: User = Depends(get_current_registered_user),
        db: Session = Depends(get_db),
        ai_client: AIGatewayClient = Depends(get_ai_client),  # AI网关客户端
):
    """
    按资料中的地址查询призывник相关机构，结果只返回不保存
    """
    try:
        return await profile_service.suggest_government_structures(db, user, data, ai_client)
    except Exception as e:
        return error_response(msg=f"Ошибка поиска госструктур: {str(e)}", code=500)
