"""
认证相关API接口模块

注册、登录、匿名（演示）会话以及当前用户信息。
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

# 数据库会话与认证依赖
from nepriziv.api.dependencies import get_current_user, get_db
# 统一响应格式工具
from nepriziv.infrastructure.response import error_response
from nepriziv.models.user import User
# 数据传输对象定义
from nepriziv.schemas.auth import LoginRequest, SignupRequest
# 核心业务服务层
from nepriziv.services.core.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


# 注册接口
@router.post("/signup")
async def signup(
        data: SignupRequest,  # 注册请求体
        db: Session = Depends(get_db),  # 数据库会话依赖注入
):
    """
    注册新用户

    Args:
        data (SignupRequest): email、password、full_name、phone（可选）
        db (Session): 数据库会话对象

    Returns:
        dict: {"access_token", "token_type", "user"}；email已存在时 code=400
    """
    try:
        return await auth_service.signup(db, data)
    except Exception as e:
        return error_response(msg=f"Ошибка регистрации: {str(e)}", code=500)


# 登录接口
@router.post("/login")
async def login(
        data: LoginRequest,
        db: Session = Depends(get_db),
):
    """email + 密码登录，失败时 code=401"""
    try:
        return await auth_service.login(db, data)
    except Exception as e:
        return error_response(msg=f"Ошибка входа: {str(e)}", code=500)


# 匿名会话（演示模式）
@router.post("/anonymous")
async def sign_in_anonymously(db: Session = Depends(get_db)):
    try:
        return await auth_service.sign_in_anonymously(db)
    except Exception as e:
        return error_response(msg=f"Не удалось создать демо-сессию: {str(e)}", code=500)


@router.get("/me")
async def me(
        user: User = Depends(get_current_user),  # 当前登录用户
        db: Session = Depends(get_db),
):
    try:
        return await auth_service.me(db, user)
    except Exception as e:
        return error_response(msg=f"Ошибка получения пользователя: {str(e)}", code=500)
